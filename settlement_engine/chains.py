"""
Chain table: native currency, price lookup ids, RPC endpoints and deployed contracts.

Testnets point at their mainnet for price lookups (testnet coins have no
market price). RPC URLs and contract addresses can be overridden per chain
under `chains:` in settlement.yaml.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from . import config
from .core.errors import UnsupportedChainError

logger = logging.getLogger(__name__)

DEFAULT_NATIVE_DECIMALS = 18
HEDERA_CHAIN_IDS = frozenset({295, 296})


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    native_symbol: str
    native_decimals: int = DEFAULT_NATIVE_DECIMALS
    coingecko_id: Optional[str] = None
    is_testnet: bool = False
    mainnet_id: Optional[int] = None
    rpc_url: Optional[str] = None
    contract_addresses: Dict[str, str] = field(default_factory=dict)


def _main(chain_id: int, name: str, symbol: str, coingecko_id: str, **kw) -> ChainConfig:
    return ChainConfig(chain_id, name, symbol, coingecko_id=coingecko_id, **kw)


def _test(chain_id: int, name: str, symbol: str, mainnet_id: Optional[int], **kw) -> ChainConfig:
    return ChainConfig(chain_id, name, symbol, is_testnet=True, mainnet_id=mainnet_id, **kw)


_CHAIN_LIST: List[ChainConfig] = [
    # Mainnets
    _main(1, "Ethereum", "ETH", "ethereum"),
    _main(56, "BSC", "BNB", "binancecoin"),
    _main(137, "Polygon", "MATIC", "matic-network"),
    _main(42161, "Arbitrum", "ETH", "ethereum"),
    _main(10, "Optimism", "ETH", "ethereum"),
    _main(43114, "Avalanche", "AVAX", "avalanche-2"),
    _main(8453, "Base", "ETH", "ethereum"),
    _main(324, "zkSync Era", "ETH", "ethereum"),
    _main(59144, "Linea", "ETH", "ethereum"),
    _main(534352, "Scroll", "ETH", "ethereum"),
    _main(250, "Fantom", "FTM", "fantom"),
    _main(25, "Cronos", "CRO", "crypto-com-chain"),
    _main(169, "Manta Pacific", "ETH", "ethereum"),
    _main(81457, "Blast", "ETH", "ethereum"),
    _main(196, "X Layer", "OKB", "okb"),
    _main(100, "Gnosis", "XDAI", "xdai"),
    _main(5000, "Mantle", "MNT", "mantle"),
    _main(1101, "Polygon zkEVM", "ETH", "ethereum"),
    _main(66, "OKTC", "OKT", "oec-token"),
    _main(204, "opBNB", "BNB", "binancecoin"),
    _main(167000, "Taiko", "ETH", "ethereum"),
    _main(34443, "Mode", "ETH", "ethereum"),
    _main(7000, "Zeta", "ZETA", "zetachain"),
    _main(4200, "Merlin", "BTC", "bitcoin"),
    _main(369, "PulseChain", "PLS", "pulsechain"),
    _main(1329, "Sei EVM", "SEI", "sei-network"),
    _main(33139, "ApeChain", "APE", "apecoin"),
    _main(88888, "Chiliz Chain", "CHZ", "chiliz"),
    _main(13371, "Immutable zkEVM", "IMX", "immutable-x"),
    _main(130, "Unichain", "ETH", "ethereum"),
    _main(1030, "Conflux eSpace", "CFX", "conflux-token"),
    _main(200901, "Bitlayer", "BTC", "bitcoin"),
    _main(60808, "BOB", "ETH", "ethereum"),
    _main(10001, "EthereumPoW", "ETHW", "ethereum-pow"),
    _main(4689, "IoTeX", "IOTX", "iotex"),
    _main(146, "Sonic", "S", "sonic"),
    _main(223, "B² Network", "BTC", "bitcoin"),
    _main(
        2818,
        "Morph",
        "ETH",
        "ethereum",
        rpc_url="https://rpc-quicknode.morphl2.io",
        contract_addresses={"subscription_manager": "", "escrow_core": ""},
    ),
    _main(
        295,
        "Hedera",
        "HBAR",
        "hedera-hashgraph",
        native_decimals=8,
        rpc_url="https://mainnet.hashio.io/api",
    ),
    # Testnets
    _test(11155111, "Sepolia", "ETH", 1),
    _test(17000, "Holesky", "ETH", 1),
    _test(5, "Goerli", "ETH", 1),
    _test(97, "BSC Testnet", "BNB", 56),
    _test(80002, "Polygon Amoy", "MATIC", 137),
    _test(80001, "Mumbai", "MATIC", 137),
    _test(421614, "Arbitrum Sepolia", "ETH", 42161),
    _test(421613, "Arbitrum Goerli", "ETH", 42161),
    _test(11155420, "Optimism Sepolia", "ETH", 10),
    _test(420, "Optimism Goerli", "ETH", 10),
    _test(43113, "Avalanche Fuji", "AVAX", 43114),
    _test(84532, "Base Sepolia", "ETH", 8453),
    _test(84531, "Base Goerli", "ETH", 8453),
    _test(300, "zkSync Sepolia", "ETH", 324),
    _test(280, "zkSync Goerli", "ETH", 324),
    _test(59141, "Linea Sepolia", "ETH", 59144),
    _test(59140, "Linea Goerli", "ETH", 59144),
    _test(534351, "Scroll Sepolia", "ETH", 534352),
    _test(195, "X Layer Testnet", "OKB", 196),
    _test(80094, "Berachain Testnet", "BERA", None),
    _test(
        2810,
        "Morph Testnet",
        "ETH",
        2818,
        rpc_url="https://rpc-quicknode-holesky.morphl2.io",
        contract_addresses={
            "subscription_manager": "0x9a667b845034dDf18B7a5a9b50e2fe8CD4e6e2C1",
            "escrow_core": "0xF5FCDBe9d4247D76c7fa5d2E06dBA1e77887F518",
        },
    ),
    _test(
        296,
        "Hedera Testnet",
        "HBAR",
        295,
        native_decimals=8,
        rpc_url="https://testnet.hashio.io/api",
    ),
]

CHAINS: Dict[int, ChainConfig] = {c.chain_id: c for c in _CHAIN_LIST}


def _as_chain_id(chain_id: Union[int, str]) -> int:
    try:
        return int(chain_id)
    except (TypeError, ValueError):
        raise UnsupportedChainError(chain_id) from None


def get_chain_config(chain_id: Union[int, str]) -> ChainConfig:
    """Chain entry with settlement.yaml overrides applied. Raises UnsupportedChainError."""
    cid = _as_chain_id(chain_id)
    base = CHAINS.get(cid)
    if base is None:
        raise UnsupportedChainError(cid)
    overrides = config.chain_overrides(cid)
    if not overrides:
        return base
    addresses = dict(base.contract_addresses)
    addresses.update(overrides.get("contract_addresses") or {})
    return replace(
        base,
        rpc_url=overrides.get("rpc_url", base.rpc_url),
        contract_addresses=addresses,
    )


def is_supported_chain(chain_id: Union[int, str]) -> bool:
    try:
        return _as_chain_id(chain_id) in CHAINS
    except UnsupportedChainError:
        return False


def supported_chain_ids(include_testnets: bool = True) -> List[int]:
    return sorted(c.chain_id for c in _CHAIN_LIST if include_testnets or not c.is_testnet)


def native_decimals(chain_id: Union[int, str]) -> int:
    """Native currency decimals; unknown chains fall back to 18."""
    chain = CHAINS.get(_as_chain_id(chain_id))
    if chain is None:
        logger.debug("No chain entry for %s, assuming %d decimals", chain_id, DEFAULT_NATIVE_DECIMALS)
        return DEFAULT_NATIVE_DECIMALS
    return chain.native_decimals


def native_symbol(chain_id: Union[int, str]) -> str:
    return get_chain_config(chain_id).native_symbol


def coingecko_price_id(chain_id: Union[int, str]) -> str:
    """CoinGecko id used for pricing; testnets resolve through their mainnet."""
    chain = get_chain_config(chain_id)
    if chain.coingecko_id:
        return chain.coingecko_id
    if chain.mainnet_id is not None and chain.mainnet_id in CHAINS:
        mainnet = CHAINS[chain.mainnet_id]
        if mainnet.coingecko_id:
            return mainnet.coingecko_id
    # No mainnet to price against: fall back to the symbol
    return chain.native_symbol.lower()
