"""
web3.py implementation of ContractAccess.

Reads go over JSON-RPC through with_retry (transport errors and 5xx are
retried; reverts are not). Writes are never sent from here: build_transaction
returns an unsigned TransactionConfig for the user's wallet to sign.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, TypeVar

import requests
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from ..chains import get_chain_config
from ..core.errors import ContractUnavailableError, RpcError, UnsupportedChainError
from ..providers.base import RetryPolicy
from ..providers.resilience import with_retry
from .abi import ESCROW_CORE_ABI, PLAN_FEE_TIER_INDEX, SUBSCRIPTION_MANAGER_ABI
from .base import KNOWN_PLAN_KEYS, ContractName
from .calls import TransactionConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTRACT_READ_RETRY = RetryPolicy(max_retries=3, min_delay_s=0.5, max_delay_s=3.0, backoff_multiplier=1.5)
RPC_TIMEOUT_S = 15.0

_ABIS = {
    ContractName.ESCROW_CORE: ESCROW_CORE_ABI,
    ContractName.SUBSCRIPTION_MANAGER: SUBSCRIPTION_MANAGER_ABI,
}


def default_web3_factory(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": RPC_TIMEOUT_S}))


class Web3ContractGateway:
    """ContractAccess over web3.py. One Web3 client per chain, created lazily."""

    def __init__(
        self,
        web3_factory: Callable[[str], Any] = default_web3_factory,
        retry: RetryPolicy = CONTRACT_READ_RETRY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._web3_factory = web3_factory
        self._retry = retry
        self._sleep = sleep
        self._lock = threading.Lock()
        self._clients: Dict[int, Any] = {}

    def get_contract_address(self, contract_name: str, chain_id: int) -> Optional[str]:
        try:
            config = get_chain_config(chain_id)
        except UnsupportedChainError:
            logger.debug("No chain config for %s; %s treated as not deployed", chain_id, contract_name)
            return None
        return config.contract_addresses.get(contract_name) or None

    def _client(self, chain_id: int) -> Any:
        with self._lock:
            client = self._clients.get(chain_id)
            if client is None:
                rpc_url = get_chain_config(chain_id).rpc_url
                if not rpc_url:
                    raise RpcError(chain_id, "no RPC URL configured")
                client = self._web3_factory(rpc_url)
                self._clients[chain_id] = client
            return client

    def _contract(self, contract_name: str, chain_id: int) -> Any:
        address = self.get_contract_address(contract_name, chain_id)
        if address is None:
            raise ContractUnavailableError(contract_name, chain_id)
        return self._client(chain_id).eth.contract(
            address=Web3.to_checksum_address(address),
            abi=_ABIS[contract_name],
        )

    def _read(self, chain_id: int, description: str, operation: Callable[[], T]) -> T:
        try:
            return with_retry(operation, self._retry, sleep=self._sleep)
        except ContractLogicError:
            raise
        except (Web3Exception, requests.RequestException, OSError) as exc:
            logger.warning("Contract read %s failed on chain %s: %s", description, chain_id, exc)
            raise RpcError(chain_id, f"{description}: {exc}") from exc

    def get_user_fee_tier_basis_points(self, user_address: str, chain_id: int) -> int:
        contract = self._contract(ContractName.ESCROW_CORE, chain_id)
        user = Web3.to_checksum_address(user_address)
        try:
            bps = self._read(
                chain_id,
                "getUserFeePercentage",
                lambda: contract.functions.getUserFeePercentage(user).call(),
            )
        except ContractLogicError as exc:
            raise RpcError(chain_id, f"getUserFeePercentage reverted: {exc}") from exc
        return int(bps)

    def get_plan_fee_tiers(self, chain_id: int) -> Dict[int, int]:
        contract = self._contract(ContractName.SUBSCRIPTION_MANAGER, chain_id)
        tiers: Dict[int, int] = {}
        for plan_key in KNOWN_PLAN_KEYS:
            try:
                plan = self._read(
                    chain_id,
                    f"getPlan({plan_key})",
                    lambda k=plan_key: contract.functions.getPlan(k).call(),
                )
            except ContractLogicError:
                logger.debug("Plan %d does not exist on chain %s", plan_key, chain_id)
                continue
            tiers[plan_key] = int(plan[PLAN_FEE_TIER_INDEX])
        return tiers

    def build_transaction(self, call: Any, chain_id: int) -> TransactionConfig:
        """Encode a typed call request into an unsigned TransactionConfig."""
        contract = self._contract(call.contract_name, chain_id)
        args = call.to_args()
        data = contract.encode_abi(call.function_name, args=args)
        return TransactionConfig(
            address=contract.address,
            function_name=call.function_name,
            args=args,
            value=call.value(),
            chain_id=int(chain_id),
            data=data,
        )

    def close(self) -> None:
        with self._lock:
            self._clients.clear()
