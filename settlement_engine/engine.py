"""
Composition root and upward service boundary.

SettlementEngine owns one health registry, one fallback chain, one price
cache, one contract gateway and one fee service per process. Callers (API
routes, CLI, scripts) talk to the engine only.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from . import config
from .amounts import (
    AmountLike,
    EscrowAmountBreakdown,
    NativeConversion,
    compute_escrow_amounts,
    convert_smallest_unit_to_usd,
    convert_usd_to_native,
    convert_usd_to_smallest_unit,
)
from .chains import coingecko_price_id, native_symbol
from .contracts.base import ContractAccess
from .contracts.calls import TransactionConfig
from .fees import FeeCalculationResult, FeeInfo, FeeService, FeeValidationResult
from .providers.base import PriceResult
from .providers.cache import PriceSource
from .providers.chain import PriceFallbackChain
from .providers.defaults import create_price_cache, create_price_chain

logger = logging.getLogger(__name__)


class SettlementEngine:
    """Price oracle plus fee pipeline, wired from config unless collaborators are injected."""

    def __init__(
        self,
        contracts: Optional[ContractAccess] = None,
        chain: Optional[PriceFallbackChain] = None,
        prices: Optional[PriceSource] = None,
        strict_additive: Optional[bool] = None,
        fee_tolerance: Optional[Union[str, Decimal]] = None,
    ) -> None:
        if contracts is None:
            from .contracts.web3_gateway import Web3ContractGateway

            contracts = Web3ContractGateway()
        self._contracts = contracts
        self._chain = chain or create_price_chain()
        self._prices = prices or create_price_cache(self._chain)
        self._fees = FeeService(contracts, tolerance=fee_tolerance)
        self._strict_additive = config.strict_additive_escrow() if strict_additive is None else strict_additive

    @property
    def contracts(self) -> ContractAccess:
        return self._contracts

    @property
    def fees(self) -> FeeService:
        return self._fees

    @property
    def prices(self) -> PriceSource:
        return self._prices

    # Prices

    def get_cached_price(
        self,
        symbol_or_id: str,
        symbol: Optional[str] = None,
        coingecko_id: Optional[str] = None,
    ) -> Optional[PriceResult]:
        """USD price or None when every provider is down."""
        return self._prices.get_cached_price(symbol_or_id, symbol=symbol, coingecko_id=coingecko_id)

    def get_native_price(self, chain_id: int) -> Optional[PriceResult]:
        gecko_id = coingecko_price_id(chain_id)
        return self.get_cached_price(gecko_id, symbol=native_symbol(chain_id), coingecko_id=gecko_id)

    def provider_health(self) -> Dict[str, Dict[str, object]]:
        return self._chain.get_health()

    # Fees

    def calculate_user_fee(self, user_address: str, amount: AmountLike, chain_id: int) -> FeeCalculationResult:
        return self._fees.calculate_user_fee(user_address, amount, chain_id)

    def validate_client_fee(
        self, user_address: str, amount: AmountLike, chain_id: int, client_fee: AmountLike
    ) -> FeeValidationResult:
        return self._fees.validate_client_fee(user_address, amount, chain_id, client_fee)

    def get_fee_info(self, user_address: str, chain_id: int) -> FeeInfo:
        return self._fees.get_fee_info(user_address, chain_id)

    # Amounts

    def compute_escrow_amounts(
        self, amount: AmountLike, fee_percentage: AmountLike, chain_id: int
    ) -> EscrowAmountBreakdown:
        """fee_percentage is a fraction: 0.025 for 2.5%."""
        return compute_escrow_amounts(amount, fee_percentage, chain_id, strict_additive=self._strict_additive)

    def compute_user_escrow_amounts(
        self, user_address: str, amount: AmountLike, chain_id: int
    ) -> EscrowAmountBreakdown:
        """Escrow amounts at the user's on-chain fee tier."""
        percentage = self._fees.get_user_fee_percentage(user_address, chain_id)
        return self.compute_escrow_amounts(amount, percentage / Decimal(100), chain_id)

    def convert_usd_to_smallest_unit(self, usd_amount: AmountLike, chain_id: int) -> int:
        return convert_usd_to_smallest_unit(usd_amount, chain_id, self._prices)

    def convert_smallest_unit_to_usd(self, amount: Union[int, str], chain_id: int) -> Decimal:
        return convert_smallest_unit_to_usd(amount, chain_id, self._prices)

    def convert_usd_to_native(self, usd_amount: AmountLike, chain_id: int) -> NativeConversion:
        return convert_usd_to_native(usd_amount, chain_id, self._prices)

    # Contract writes

    def build_transaction(self, call: Any, chain_id: int) -> TransactionConfig:
        builder = getattr(self._contracts, "build_transaction", None)
        if builder is None:
            raise TypeError(f"{type(self._contracts).__name__} cannot build transactions")
        return builder(call, chain_id)

    def close(self) -> None:
        closer = getattr(self._contracts, "close", None)
        if closer is not None:
            closer()
        logger.debug("Settlement engine closed")
