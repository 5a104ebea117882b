"""
Coinbase spot price provider.

Uses the public Coinbase API (no authentication required):
  GET https://api.coinbase.com/v2/exchange-rates?currency={symbol}
"""
from __future__ import annotations

from typing import Any, Optional

from ..base import IdentifierKind, ProviderConfig, ProviderName
from ..http import fetch_price, to_float
from ..settings import get_provider_config

COINBASE_BASE_URL = "https://api.coinbase.com"


class CoinbasePriceProvider:
    """Fetch USD rates from the Coinbase public API."""

    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or get_provider_config(ProviderName.COINBASE)

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.COINBASE

    @property
    def identifier_kind(self) -> IdentifierKind:
        return IdentifierKind.SYMBOL

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        currency = symbol_or_id.upper()

        def _parse(data: Any) -> Optional[float]:
            # rates are "1 unit of currency = X USD"
            rates = (data.get("data") or {}).get("rates") or {}
            return to_float(rates.get("USD"))

        return fetch_price(
            self._config,
            f"{COINBASE_BASE_URL}/v2/exchange-rates",
            _parse,
            params={"currency": currency},
        )
