"""
Binance spot price provider.

Uses the public ticker endpoint; an API key only raises rate limits:
  GET https://api.binance.com/api/v3/ticker/price?symbol={pair}
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..base import IdentifierKind, ProviderConfig, ProviderName
from ..http import fetch_price, to_float
from ..settings import get_provider_config

BINANCE_BASE_URL = "https://api.binance.com"


def binance_pair(symbol: str) -> str:
    """Append the USDT quote unless the symbol already names a USD quote (e.g. BTCUSDT)."""
    upper = symbol.upper()
    return upper if "USD" in upper else f"{upper}USDT"


class BinancePriceProvider:
    """Fetch ticker prices from the Binance public API."""

    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or get_provider_config(ProviderName.BINANCE)

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.BINANCE

    @property
    def identifier_kind(self) -> IdentifierKind:
        return IdentifierKind.SYMBOL

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        headers: Dict[str, str] = {}
        if api_key:
            headers["X-MBX-APIKEY"] = api_key

        def _parse(data: Any) -> Optional[float]:
            return to_float(data.get("price"))

        return fetch_price(
            self._config,
            f"{BINANCE_BASE_URL}/api/v3/ticker/price",
            _parse,
            params={"symbol": binance_pair(symbol_or_id)},
            headers=headers,
        )
