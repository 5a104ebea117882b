"""
CryptoCompare price provider.

  GET https://min-api.cryptocompare.com/data/price?fsym={symbol}&tsyms=USD
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..base import IdentifierKind, ProviderConfig, ProviderName
from ..http import fetch_price, to_float
from ..settings import get_provider_config

CRYPTOCOMPARE_BASE_URL = "https://min-api.cryptocompare.com"


class CryptoComparePriceProvider:
    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or get_provider_config(ProviderName.CRYPTOCOMPARE)

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.CRYPTOCOMPARE

    @property
    def identifier_kind(self) -> IdentifierKind:
        return IdentifierKind.SYMBOL

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        headers: Dict[str, str] = {}
        if api_key:
            headers["authorization"] = f"Apikey {api_key}"

        def _parse(data: Any) -> Optional[float]:
            return to_float(data.get("USD"))

        return fetch_price(
            self._config,
            f"{CRYPTOCOMPARE_BASE_URL}/data/price",
            _parse,
            params={"fsym": symbol_or_id.upper(), "tsyms": "USD"},
            headers=headers,
        )
