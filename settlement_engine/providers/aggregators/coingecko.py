"""
CoinGecko price provider (primary aggregator).

Looks prices up by CoinGecko id, not ticker:
  GET https://api.coingecko.com/api/v3/simple/price?ids={id}&vs_currencies=usd
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..base import IdentifierKind, ProviderConfig, ProviderName
from ..http import fetch_price, to_float
from ..settings import get_provider_config

COINGECKO_BASE_URL = "https://api.coingecko.com"


class CoinGeckoPriceProvider:
    """Fetch USD prices by CoinGecko id. An API key is optional."""

    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or get_provider_config(ProviderName.COINGECKO)

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.COINGECKO

    @property
    def identifier_kind(self) -> IdentifierKind:
        return IdentifierKind.COINGECKO_ID

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        coingecko_id = symbol_or_id.lower()
        headers: Dict[str, str] = {}
        if api_key:
            # demo and pro plans read different header names
            headers["x-cg-demo-api-key"] = api_key
            headers["X-CG-API-KEY"] = api_key

        def _parse(data: Any) -> Optional[float]:
            return to_float((data.get(coingecko_id) or {}).get("usd"))

        return fetch_price(
            self._config,
            f"{COINGECKO_BASE_URL}/api/v3/simple/price",
            _parse,
            params={"ids": coingecko_id, "vs_currencies": "usd"},
            headers=headers,
        )
