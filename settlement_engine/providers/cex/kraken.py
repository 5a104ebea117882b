"""
Kraken spot price provider.

Uses the public Kraken API (no authentication required):
  GET https://api.kraken.com/0/public/Ticker?pair={pair}
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..base import IdentifierKind, ProviderConfig, ProviderName
from ..http import fetch_price, to_float
from ..settings import get_provider_config

logger = logging.getLogger(__name__)

KRAKEN_BASE_URL = "https://api.kraken.com"

# Kraken's own tickers for a few assets.
_KRAKEN_SYMBOLS = {
    "BTC": "XBT",
    "DOGE": "XDG",
}


def kraken_pair(symbol: str) -> str:
    upper = symbol.upper()
    return f"{_KRAKEN_SYMBOLS.get(upper, upper)}USD"


class KrakenPriceProvider:
    """Fetch last-trade prices from the Kraken public ticker."""

    def __init__(self, config: Optional[ProviderConfig] = None) -> None:
        self._config = config or get_provider_config(ProviderName.KRAKEN)

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName.KRAKEN

    @property
    def identifier_kind(self) -> IdentifierKind:
        return IdentifierKind.SYMBOL

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        pair = kraken_pair(symbol_or_id)

        def _parse(data: Any) -> Optional[float]:
            if data.get("error"):
                logger.info("[Kraken] Error for %s: %s", pair, ", ".join(data["error"]))
                return None
            result = data.get("result") or {}
            if not result:
                return None
            # Kraken may key the result by its own pair name (e.g. XXBTZUSD).
            ticker = result[next(iter(result))]
            last_trade = ticker.get("c") or [None]
            return to_float(last_trade[0])

        return fetch_price(
            self._config,
            f"{KRAKEN_BASE_URL}/0/public/Ticker",
            _parse,
            params={"pair": pair},
        )
