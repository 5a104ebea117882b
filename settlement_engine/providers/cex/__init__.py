"""CEX (centralized exchange) ticker price providers."""
from __future__ import annotations

from .binance import BinancePriceProvider
from .coinbase import CoinbasePriceProvider
from .kraken import KrakenPriceProvider

__all__ = ["BinancePriceProvider", "CoinbasePriceProvider", "KrakenPriceProvider"]
