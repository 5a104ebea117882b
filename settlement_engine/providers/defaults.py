"""
Default provider wiring.

Registers the five built-in providers and builds the fallback chain and the
price cache from config. The caching strategy is an explicit choice made
here from config.script_mode(), never by sniffing the runtime.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from .. import config
from .aggregators.coingecko import CoinGeckoPriceProvider
from .aggregators.cryptocompare import CryptoComparePriceProvider
from .base import ProviderName
from .cache import PassthroughPriceCache, PriceCache
from .cex.binance import BinancePriceProvider
from .cex.coinbase import CoinbasePriceProvider
from .cex.kraken import KrakenPriceProvider
from .chain import PriceFallbackChain
from .health import ProviderHealthRegistry
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


def create_default_registry() -> ProviderRegistry:
    """Create a registry with all built-in providers."""
    registry = ProviderRegistry()
    registry.register(ProviderName.COINGECKO, CoinGeckoPriceProvider)
    registry.register(ProviderName.KRAKEN, KrakenPriceProvider)
    registry.register(ProviderName.CRYPTOCOMPARE, CryptoComparePriceProvider)
    registry.register(ProviderName.COINBASE, CoinbasePriceProvider)
    registry.register(ProviderName.BINANCE, BinancePriceProvider)
    return registry


def create_price_chain(
    registry: Optional[ProviderRegistry] = None,
    health: Optional[ProviderHealthRegistry] = None,
    api_keys: Optional[Mapping[str, str]] = None,
    skip_unhealthy: Optional[bool] = None,
) -> PriceFallbackChain:
    """Build the fallback chain with API keys and health-gating from config."""
    reg = registry or create_default_registry()
    return PriceFallbackChain(
        reg.build_chain(),
        health=health or ProviderHealthRegistry(),
        api_keys=config.provider_api_keys() if api_keys is None else api_keys,
        skip_unhealthy=config.skip_unhealthy_providers() if skip_unhealthy is None else skip_unhealthy,
    )


def create_price_cache(
    chain: PriceFallbackChain,
    script_mode: Optional[bool] = None,
    window_s: Optional[float] = None,
) -> Union[PriceCache, PassthroughPriceCache]:
    """Shared single-flight cache for servers; passthrough for one-shot scripts."""
    if config.script_mode() if script_mode is None else script_mode:
        logger.debug("Script mode: price caching disabled")
        return PassthroughPriceCache(chain.resolve_price)
    window = config.price_cache_seconds() if window_s is None else window_s
    return PriceCache(chain.resolve_price, window_s=window)
