"""
Price fallback chain: ordered, sequential provider fallback.

The chain tries providers one at a time in a fixed order and stops at the
first positive price. There is no fan-out across providers: each extra call
costs rate-limit budget upstream. A provider that raises or returns nothing
is skipped; if every provider comes up empty the result is None, which
callers must treat as "price temporarily unavailable".
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from ..timeutils import now_ms
from .base import IdentifierKind, PriceProvider, PriceResult, ProviderConfig, ProviderName
from .health import ProviderHealthRegistry
from .settings import FALLBACK_ORDER, PROVIDER_CONFIGS

logger = logging.getLogger(__name__)


class PriceFallbackChain:
    """
    Resolve a USD price across providers with automatic fallback.

    Providers are walked in `order` (FALLBACK_ORDER by default), not by their
    configured priority rank. Disabled providers are skipped. Health is
    recorded for every attempt; it gates selection only when
    skip_unhealthy=True.
    """

    def __init__(
        self,
        providers: Sequence[PriceProvider],
        *,
        health: Optional[ProviderHealthRegistry] = None,
        api_keys: Optional[Mapping[str, str]] = None,
        configs: Mapping[ProviderName, ProviderConfig] = PROVIDER_CONFIGS,
        order: Sequence[ProviderName] = FALLBACK_ORDER,
        skip_unhealthy: bool = False,
        clock_ms: Callable[[], int] = now_ms,
    ) -> None:
        by_name: Dict[ProviderName, PriceProvider] = {p.provider_name: p for p in providers}
        self._providers: List[PriceProvider] = [by_name[name] for name in order if name in by_name]
        self._health = health or ProviderHealthRegistry()
        self._api_keys = dict(api_keys or {})
        self._configs = configs
        self._skip_unhealthy = skip_unhealthy
        self._clock_ms = clock_ms

    @property
    def health(self) -> ProviderHealthRegistry:
        return self._health

    @property
    def provider_names(self) -> List[ProviderName]:
        return [p.provider_name for p in self._providers]

    def _enabled(self, name: ProviderName) -> bool:
        config = self._configs.get(name)
        return config is None or config.enabled

    def resolve_price(
        self,
        symbol_or_id: str,
        symbol: Optional[str] = None,
        coingecko_id: Optional[str] = None,
    ) -> Optional[PriceResult]:
        """
        Return the first positive price, or None when every provider fails.

        Never raises: a single provider's failure is absorbed here.
        """
        trading_symbol = symbol or symbol_or_id
        gecko_id = coingecko_id or symbol_or_id
        errors: List[str] = []

        for provider in self._providers:
            name = provider.provider_name
            if not self._enabled(name):
                continue
            if self._skip_unhealthy and not self._health.is_healthy(name):
                errors.append(f"{name.value}: skipped (unhealthy)")
                continue

            identifier = gecko_id if provider.identifier_kind == IdentifierKind.COINGECKO_ID else trading_symbol
            logger.debug("Trying %s for %s", name.value, identifier)
            try:
                price = provider.fetch_price(identifier, self._api_keys.get(name.value))
            except Exception as exc:
                msg = f"{name.value}: {type(exc).__name__}: {exc}"
                errors.append(msg)
                self._health.record_failure(name, str(exc))
                logger.warning("Provider %s failed for %s: %s", name.value, trading_symbol, exc)
                continue

            if price is not None and price > 0:
                self._health.record_success(name)
                logger.info("Got price from %s: $%s for %s/USD", name.value, price, trading_symbol)
                return PriceResult(price=float(price), provider=name, timestamp=self._clock_ms())
            errors.append(f"{name.value}: no price")

        logger.error("All providers failed for %s: %s", trading_symbol, "; ".join(errors))
        return None

    def get_health(self) -> Dict[str, Dict[str, object]]:
        """Return health status for all providers tried so far."""
        return self._health.snapshot()
