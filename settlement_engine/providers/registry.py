"""
Provider registry: central catalog of available price providers.

Providers register under their ProviderName. The fallback chain is built
from the registry in FALLBACK_ORDER; names not registered are left out.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from .base import PriceProvider, ProviderName
from .settings import FALLBACK_ORDER

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry mapping provider names to classes/instances.

    Usage:
        registry = ProviderRegistry()
        registry.register(ProviderName.COINGECKO, CoinGeckoPriceProvider)
        registry.register(ProviderName.KRAKEN, KrakenPriceProvider)

        providers = registry.build_chain()
    """

    def __init__(self) -> None:
        self._factories: Dict[ProviderName, Any] = {}
        self._instances: Dict[ProviderName, PriceProvider] = {}

    def register(
        self,
        name: Union[ProviderName, str],
        factory: Union[Type[PriceProvider], PriceProvider],
    ) -> None:
        """Register a provider class (instantiated lazily) or a ready instance."""
        key = ProviderName(name)
        self._factories[key] = factory
        self._instances.pop(key, None)
        logger.debug("Registered price provider: %s", key.value)

    def get(self, name: Union[ProviderName, str]) -> PriceProvider:
        """Get or instantiate a provider by name."""
        key = ProviderName(name)
        if key not in self._instances:
            factory = self._factories.get(key)
            if factory is None:
                raise KeyError(
                    f"Unknown price provider '{key.value}'. "
                    f"Available: {[n.value for n in self._factories]}"
                )
            self._instances[key] = factory() if isinstance(factory, type) else factory
        return self._instances[key]

    @property
    def names(self) -> List[ProviderName]:
        return list(self._factories)

    def build_chain(self, order: Optional[Sequence[ProviderName]] = None) -> List[PriceProvider]:
        """Ordered list of registered providers (FALLBACK_ORDER by default)."""
        names = order or FALLBACK_ORDER
        return [self.get(n) for n in names if n in self._factories]
