"""
Price oracle providers.

Five upstream USD price providers behind a fixed-order fallback chain with
retry/backoff, per-provider health tracking, and a single-flight price cache.
"""

from __future__ import annotations

from .base import (
    IdentifierKind,
    PriceProvider,
    PriceResult,
    ProviderConfig,
    ProviderName,
    RetryPolicy,
)
from .cache import PassthroughPriceCache, PriceCache, PriceSource
from .chain import PriceFallbackChain
from .health import ProviderHealth, ProviderHealthRegistry
from .registry import ProviderRegistry
from .resilience import is_rate_limit_error, is_retryable_error, with_retry
from .settings import FALLBACK_ORDER, PROVIDER_CONFIGS, providers_by_priority

__all__ = [
    "IdentifierKind",
    "PriceProvider",
    "PriceResult",
    "ProviderConfig",
    "ProviderName",
    "RetryPolicy",
    "PassthroughPriceCache",
    "PriceCache",
    "PriceSource",
    "PriceFallbackChain",
    "ProviderHealth",
    "ProviderHealthRegistry",
    "ProviderRegistry",
    "is_rate_limit_error",
    "is_retryable_error",
    "with_retry",
    "FALLBACK_ORDER",
    "PROVIDER_CONFIGS",
    "providers_by_priority",
]
