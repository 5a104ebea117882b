"""
Configuration for all price providers: priority rank, rate-limit budget,
retry policy and request timeout.

Priority is informational (and used by providers_by_priority); the fallback
chain itself walks FALLBACK_ORDER.
"""
from __future__ import annotations

from typing import Dict, List, Mapping, Tuple

from .base import ProviderConfig, ProviderName, RetryPolicy

PROVIDER_CONFIGS: Dict[ProviderName, ProviderConfig] = {
    ProviderName.COINGECKO: ProviderConfig(
        name=ProviderName.COINGECKO,
        display_name="CoinGecko",
        priority=1,
        requires_api_key=False,  # optional; raises the limit to 500/min
        requests_per_minute=50,
        requests_per_second=1,
        retry=RetryPolicy(max_retries=10, min_delay_s=1.0, max_delay_s=5.0, backoff_multiplier=1.5),
        timeout_s=30.0,
    ),
    ProviderName.BINANCE: ProviderConfig(
        name=ProviderName.BINANCE,
        display_name="Binance",
        priority=2,
        requires_api_key=False,
        requests_per_minute=1200,
        requests_per_second=20,
        retry=RetryPolicy(max_retries=5, min_delay_s=0.5, max_delay_s=3.0, backoff_multiplier=1.5),
        timeout_s=10.0,
    ),
    ProviderName.KRAKEN: ProviderConfig(
        name=ProviderName.KRAKEN,
        display_name="Kraken",
        priority=3,
        requires_api_key=False,
        requests_per_minute=60,
        requests_per_second=1,
        retry=RetryPolicy(max_retries=5, min_delay_s=1.0, max_delay_s=5.0, backoff_multiplier=1.5),
        timeout_s=15.0,
    ),
    ProviderName.CRYPTOCOMPARE: ProviderConfig(
        name=ProviderName.CRYPTOCOMPARE,
        display_name="CryptoCompare",
        priority=4,
        requires_api_key=False,  # free tier works without a key
        requests_per_minute=100,
        requests_per_second=2,
        retry=RetryPolicy(max_retries=5, min_delay_s=1.0, max_delay_s=5.0, backoff_multiplier=1.5),
        timeout_s=15.0,
    ),
    ProviderName.COINBASE: ProviderConfig(
        name=ProviderName.COINBASE,
        display_name="Coinbase",
        priority=5,
        requires_api_key=False,
        requests_per_minute=100,
        requests_per_second=2,
        retry=RetryPolicy(max_retries=5, min_delay_s=1.0, max_delay_s=5.0, backoff_multiplier=1.5),
        timeout_s=15.0,
    ),
}

# Order the fallback chain walks: primary aggregator, exchange tickers, secondary aggregator.
FALLBACK_ORDER: Tuple[ProviderName, ...] = (
    ProviderName.COINGECKO,
    ProviderName.KRAKEN,
    ProviderName.CRYPTOCOMPARE,
    ProviderName.COINBASE,
    ProviderName.BINANCE,
)


def get_provider_config(name: ProviderName) -> ProviderConfig:
    return PROVIDER_CONFIGS[ProviderName(name)]


def providers_by_priority(
    configs: Mapping[ProviderName, ProviderConfig] = PROVIDER_CONFIGS,
) -> List[ProviderConfig]:
    """Enabled providers sorted by priority. Ranks must be unique among enabled providers."""
    enabled = [c for c in configs.values() if c.enabled]
    ranks = [c.priority for c in enabled]
    if len(set(ranks)) != len(ranks):
        raise ValueError(f"Duplicate provider priority ranks: {sorted(ranks)}")
    return sorted(enabled, key=lambda c: c.priority)
