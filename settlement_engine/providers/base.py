"""
Provider interfaces and data contracts.

Every price provider implements PriceProvider: it translates a token symbol
or canonical id into its own request shape and returns a single USD price,
or None when the response carries no usable price.

Data is returned via frozen dataclasses for immutability and type safety.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, runtime_checkable


class ProviderName(str, enum.Enum):
    COINGECKO = "coingecko"
    BINANCE = "binance"
    KRAKEN = "kraken"
    CRYPTOCOMPARE = "cryptocompare"
    COINBASE = "coinbase"


class IdentifierKind(str, enum.Enum):
    """Which identifier a provider expects: a canonical CoinGecko id or a ticker symbol."""

    COINGECKO_ID = "coingecko_id"
    SYMBOL = "symbol"


RetryObserver = Callable[[int, BaseException, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with backoff. Delays are in seconds."""

    max_retries: int = 5
    min_delay_s: float = 1.0
    max_delay_s: float = 5.0
    backoff_multiplier: float = 1.5
    on_retry: Optional[RetryObserver] = None


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable per-provider settings, loaded at process start."""

    name: ProviderName
    display_name: str
    priority: int
    requires_api_key: bool
    requests_per_minute: int
    retry: RetryPolicy
    timeout_s: float
    requests_per_second: Optional[int] = None
    enabled: bool = True


@dataclass(frozen=True)
class PriceResult:
    """A resolved USD price with its provenance. timestamp is epoch milliseconds."""

    price: float
    provider: ProviderName
    timestamp: int

    def __post_init__(self) -> None:
        if not self.price > 0:
            raise ValueError(f"PriceResult.price must be positive, got {self.price!r}")

    def to_dict(self) -> dict:
        return {"price": self.price, "provider": self.provider.value, "timestamp": self.timestamp}


@runtime_checkable
class PriceProvider(Protocol):
    """Protocol for upstream USD price providers."""

    @property
    def provider_name(self) -> ProviderName: ...

    @property
    def identifier_kind(self) -> IdentifierKind: ...

    def fetch_price(self, symbol_or_id: str, api_key: Optional[str] = None) -> Optional[float]:
        """Return the USD price, or None when the provider has no usable price."""
        ...
