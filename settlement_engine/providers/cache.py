"""
Process-wide price caching.

PriceCache memoises PriceResults per symbol-or-id for a fixed window and
guarantees a single in-flight upstream resolution per key: concurrent
callers for the same key wait for the leader's result instead of issuing
their own provider calls. PassthroughPriceCache resolves on every call and
is what one-shot script runs use.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

from .base import PriceResult

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SECONDS = 300.0

PriceResolver = Callable[[str, Optional[str], Optional[str]], Optional[PriceResult]]


class PriceSource(Protocol):
    """Anything that can answer get_cached_price; consumed by the amount conversion layer."""

    def get_cached_price(
        self,
        symbol_or_id: str,
        symbol: Optional[str] = None,
        coingecko_id: Optional[str] = None,
    ) -> Optional[PriceResult]: ...


@dataclass
class CachedPriceEntry:
    result: PriceResult
    inserted_at: float

    def is_fresh(self, now: float, window_s: float) -> bool:
        return now - self.inserted_at < window_s


class _InFlight:
    """One outstanding resolution; waiters block on `done`."""

    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Optional[PriceResult] = None
        self.error: Optional[BaseException] = None


class PriceCache:
    """Time-windowed, single-flight memoisation in front of a price resolver."""

    def __init__(
        self,
        resolver: PriceResolver,
        window_s: float = DEFAULT_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._resolver = resolver
        self._window_s = window_s
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CachedPriceEntry] = {}
        self._in_flight: Dict[str, _InFlight] = {}

    @property
    def window_s(self) -> float:
        return self._window_s

    def get_cached_price(
        self,
        symbol_or_id: str,
        symbol: Optional[str] = None,
        coingecko_id: Optional[str] = None,
    ) -> Optional[PriceResult]:
        key = symbol_or_id
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if entry.is_fresh(self._clock(), self._window_s):
                    return entry.result
                del self._entries[key]
            flight = self._in_flight.get(key)
            leader = flight is None
            if flight is None:
                flight = _InFlight()
                self._in_flight[key] = flight

        if not leader:
            logger.debug("Waiting on in-flight price resolution for %s", key)
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.result

        try:
            result = self._resolver(symbol_or_id, symbol, coingecko_id)
        except BaseException as exc:
            flight.error = exc
            raise
        else:
            flight.result = result
            # Misses are not stored so the next request retries upstream.
            if result is not None:
                with self._lock:
                    self._entries[key] = CachedPriceEntry(result, self._clock())
            return result
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
            flight.done.set()

    def invalidate(self, symbol_or_id: str) -> None:
        with self._lock:
            self._entries.pop(symbol_or_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class PassthroughPriceCache:
    """No caching: every call goes straight to the resolver."""

    def __init__(self, resolver: PriceResolver) -> None:
        self._resolver = resolver

    def get_cached_price(
        self,
        symbol_or_id: str,
        symbol: Optional[str] = None,
        coingecko_id: Optional[str] = None,
    ) -> Optional[PriceResult]:
        return self._resolver(symbol_or_id, symbol, coingecko_id)

    def invalidate(self, symbol_or_id: str) -> None:
        pass

    def clear(self) -> None:
        pass
