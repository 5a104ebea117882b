"""
Per-provider health tracking.

Owned by the composition root and injected into the fallback chain. Each
provider's record is updated under its own lock so concurrent requests do
not lose failure counts. Health is observability data: the chain consults it
only when built with skip_unhealthy=True.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from .base import ProviderName

UNHEALTHY_AFTER_FAILURES = 3
STALE_SUCCESS_SECONDS = 300.0


@dataclass
class ProviderHealth:
    """Mutable health record for a single provider. Times are epoch seconds."""

    provider_name: ProviderName
    last_success_at: Optional[float] = None
    consecutive_failures: int = 0
    last_error: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def record_success(self, now: float) -> None:
        with self._lock:
            self.last_success_at = now
            self.consecutive_failures = 0
            self.last_error = None

    def record_failure(self, error: str) -> None:
        with self._lock:
            self.consecutive_failures += 1
            self.last_error = error[:500]

    def is_healthy(self, now: float) -> bool:
        with self._lock:
            if self.consecutive_failures >= UNHEALTHY_AFTER_FAILURES:
                return False
            if self.consecutive_failures > 0:
                # Never having succeeded counts as no recent success.
                if self.last_success_at is None or now - self.last_success_at > STALE_SUCCESS_SECONDS:
                    return False
            return True

    def snapshot(self, now: float) -> Dict[str, object]:
        healthy = self.is_healthy(now)
        with self._lock:
            return {
                "provider": self.provider_name.value,
                "last_success_at": self.last_success_at,
                "consecutive_failures": self.consecutive_failures,
                "last_error": self.last_error,
                "is_healthy": healthy,
            }


class ProviderHealthRegistry:
    """Process-wide map of provider -> ProviderHealth, records created lazily."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Dict[ProviderName, ProviderHealth] = {}

    def _record(self, provider: ProviderName) -> ProviderHealth:
        with self._lock:
            record = self._records.get(provider)
            if record is None:
                record = ProviderHealth(provider_name=provider)
                self._records[provider] = record
            return record

    def record_success(self, provider: ProviderName) -> None:
        self._record(provider).record_success(self._clock())

    def record_failure(self, provider: ProviderName, error: str) -> None:
        self._record(provider).record_failure(error)

    def is_healthy(self, provider: ProviderName) -> bool:
        with self._lock:
            record = self._records.get(provider)
        if record is None:
            return True  # no data yet
        return record.is_healthy(self._clock())

    def get(self, provider: ProviderName) -> Optional[ProviderHealth]:
        with self._lock:
            return self._records.get(provider)

    def snapshot(self) -> Dict[str, Dict[str, object]]:
        """Health of every provider seen so far, keyed by provider name."""
        with self._lock:
            records = list(self._records.values())
        now = self._clock()
        return {r.provider_name.value: r.snapshot(now) for r in records}

    def reset(self) -> None:
        with self._lock:
            self._records.clear()
