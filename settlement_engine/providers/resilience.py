"""
Resilience primitives: error classification and retry with backoff.

Every network call in the package (provider fetches, contract reads) goes
through with_retry. Rate-limit errors back off with random jitter so that
colliding callers desynchronise; other transient errors back off
exponentially. Non-transient errors propagate immediately.
"""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Optional, TypeVar

import requests

from .base import RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RATE_LIMIT_MARKERS = ("rate limit", "too many requests", "429")
_NETWORK_MARKERS = ("network", "timeout", "timed out", "econnrefused", "enotfound", "connection refused")


def error_status(error: BaseException) -> Optional[int]:
    """HTTP status carried by an error, if any (status_code/status attrs or requests response)."""
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    response: Any = getattr(error, "response", None)
    if response is not None:
        value = getattr(response, "status_code", None)
        if isinstance(value, int):
            return value
    return None


def is_rate_limit_error(error: Optional[BaseException]) -> bool:
    if error is None:
        return False
    if error_status(error) == 429:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


def is_network_error(error: BaseException) -> bool:
    if isinstance(error, (requests.Timeout, requests.ConnectionError, TimeoutError, ConnectionError)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _NETWORK_MARKERS)


def is_retryable_error(error: Optional[BaseException]) -> bool:
    """Rate limits, network-class errors, HTTP 5xx and 408 are retryable; everything else is fatal."""
    if error is None:
        return False
    if is_rate_limit_error(error):
        return True
    if is_network_error(error):
        return True
    status = error_status(error)
    if status is not None:
        return status >= 500 or status in (408, 429)
    return False


def compute_retry_delay(
    attempt: int,
    policy: RetryPolicy,
    rate_limited: bool,
    rng: Callable[[], float] = random.random,
) -> float:
    """Seconds to wait before retry number `attempt` (1-based)."""
    if rate_limited:
        return policy.min_delay_s + rng() * (policy.max_delay_s - policy.min_delay_s)
    exponential = policy.min_delay_s * (policy.backoff_multiplier ** (attempt - 1))
    return min(exponential, policy.max_delay_s)


def with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    rng: Callable[[], float] = random.random,
) -> T:
    """
    Execute `operation` with up to `policy.max_retries` retries.

    Makes at most max_retries + 1 attempts. A non-retryable error is raised
    on the spot; after the last attempt the last error is re-raised unchanged.
    policy.on_retry(attempt, error, delay_s) is invoked before each sleep.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            if attempt > policy.max_retries or not is_retryable_error(exc):
                raise
            rate_limited = is_rate_limit_error(exc)
            delay = compute_retry_delay(attempt, policy, rate_limited, rng)
            if policy.on_retry is not None:
                policy.on_retry(attempt, exc, delay)
            else:
                logger.info(
                    "Retrying after %.2fs (attempt %d/%d)%s: %s",
                    delay, attempt, policy.max_retries,
                    " [rate limited]" if rate_limited else "", exc,
                )
            sleep(delay)
