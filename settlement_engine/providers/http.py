"""
Shared HTTP fetch for price providers.

Sends one GET through with_retry using the provider's own policy and
timeout, parses the JSON body with the adapter's parser, and applies the
soft-fail rules: a missing or non-positive price is None, not an error.
Errors that survive the retries surface as ProviderUnavailableError.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

import requests

from ..core.errors import ProviderHTTPError, ProviderUnavailableError
from .base import ProviderConfig
from .resilience import with_retry

logger = logging.getLogger(__name__)

PriceParser = Callable[[Any], Optional[float]]


def to_float(x: Any) -> Optional[float]:
    if x is None:
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _log_retry(config: ProviderConfig) -> Callable[[int, BaseException, float], None]:
    def _on_retry(attempt: int, error: BaseException, delay_s: float) -> None:
        logger.info(
            "[%s] Retrying request after %.2fs (attempt %d/%d) - Status: %s, Error: %s",
            config.display_name, delay_s, attempt, config.retry.max_retries,
            getattr(error, "status_code", "N/A"), error,
        )

    return _on_retry


def fetch_price(
    config: ProviderConfig,
    url: str,
    parse: PriceParser,
    *,
    params: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Optional[float]:
    """GET `url`, parse a USD price, retry transient failures per `config.retry`."""
    request_headers = {"Content-Type": "application/json"}
    if headers:
        request_headers.update(headers)

    def _request() -> Optional[float]:
        resp = requests.get(url, params=params, headers=request_headers, timeout=config.timeout_s)
        if resp.status_code >= 400:
            raise ProviderHTTPError(config.display_name, resp.status_code, url)
        price = parse(resp.json())
        if price is None:
            logger.info("[%s] No price data available", config.display_name)
            return None
        if price <= 0:
            logger.warning("[%s] Invalid price: %s", config.display_name, price)
            return None
        return price

    policy = config.retry
    if policy.on_retry is None:
        policy = replace(policy, on_retry=_log_retry(config))

    try:
        return with_retry(_request, policy)
    except Exception as exc:
        raise ProviderUnavailableError(config.name.value, f"{type(exc).__name__}: {exc}") from exc
