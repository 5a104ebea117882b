"""
Stable facade: package exception types only. Do not add exports without updating __all__.
"""

from __future__ import annotations

from .errors import (
    ContractUnavailableError,
    FeeUnavailableError,
    PriceUnavailableError,
    ProviderHTTPError,
    ProviderUnavailableError,
    RpcError,
    SettlementEngineError,
    UnsupportedChainError,
)

__all__ = [
    "SettlementEngineError",
    "ProviderHTTPError",
    "ProviderUnavailableError",
    "PriceUnavailableError",
    "UnsupportedChainError",
    "ContractUnavailableError",
    "RpcError",
    "FeeUnavailableError",
]
