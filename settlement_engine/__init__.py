"""
Top-level public API surface. Stable facades only.
Canonical entrypoint: from settlement_engine import SettlementEngine.
Does not import cli or api.
"""

from __future__ import annotations

from . import amounts, chains, contracts, core, fees, providers
from ._version import __version__
from .engine import SettlementEngine

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "SettlementEngine",
    "amounts",
    "chains",
    "contracts",
    "core",
    "fees",
    "providers",
]
