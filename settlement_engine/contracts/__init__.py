"""On-chain contract access: fee tier reads and typed write-call requests."""

from __future__ import annotations

from .base import KNOWN_PLAN_KEYS, MAX_BASIS_POINTS, ContractAccess, ContractName
from .calls import (
    CreatePlanCall,
    DeletePlanCall,
    PaySubscriptionCall,
    SetPlanPriceCall,
    TransactionConfig,
    UpdatePlanCall,
    WithdrawEarningsCall,
)

__all__ = [
    "KNOWN_PLAN_KEYS",
    "MAX_BASIS_POINTS",
    "ContractAccess",
    "ContractName",
    "CreatePlanCall",
    "DeletePlanCall",
    "PaySubscriptionCall",
    "SetPlanPriceCall",
    "TransactionConfig",
    "UpdatePlanCall",
    "WithdrawEarningsCall",
]
