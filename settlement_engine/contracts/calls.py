"""
Typed write-call requests for the subscription manager.

Each request knows its contract function and produces the positional
argument list the ABI expects. Prices arrive already converted to smallest
units; the USD -> native step happens in amounts.py before a call is built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from .base import ContractName

# maxMembers == -1 means unlimited on the contract side
UINT256_MAX = 2**256 - 1


@dataclass(frozen=True)
class CreatePlanCall:
    plan_key: int
    name: str
    display_name: str
    description: str
    price_wei: int
    max_members: int
    features: Tuple[str, ...] = ()
    is_active: bool = True
    sort_order: int = 0
    is_team_plan: bool = False
    fee_tier_basis_points: int = 0

    contract_name = ContractName.SUBSCRIPTION_MANAGER
    function_name = "createPlan"

    def to_args(self) -> List[Any]:
        return [
            self.plan_key,
            self.name,
            self.display_name,
            self.description,
            int(self.price_wei),
            UINT256_MAX if self.max_members == -1 else int(self.max_members),
            list(self.features),
            self.is_active,
            int(self.sort_order),
            self.is_team_plan,
            int(self.fee_tier_basis_points),
        ]

    def value(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class UpdatePlanCall(CreatePlanCall):
    function_name = "updatePlan"


@dataclass(frozen=True)
class DeletePlanCall:
    plan_key: int

    contract_name = ContractName.SUBSCRIPTION_MANAGER
    function_name = "deletePlan"

    def to_args(self) -> List[Any]:
        return [self.plan_key]

    def value(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class WithdrawEarningsCall:
    to: str
    amount_wei: int

    contract_name = ContractName.SUBSCRIPTION_MANAGER
    function_name = "withdrawEarnings"

    def to_args(self) -> List[Any]:
        return [self.to, int(self.amount_wei)]

    def value(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class SetPlanPriceCall:
    plan_key: int
    price_wei: int

    contract_name = ContractName.SUBSCRIPTION_MANAGER
    function_name = "setPlanPrice"

    def to_args(self) -> List[Any]:
        return [self.plan_key, int(self.price_wei)]

    def value(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class PaySubscriptionCall:
    """Payable; `amount` is msg.value (use amounts.subscription_amount for Hedera)."""

    plan_key: int
    amount: int

    contract_name = ContractName.SUBSCRIPTION_MANAGER
    function_name = "paySubscription"

    def to_args(self) -> List[Any]:
        return [self.plan_key]

    def value(self) -> Optional[int]:
        return int(self.amount)


@dataclass(frozen=True)
class TransactionConfig:
    """Unsigned call description handed to a wallet for signing."""

    address: str
    function_name: str
    args: List[Any] = field(default_factory=list)
    value: Optional[int] = None
    chain_id: Optional[int] = None
    data: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "address": self.address,
            "function_name": self.function_name,
            "args": [str(a) if isinstance(a, int) and not isinstance(a, bool) else a for a in self.args],
            "chain_id": self.chain_id,
            "data": self.data,
        }
        if self.value is not None:
            out["value"] = str(self.value)
        return out
