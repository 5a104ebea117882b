"""
Server-side fee computation and validation.

The fee tier is always read from chain state, never taken from the client.
When the tier cannot be read (contract missing on the chain, RPC failure,
nonsensical basis points) FeeUnavailableError is raised; the service never
guesses a tier, so "free tier" and "could not verify" stay distinguishable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional, Union

from . import config
from .amounts import AmountLike, to_decimal
from .contracts.base import MAX_BASIS_POINTS, ContractAccess, ContractName
from .core.errors import ContractUnavailableError, FeeUnavailableError, RpcError

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)


def basis_points_to_percentage(bps: int) -> Decimal:
    """250 -> Decimal('2.5')."""
    return Decimal(int(bps)) / _HUNDRED


@dataclass(frozen=True)
class FeeCalculationResult:
    fee_percentage: Decimal
    fee_amount: Decimal
    net_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "fee_percentage": str(self.fee_percentage),
            "fee_amount": str(self.fee_amount),
            "net_amount": str(self.net_amount),
        }


@dataclass(frozen=True)
class FeeValidationResult:
    """Truthy when the client's fee is within tolerance of the authoritative fee."""

    is_valid: bool
    correct_fee: FeeCalculationResult
    provided_fee: Decimal

    def __bool__(self) -> bool:
        return self.is_valid

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "correct_fee": self.correct_fee.to_dict(),
            "provided_fee": str(self.provided_fee),
        }


@dataclass(frozen=True)
class FeeInfo:
    user_address: str
    chain_id: int
    user_fee_percentage: Decimal
    plan_fee_tiers: Dict[int, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "user_address": self.user_address,
            "chain_id": self.chain_id,
            "user_fee_percentage": str(self.user_fee_percentage),
            "plan_fee_tiers": {str(k): str(v) for k, v in self.plan_fee_tiers.items()},
        }


class FeeService:
    """Fee tier lookup, fee/net split, and client fee validation."""

    def __init__(self, contracts: ContractAccess, tolerance: Optional[Union[str, Decimal]] = None) -> None:
        self._contracts = contracts
        self._tolerance = Decimal(str(tolerance if tolerance is not None else config.fee_validation_tolerance()))

    @property
    def tolerance(self) -> Decimal:
        return self._tolerance

    def get_user_fee_basis_points(self, user_address: str, chain_id: int) -> int:
        try:
            bps = self._contracts.get_user_fee_tier_basis_points(user_address, chain_id)
        except (ContractUnavailableError, RpcError) as exc:
            logger.error("Fee tier lookup failed for %s on chain %s: %s", user_address, chain_id, exc)
            raise FeeUnavailableError(user_address, chain_id, str(exc)) from exc
        if isinstance(bps, bool) or not isinstance(bps, int) or not 0 <= bps <= MAX_BASIS_POINTS:
            logger.error("Fee tier for %s on chain %s out of range: %r", user_address, chain_id, bps)
            raise FeeUnavailableError(user_address, chain_id, f"basis points out of range: {bps!r}")
        return bps

    def get_user_fee_percentage(self, user_address: str, chain_id: int) -> Decimal:
        return basis_points_to_percentage(self.get_user_fee_basis_points(user_address, chain_id))

    def calculate_user_fee(self, user_address: str, amount: AmountLike, chain_id: int) -> FeeCalculationResult:
        value = to_decimal(amount)
        if value < 0:
            raise ValueError(f"Amount must be non-negative, got {amount!r}")
        percentage = self.get_user_fee_percentage(user_address, chain_id)
        fee_amount = value * percentage / _HUNDRED
        return FeeCalculationResult(
            fee_percentage=percentage,
            fee_amount=fee_amount,
            net_amount=value - fee_amount,
        )

    def validate_client_fee(
        self,
        user_address: str,
        amount: AmountLike,
        chain_id: int,
        client_fee: AmountLike,
    ) -> FeeValidationResult:
        """Compare the client's fee to the authoritative one: |a - c| / a <= tolerance."""
        correct = self.calculate_user_fee(user_address, amount, chain_id)
        provided = to_decimal(client_fee)
        authoritative = correct.fee_amount
        if authoritative == 0:
            is_valid = provided == 0
        else:
            is_valid = abs(authoritative - provided) / authoritative <= self._tolerance
        if not is_valid:
            logger.warning(
                "Client fee mismatch for %s on chain %s: provided %s, expected %s",
                user_address, chain_id, provided, authoritative,
            )
        return FeeValidationResult(is_valid=is_valid, correct_fee=correct, provided_fee=provided)

    def get_fee_info(self, user_address: str, chain_id: int) -> FeeInfo:
        """User's fee percentage plus the fee percentage of every known plan."""
        user_percentage = self.get_user_fee_percentage(user_address, chain_id)
        tiers: Dict[int, Decimal] = {}
        if self._contracts.get_contract_address(ContractName.SUBSCRIPTION_MANAGER, chain_id):
            try:
                raw = self._contracts.get_plan_fee_tiers(chain_id)
            except (ContractUnavailableError, RpcError) as exc:
                raise FeeUnavailableError(user_address, chain_id, str(exc)) from exc
            tiers = {k: basis_points_to_percentage(v) for k, v in sorted(raw.items())}
        return FeeInfo(
            user_address=user_address,
            chain_id=int(chain_id),
            user_fee_percentage=user_percentage,
            plan_fee_tiers=tiers,
        )
