"""
Contract access interface.

The fee pipeline reads on-chain subscription state only through
ContractAccess. Implementations raise ContractUnavailableError when the
contract is not deployed on the chain (unknown chains included) and RpcError when the read fails;
they never substitute a default tier.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol, runtime_checkable


class ContractName:
    ESCROW_CORE = "escrow_core"
    SUBSCRIPTION_MANAGER = "subscription_manager"


# 0=Free, 1=Pro, 2=Enterprise, 3=TeamPro, 4=TeamEnterprise
KNOWN_PLAN_KEYS = (0, 1, 2, 3, 4)

MAX_BASIS_POINTS = 10_000


@runtime_checkable
class ContractAccess(Protocol):
    def get_user_fee_tier_basis_points(self, user_address: str, chain_id: int) -> int:
        """Effective fee tier for the user: active plan's tier, else the free tier."""
        ...

    def get_contract_address(self, contract_name: str, chain_id: int) -> Optional[str]: ...

    def get_plan_fee_tiers(self, chain_id: int) -> Dict[int, int]:
        """Basis points per known plan key; plans that do not exist are left out."""
        ...
