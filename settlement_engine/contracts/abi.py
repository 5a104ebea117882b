"""Minimal ABIs: only the functions this package reads or encodes."""

from __future__ import annotations

from typing import Any, Dict, List


def _fn(name: str, inputs: List[tuple], outputs: List[tuple], mutability: str = "view") -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


_PLAN_FIELDS = [
    ("planKey", "uint8"),
    ("name", "string"),
    ("displayName", "string"),
    ("description", "string"),
    ("priceWei", "uint256"),
    ("maxMembers", "uint256"),
    ("features", "string[]"),
    ("isActive", "bool"),
    ("sortOrder", "uint256"),
    ("isTeamPlan", "bool"),
    ("feeTierBasisPoints", "uint256"),
]

PLAN_FEE_TIER_INDEX = len(_PLAN_FIELDS) - 1

ESCROW_CORE_ABI: List[Dict[str, Any]] = [
    _fn("getUserFeePercentage", [("user", "address")], [("", "uint256")]),
]

SUBSCRIPTION_MANAGER_ABI: List[Dict[str, Any]] = [
    {
        "type": "function",
        "name": "getPlan",
        "stateMutability": "view",
        "inputs": [{"name": "planKey", "type": "uint8"}],
        "outputs": [
            {
                "name": "",
                "type": "tuple",
                "components": [{"name": n, "type": t} for n, t in _PLAN_FIELDS],
            }
        ],
    },
    _fn("createPlan", _PLAN_FIELDS, [], "nonpayable"),
    _fn("updatePlan", _PLAN_FIELDS, [], "nonpayable"),
    _fn("deletePlan", [("planKey", "uint8")], [], "nonpayable"),
    _fn("withdrawEarnings", [("to", "address"), ("amount", "uint256")], [], "nonpayable"),
    _fn("setPlanPrice", [("planKey", "uint8"), ("priceWei", "uint256")], [], "nonpayable"),
    _fn("paySubscription", [("planKey", "uint8")], [], "payable"),
]
