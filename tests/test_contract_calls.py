"""Typed write-call requests: argument order, unlimited members, payable value."""
from __future__ import annotations

from settlement_engine.contracts import (
    ContractName,
    CreatePlanCall,
    DeletePlanCall,
    PaySubscriptionCall,
    SetPlanPriceCall,
    TransactionConfig,
    UpdatePlanCall,
    WithdrawEarningsCall,
)
from settlement_engine.contracts.abi import PLAN_FEE_TIER_INDEX, SUBSCRIPTION_MANAGER_ABI
from settlement_engine.contracts.calls import UINT256_MAX


def _plan(**kw):
    base = dict(
        plan_key=1,
        name="pro",
        display_name="Pro",
        description="Lower fees",
        price_wei=10**16,
        max_members=5,
        features=("priority", "analytics"),
        sort_order=2,
        fee_tier_basis_points=150,
    )
    base.update(kw)
    return CreatePlanCall(**base)


class TestPlanCalls:
    def test_create_plan_args_follow_abi_order(self):
        args = _plan().to_args()
        assert args == [1, "pro", "Pro", "Lower fees", 10**16, 5, ["priority", "analytics"], True, 2, False, 150]
        assert args[PLAN_FEE_TIER_INDEX] == 150
        abi = next(f for f in SUBSCRIPTION_MANAGER_ABI if f["name"] == "createPlan")
        assert len(abi["inputs"]) == len(args)

    def test_unlimited_members(self):
        assert _plan(max_members=-1).to_args()[5] == UINT256_MAX

    def test_update_plan_same_args_other_function(self):
        update = UpdatePlanCall(**_plan().__dict__)
        assert update.function_name == "updatePlan"
        assert update.to_args() == _plan().to_args()

    def test_non_payable_calls_have_no_value(self):
        for call in (_plan(), DeletePlanCall(3), SetPlanPriceCall(1, 5), WithdrawEarningsCall("0xabc", 7)):
            assert call.value() is None
            assert call.contract_name == ContractName.SUBSCRIPTION_MANAGER

    def test_simple_args(self):
        assert DeletePlanCall(3).to_args() == [3]
        assert SetPlanPriceCall(1, 5 * 10**15).to_args() == [1, 5 * 10**15]
        assert WithdrawEarningsCall("0xabc", 7).to_args() == ["0xabc", 7]


class TestPaySubscription:
    def test_plan_key_arg_and_value(self):
        call = PaySubscriptionCall(plan_key=2, amount=5 * 10**18)
        assert call.to_args() == [2]
        assert call.value() == 5 * 10**18


class TestTransactionConfig:
    def test_to_dict_stringifies_ints(self):
        tx = TransactionConfig(
            address="0xabc",
            function_name="createPlan",
            args=[1, "pro", True, UINT256_MAX],
            value=None,
            chain_id=2810,
            data="0xdead",
        )
        d = tx.to_dict()
        assert d["args"] == ["1", "pro", True, str(UINT256_MAX)]
        assert "value" not in d
        assert d["chain_id"] == 2810

    def test_value_included_when_payable(self):
        d = TransactionConfig("0xabc", "paySubscription", [0], value=10**18).to_dict()
        assert d["value"] == str(10**18)
