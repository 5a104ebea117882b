"""Fake ContractAccess implementations and a stub web3 client for gateway tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from settlement_engine.core.errors import ContractUnavailableError, RpcError


class FakeContractAccess:
    """In-memory fee tiers keyed by (chain_id, user address lowercased)."""

    def __init__(
        self,
        tiers: Optional[Dict[str, int]] = None,
        *,
        default_bps: int = 0,
        plan_tiers: Optional[Dict[int, int]] = None,
        addresses: Optional[Dict[str, str]] = None,
        error: Optional[Exception] = None,
    ):
        self._tiers = {k.lower(): v for k, v in (tiers or {}).items()}
        self._default_bps = default_bps
        self._plan_tiers = plan_tiers if plan_tiers is not None else {0: 250, 1: 150, 2: 100}
        self._addresses = addresses if addresses is not None else {
            "escrow_core": "0xF5FCDBe9d4247D76c7fa5d2E06dBA1e77887F518",
            "subscription_manager": "0x9a667b845034dDf18B7a5a9b50e2fe8CD4e6e2C1",
        }
        self._error = error
        self.calls: List[tuple] = []

    def get_user_fee_tier_basis_points(self, user_address: str, chain_id: int) -> int:
        self.calls.append(("fee_tier", user_address, chain_id))
        if self._error is not None:
            raise self._error
        return self._tiers.get(user_address.lower(), self._default_bps)

    def get_contract_address(self, contract_name: str, chain_id: int) -> Optional[str]:
        return self._addresses.get(contract_name) or None

    def get_plan_fee_tiers(self, chain_id: int) -> Dict[int, int]:
        self.calls.append(("plan_tiers", chain_id))
        if self._error is not None:
            raise self._error
        return dict(self._plan_tiers)


def unavailable_contracts(chain_id: int = 1) -> FakeContractAccess:
    return FakeContractAccess(error=ContractUnavailableError("escrow_core", chain_id), addresses={})


def rpc_failing_contracts(chain_id: int = 2810) -> FakeContractAccess:
    return FakeContractAccess(error=RpcError(chain_id, "connection refused"))


# ---------------------------------------------------------------------------
# Stub web3 client: w3.eth.contract(address=..., abi=...).functions.X(*a).call()
# ---------------------------------------------------------------------------


class _StubCall:
    def __init__(self, outcome: Any):
        self._outcome = outcome

    def call(self) -> Any:
        outcome = self._outcome() if callable(self._outcome) else self._outcome
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class _StubFunctions:
    def __init__(self, contract: "StubContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        def _fn(*args):
            self._contract.invocations.append((name, args))
            return _StubCall(self._contract.responses[name](*args))

        return _fn


class StubContract:
    def __init__(self, address: str, responses: Dict[str, Any]):
        self.address = address
        self.responses = responses
        self.invocations: List[tuple] = []
        self.functions = _StubFunctions(self)

    def encode_abi(self, fn_name: str, args: Optional[list] = None) -> str:
        return f"0x{fn_name}:{len(args or [])}"


class StubWeb3:
    """Minimal web3 stand-in; `responses` maps function name -> callable(*args) -> value or exception."""

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.contracts: List[StubContract] = []
        self.eth = self

    def contract(self, address: str, abi: list) -> StubContract:
        c = StubContract(address, self.responses)
        self.contracts.append(c)
        return c
