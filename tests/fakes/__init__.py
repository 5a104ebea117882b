"""Fake providers, contract access and web3 stubs for tests (no live network)."""

from .contracts import FakeContractAccess, StubWeb3, rpc_failing_contracts, unavailable_contracts
from .providers import (
    CountingResolver,
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    FakePriceProviderFailNThenSucceed,
    five_providers,
)

__all__ = [
    "CountingResolver",
    "FakeContractAccess",
    "FakePriceProvider",
    "FakePriceProviderAlwaysFail",
    "FakePriceProviderFailNThenSucceed",
    "StubWeb3",
    "five_providers",
    "rpc_failing_contracts",
    "unavailable_contracts",
]
