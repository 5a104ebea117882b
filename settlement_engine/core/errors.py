"""
Shared exception types for settlement_engine.
Stable surface; extend only.
"""

from __future__ import annotations

from typing import Optional


class SettlementEngineError(Exception):
    """Base exception for settlement_engine; catch this for any package-raised error."""

    pass


class ProviderHTTPError(SettlementEngineError):
    """Non-2xx response from an upstream price API. Carries the status for retry classification."""

    def __init__(self, provider: str, status_code: int, url: str) -> None:
        self.provider = provider
        self.status_code = status_code
        self.url = url
        super().__init__(f"{provider} API error: {status_code}. URL: {url}")


class ProviderUnavailableError(SettlementEngineError):
    """A single price provider failed after its retries were exhausted."""

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(f"[{provider}] {message}")


class PriceUnavailableError(SettlementEngineError):
    """No provider could produce a price. Recoverable; callers should ask the user to retry."""

    def __init__(self, symbol_or_id: str, message: str = "Unable to fetch current price") -> None:
        self.symbol_or_id = symbol_or_id
        super().__init__(f"{message} for {symbol_or_id}")


class UnsupportedChainError(SettlementEngineError):
    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        super().__init__(f"Unsupported or invalid chain ID: {chain_id}")


class ContractUnavailableError(SettlementEngineError):
    """The requested contract is not deployed (or not configured) on the chain."""

    def __init__(self, contract_name: str, chain_id: int) -> None:
        self.contract_name = contract_name
        self.chain_id = chain_id
        super().__init__(f"{contract_name} address not configured for chain {chain_id}")


class RpcError(SettlementEngineError):
    """A contract read failed at the RPC / network level."""

    def __init__(self, chain_id: int, message: str) -> None:
        self.chain_id = chain_id
        super().__init__(f"RPC call failed on chain {chain_id}: {message}")


class FeeUnavailableError(SettlementEngineError):
    """
    The user's fee tier could not be verified.

    Distinct from "user has no subscription" (which is the free tier).
    Settlement must be blocked rather than priced at a guessed tier.
    """

    def __init__(self, user_address: str, chain_id: int, reason: Optional[str] = None) -> None:
        self.user_address = user_address
        self.chain_id = chain_id
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unable to fetch fee tier for {user_address} on chain {chain_id}{detail}")


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
