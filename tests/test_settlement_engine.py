"""
End-to-end through SettlementEngine with fake providers and fake contracts.

Verifies that:
- Native prices route through the chain's CoinGecko id (testnets via mainnet)
- The cache sits in front of the fallback chain
- Fee tiers come from contract state; failures surface as FeeUnavailableError
- Escrow amounts at the user's tier apply the dual-decimal rule
"""
from __future__ import annotations

from decimal import Decimal

import pytest

from settlement_engine import SettlementEngine
from settlement_engine.contracts import PaySubscriptionCall
from settlement_engine.core.errors import FeeUnavailableError, PriceUnavailableError
from settlement_engine.providers.base import ProviderName
from settlement_engine.providers.cache import PriceCache
from settlement_engine.providers.chain import PriceFallbackChain
from tests.fakes import FakeContractAccess, five_providers, rpc_failing_contracts

USER = "0x3333333333333333333333333333333333333333"


def _engine(contracts=None, strict_additive=False, **prices):
    providers = five_providers(**prices)
    chain = PriceFallbackChain(providers)
    engine = SettlementEngine(
        contracts=contracts or FakeContractAccess({USER: 250}),
        chain=chain,
        prices=PriceCache(chain.resolve_price),
        strict_additive=strict_additive,
        fee_tolerance="0.0001",
    )
    return engine, {p.provider_name: p for p in providers}


class TestPrices:
    def test_native_price_for_testnet_uses_mainnet_id(self):
        engine, providers = _engine(coingecko={"ethereum": 2500.0})
        result = engine.get_native_price(11155111)
        assert result.price == 2500.0
        assert providers[ProviderName.COINGECKO].calls[0][0] == "ethereum"

    def test_cache_in_front_of_chain(self):
        engine, providers = _engine(kraken={"HBAR": 0.07})
        engine.get_native_price(295)
        engine.get_native_price(296)
        assert providers[ProviderName.KRAKEN].call_count == 1

    def test_provider_health_exposed(self):
        engine, _ = _engine(coingecko={"bitcoin": 60000.0})
        engine.get_cached_price("bitcoin", symbol="BTC", coingecko_id="bitcoin")
        assert engine.provider_health()["coingecko"]["is_healthy"] is True

    def test_all_down_conversion_raises(self):
        engine, _ = _engine()
        assert engine.get_native_price(1) is None
        with pytest.raises(PriceUnavailableError):
            engine.convert_usd_to_smallest_unit("10", 1)


class TestConversions:
    def test_usd_round_trip(self):
        engine, _ = _engine(coingecko={"ethereum": 2000.0})
        wei = engine.convert_usd_to_smallest_unit("50", 1)
        assert wei == 25 * 10**15
        assert engine.convert_smallest_unit_to_usd(wei, 1) == Decimal(50)

    def test_usd_to_native(self):
        engine, _ = _engine(coingecko={"hedera-hashgraph": 0.05})
        conversion = engine.convert_usd_to_native("10", 296)
        assert conversion.native_amount == "200.0000"
        assert conversion.native_symbol == "HBAR"
        assert conversion.to_dict()["chain_id"] == 296


class TestFees:
    def test_fee_pipeline(self):
        engine, _ = _engine()
        assert engine.calculate_user_fee(USER, "1000", 2810).fee_amount == Decimal(25)
        assert engine.validate_client_fee(USER, "1000", 2810, "25")
        assert not engine.validate_client_fee(USER, "1000", 2810, "20")

    def test_fee_info(self):
        engine, _ = _engine()
        assert engine.get_fee_info(USER, 2810).user_fee_percentage == Decimal("2.5")

    def test_rpc_failure_blocks_settlement(self):
        engine, _ = _engine(contracts=rpc_failing_contracts())
        with pytest.raises(FeeUnavailableError):
            engine.compute_user_escrow_amounts(USER, "10", 2810)


class TestEscrow:
    def test_user_tier_on_hedera(self):
        engine, _ = _engine()
        b = engine.compute_user_escrow_amounts(USER, "10", 296)
        assert b.fee_amount.contract_amount == 25_000_000
        assert b.total_amount.transaction_value == 10_250_000_000_000_000_000

    def test_strict_flag_forwarded(self):
        default, _ = _engine()
        strict, _ = _engine(strict_additive=True)
        assert default.compute_escrow_amounts("0.0000000045", "0.2", 295).total_amount.contract_amount == 1
        assert strict.compute_escrow_amounts("0.0000000045", "0.2", 295).total_amount.contract_amount == 0


class TestTransactions:
    def test_contracts_without_builder(self):
        engine, _ = _engine()
        with pytest.raises(TypeError, match="cannot build transactions"):
            engine.build_transaction(PaySubscriptionCall(0, 1), 2810)

    def test_close_is_safe_without_closer(self):
        engine, _ = _engine()
        engine.close()
