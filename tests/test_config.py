"""Config layering: defaults <- settlement.yaml <- env."""
from __future__ import annotations

import pytest

from settlement_engine import config
from settlement_engine.chains import get_chain_config


@pytest.fixture()
def yaml_config(tmp_path, monkeypatch):
    path = tmp_path / "settlement.yaml"
    path.write_text(
        "price_cache:\n"
        "  window_seconds: 60\n"
        "providers:\n"
        "  api_keys:\n"
        "    coingecko: from-yaml\n"
        "  skip_unhealthy: true\n"
        "fees:\n"
        "  validation_tolerance: '0.001'\n"
        "chains:\n"
        "  2810:\n"
        "    rpc_url: https://morph.example\n"
        "    contract_addresses:\n"
        "      escrow_core: '0x0000000000000000000000000000000000000001'\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("SETTLEMENT_CONFIG", str(path))
    for name in ("PRICE_CACHE_SECONDS", "IS_SCRIPT", "COINGECKO_API_KEY", "CRYPTOCOMPARE_API_KEY", "BINANCE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    return path


@pytest.fixture()
def no_config(tmp_path, monkeypatch):
    monkeypatch.setenv("SETTLEMENT_CONFIG", str(tmp_path / "missing.yaml"))
    for name in ("PRICE_CACHE_SECONDS", "IS_SCRIPT", "COINGECKO_API_KEY", "CRYPTOCOMPARE_API_KEY", "BINANCE_API_KEY"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults_without_yaml(self, no_config):
        assert config.price_cache_seconds() == 300.0
        assert config.script_mode() is False
        assert config.provider_api_keys() == {}
        assert config.skip_unhealthy_providers() is False
        assert config.fee_validation_tolerance() == "0.0001"
        assert config.strict_additive_escrow() is False
        assert config.chain_overrides(2810) == {}


class TestYaml:
    def test_yaml_values(self, yaml_config):
        assert config.price_cache_seconds() == 60.0
        assert config.provider_api_keys() == {"coingecko": "from-yaml"}
        assert config.skip_unhealthy_providers() is True
        assert config.fee_validation_tolerance() == "0.001"

    def test_unset_sections_keep_defaults(self, yaml_config):
        assert config.script_mode() is False
        assert config.strict_additive_escrow() is False

    def test_chain_overrides_applied(self, yaml_config):
        cfg = get_chain_config(2810)
        assert cfg.rpc_url == "https://morph.example"
        assert cfg.contract_addresses["escrow_core"] == "0x0000000000000000000000000000000000000001"
        assert cfg.contract_addresses["subscription_manager"] == "0x9a667b845034dDf18B7a5a9b50e2fe8CD4e6e2C1"


class TestEnv:
    def test_env_beats_yaml(self, yaml_config, monkeypatch):
        monkeypatch.setenv("PRICE_CACHE_SECONDS", "5")
        monkeypatch.setenv("COINGECKO_API_KEY", "from-env")
        monkeypatch.setenv("BINANCE_API_KEY", "bn")
        assert config.price_cache_seconds() == 5.0
        assert config.provider_api_keys() == {"coingecko": "from-env", "binance": "bn"}

    @pytest.mark.parametrize("value,expected", [("1", True), ("true", True), ("0", False), ("no", False)])
    def test_is_script(self, no_config, monkeypatch, value, expected):
        monkeypatch.setenv("IS_SCRIPT", value)
        assert config.script_mode() is expected
