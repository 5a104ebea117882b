"""
Load config from settlement.yaml with optional env overrides.
Single source of truth for price cache window, script mode, provider API keys,
and per-chain RPC / contract address overrides.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Defaults if no YAML or env
_DEFAULTS: Dict[str, Any] = {
    "price_cache": {"window_seconds": 300},
    "runtime": {"script_mode": False},
    "providers": {
        "api_keys": {"coingecko": "", "cryptocompare": "", "binance": ""},
        "skip_unhealthy": False,
    },
    "fees": {"validation_tolerance": "0.0001", "strict_additive_escrow": False},
    "chains": {},
}

_API_KEY_ENV = {
    "coingecko": "COINGECKO_API_KEY",
    "cryptocompare": "CRYPTOCOMPARE_API_KEY",
    "binance": "BINANCE_API_KEY",
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _config_yaml_path() -> Path:
    """settlement.yaml lives at repo root (parent of package dir). SETTLEMENT_CONFIG overrides."""
    override = os.environ.get("SETTLEMENT_CONFIG", "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "settlement.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    window = os.environ.get("PRICE_CACHE_SECONDS", "").strip()
    if window:
        overrides.setdefault("price_cache", {})["window_seconds"] = float(window)
    is_script = os.environ.get("IS_SCRIPT", "").strip()
    if is_script:
        overrides.setdefault("runtime", {})["script_mode"] = is_script.lower() in _TRUTHY
    for provider, env_name in _API_KEY_ENV.items():
        key = os.environ.get(env_name, "").strip()
        if key:
            overrides.setdefault("providers", {}).setdefault("api_keys", {})[provider] = key
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- settlement.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def price_cache_seconds() -> float:
    return float(get_config()["price_cache"]["window_seconds"])


def script_mode() -> bool:
    """True when running as a one-shot script: shared price caching is disabled."""
    return bool(get_config()["runtime"]["script_mode"])


def provider_api_keys() -> Dict[str, str]:
    """Non-empty API keys by provider name. Keys only raise rate limits; none are required."""
    keys = get_config()["providers"].get("api_keys", {}) or {}
    return {name: str(key) for name, key in keys.items() if key}


def skip_unhealthy_providers() -> bool:
    return bool(get_config()["providers"].get("skip_unhealthy", False))


def fee_validation_tolerance() -> str:
    return str(get_config()["fees"]["validation_tolerance"])


def strict_additive_escrow() -> bool:
    return bool(get_config()["fees"].get("strict_additive_escrow", False))


def chain_overrides(chain_id: int) -> Dict[str, Any]:
    """
    Per-chain overrides from YAML, e.g.:

        chains:
          2810:
            rpc_url: https://...
            contract_addresses:
              escrow_core: "0x..."
    """
    chains = get_config().get("chains") or {}
    entry: Optional[dict] = chains.get(chain_id) or chains.get(str(chain_id))
    return dict(entry) if isinstance(entry, dict) else {}
