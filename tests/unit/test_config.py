"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py
"""
import json
from decimal import Decimal

import pytest

from core.config.runtime import (
    MarketConfig,
    RuntimeConfig,
    WalletConfig,
    load_runtime_config,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "PITCHPOOL_MIN_STAKE",
        "PITCHPOOL_PLATFORM_FEE_RATE",
        "PITCHPOOL_VOTING_WINDOW_SECONDS",
        "PITCHPOOL_STRONG_CONSENSUS_PCT",
        "PITCHPOOL_MODERATE_CONSENSUS_PCT",
        "PITCHPOOL_WALLET_SEED",
        "PITCHPOOL_WALLET_FAILURE_RATE",
        "PITCHPOOL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestMarketConfig:

    def test_defaults(self):
        config = MarketConfig()
        assert config.min_stake == Decimal("1.00")
        assert config.platform_fee_rate == Decimal("0.05")
        assert config.voting_window_seconds == 7200
        assert config.strong_consensus_pct == Decimal("85")
        assert config.moderate_consensus_pct == Decimal("60")
        assert config.early_resolution_min_votes == 5

    def test_coerces_strings_and_floats(self):
        config = MarketConfig(min_stake="2.5", platform_fee_rate=0.1, voting_window_seconds="60")
        assert config.min_stake == Decimal("2.5")
        assert config.platform_fee_rate == Decimal("0.1")
        assert config.voting_window_seconds == 60

    @pytest.mark.parametrize("overrides", [
        {"platform_fee_rate": "1"},
        {"platform_fee_rate": "-0.1"},
        {"min_stake": "0"},
        {"strong_consensus_pct": "50", "moderate_consensus_pct": "60"},
    ])
    def test_rejects_invalid_rules(self, overrides):
        with pytest.raises(ValueError):
            MarketConfig(**overrides)

    def test_wallet_failure_rate_bounds(self):
        with pytest.raises(ValueError):
            WalletConfig(failure_rate=2)


class TestRuntimeConfig:

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"market": {"min_stake": "5"}, "log_level": "DEBUG"})
        assert config.market.min_stake == Decimal("5")
        assert config.market.platform_fee_rate == Decimal("0.05")
        assert config.log_level == "DEBUG"

    def test_to_dict_is_json_friendly(self):
        data = RuntimeConfig().to_dict()
        json.dumps(data)
        assert data["market"]["min_stake"] == "1.00"
        assert RuntimeConfig.from_dict(data).market.min_stake == Decimal("1.00")

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PITCHPOOL_MIN_STAKE", "3")
        monkeypatch.setenv("PITCHPOOL_WALLET_SEED", "11")
        monkeypatch.setenv("PITCHPOOL_LOG_LEVEL", "WARNING")

        config = RuntimeConfig.from_env()
        assert config.market.min_stake == Decimal("3")
        assert config.wallet.seed == 11
        assert config.log_level == "WARNING"

    def test_env_overrides_file_values(self, monkeypatch):
        base = RuntimeConfig.from_dict({"market": {"min_stake": "5"}})
        monkeypatch.setenv("PITCHPOOL_MIN_STAKE", "7")

        overlaid = base.with_env_overrides()
        assert overlaid.market.min_stake == Decimal("7")
        assert base.market.min_stake == Decimal("5")


class TestLoadRuntimeConfig:

    def test_json_file(self, tmp_path):
        path = tmp_path / "pitchpool.json"
        path.write_text(json.dumps({"market": {"voting_window_seconds": 600}}))
        assert load_runtime_config(path).market.voting_window_seconds == 600

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "pitchpool.yaml"
        path.write_text("market:\n  platform_fee_rate: 0.02\nlog_level: DEBUG\n")
        config = load_runtime_config(path)
        assert config.market.platform_fee_rate == Decimal("0.02")
        assert config.log_level == "DEBUG"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_runtime_config(tmp_path / "absent.json")

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_runtime_config().market.min_stake == Decimal("1.00")
