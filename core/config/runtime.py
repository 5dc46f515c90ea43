"""
Runtime Configuration

Central configuration for market rules, the wallet collaborator and the API.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

from core.schemas.numeric import to_decimal

load_dotenv()


ENV_PREFIX = "PITCHPOOL_"


@dataclass
class MarketConfig:
    """Rules for staking, voting and payouts."""
    min_stake: Decimal = Decimal("1.00")
    platform_fee_rate: Decimal = Decimal("0.05")
    voting_window_seconds: int = 2 * 60 * 60
    strong_consensus_pct: Decimal = Decimal("85")
    moderate_consensus_pct: Decimal = Decimal("60")
    early_resolution_min_votes: int = 5
    vote_reward_rate: Decimal = Decimal("0.005")
    question_min_length: int = 10
    question_max_length: int = 120

    def __post_init__(self):
        # YAML/JSON/env hand us floats and strings
        self.min_stake = to_decimal(self.min_stake)
        self.platform_fee_rate = to_decimal(self.platform_fee_rate)
        self.strong_consensus_pct = to_decimal(self.strong_consensus_pct)
        self.moderate_consensus_pct = to_decimal(self.moderate_consensus_pct)
        self.vote_reward_rate = to_decimal(self.vote_reward_rate)
        self.voting_window_seconds = int(self.voting_window_seconds)
        self.early_resolution_min_votes = int(self.early_resolution_min_votes)

        if not (Decimal("0") <= self.platform_fee_rate < Decimal("1")):
            raise ValueError(f"platform_fee_rate must be in [0, 1), got {self.platform_fee_rate}")
        if self.moderate_consensus_pct > self.strong_consensus_pct:
            raise ValueError("moderate_consensus_pct cannot exceed strong_consensus_pct")
        if self.min_stake <= 0:
            raise ValueError(f"min_stake must be positive, got {self.min_stake}")


@dataclass
class WalletConfig:
    """Configuration for the simulated wallet collaborator."""
    starting_balance: Decimal = Decimal("0")
    base_fee_stroops: int = 100
    failure_rate: float = 0.0
    seed: Optional[int] = None
    contract_id: str = "CPITCHPOOLSTAKINGCONTRACT"

    def __post_init__(self):
        self.starting_balance = to_decimal(self.starting_balance)
        if not 0.0 <= float(self.failure_rate) <= 1.0:
            raise ValueError(f"failure_rate must be in [0, 1], got {self.failure_rate}")
        self.failure_rate = float(self.failure_rate)


@dataclass
class ApiConfig:
    """Configuration for the HTTP service."""
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    market: MarketConfig = field(default_factory=MarketConfig)
    wallet: WalletConfig = field(default_factory=WalletConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - PITCHPOOL_MIN_STAKE: Minimum stake amount
        - PITCHPOOL_PLATFORM_FEE_RATE: Fee on winners' profit (0.05 = 5%)
        - PITCHPOOL_VOTING_WINDOW_SECONDS: Oracle voting window length
        - PITCHPOOL_STRONG_CONSENSUS_PCT: Share needed for automatic resolution
        - PITCHPOOL_MODERATE_CONSENSUS_PCT: Boundary between admin and multi-sig review
        - PITCHPOOL_WALLET_SEED: Seed for simulated wallet failure injection
        - PITCHPOOL_WALLET_FAILURE_RATE: Simulated settlement failure probability
        - PITCHPOOL_LOG_LEVEL: Log level
        """
        overrides: dict[str, Any] = {}

        market_vars = {
            "MIN_STAKE": "min_stake",
            "PLATFORM_FEE_RATE": "platform_fee_rate",
            "VOTING_WINDOW_SECONDS": "voting_window_seconds",
            "STRONG_CONSENSUS_PCT": "strong_consensus_pct",
            "MODERATE_CONSENSUS_PCT": "moderate_consensus_pct",
        }
        for env_name, key in market_vars.items():
            value = os.getenv(f"{ENV_PREFIX}{env_name}")
            if value:
                overrides.setdefault("market", {})[key] = value

        if os.getenv(f"{ENV_PREFIX}WALLET_SEED"):
            overrides.setdefault("wallet", {})["seed"] = int(os.getenv(f"{ENV_PREFIX}WALLET_SEED", "0"))
        if os.getenv(f"{ENV_PREFIX}WALLET_FAILURE_RATE"):
            overrides.setdefault("wallet", {})["failure_rate"] = float(
                os.getenv(f"{ENV_PREFIX}WALLET_FAILURE_RATE", "0")
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        market_data = data.get("market", {})
        wallet_data = data.get("wallet", {})
        api_data = data.get("api", {})

        return cls(
            market=MarketConfig(**market_data) if market_data else MarketConfig(),
            wallet=WalletConfig(**wallet_data) if wallet_data else WalletConfig(),
            api=ApiConfig(**api_data) if api_data else ApiConfig(),
            log_level=data.get("log_level", "INFO"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        if "market" in overrides:
            for key, value in overrides["market"].items():
                setattr(new_config.market, key, value)
            # re-run coercion and validation on the overlaid values
            new_config.market.__post_init__()

        if "wallet" in overrides:
            for key, value in overrides["wallet"].items():
                setattr(new_config.wallet, key, value)
            new_config.wallet.__post_init__()

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON-friendly dictionary."""
        return {
            "market": {
                "min_stake": str(self.market.min_stake),
                "platform_fee_rate": str(self.market.platform_fee_rate),
                "voting_window_seconds": self.market.voting_window_seconds,
                "strong_consensus_pct": str(self.market.strong_consensus_pct),
                "moderate_consensus_pct": str(self.market.moderate_consensus_pct),
                "early_resolution_min_votes": self.market.early_resolution_min_votes,
                "vote_reward_rate": str(self.market.vote_reward_rate),
                "question_min_length": self.market.question_min_length,
                "question_max_length": self.market.question_max_length,
            },
            "wallet": {
                "starting_balance": str(self.wallet.starting_balance),
                "base_fee_stroops": self.wallet.base_fee_stroops,
                "failure_rate": self.wallet.failure_rate,
                "seed": self.wallet.seed,
                "contract_id": self.wallet.contract_id,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
            },
            "log_level": self.log_level,
            "extra": self.extra,
        }


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load RuntimeConfig from a config file, then overlay environment variables.

    Search order when no path is given:
      1. ./pitchpool.json
      2. ./.pitchpool.json
      3. ~/.config/pitchpool/config.json

    YAML files (.yaml/.yml) are accepted when passed explicitly.
    Environment variables ALWAYS override config file values.
    """
    import json

    if config_path is not None:
        if config_path.suffix in (".yaml", ".yml"):
            return RuntimeConfig.from_yaml(config_path).with_env_overrides()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path) as f:
            return RuntimeConfig.from_dict(json.load(f)).with_env_overrides()

    search_paths = [
        Path.cwd() / "pitchpool.json",
        Path.cwd() / ".pitchpool.json",
        Path.home() / ".config" / "pitchpool" / "config.json",
    ]
    for path in search_paths:
        if path.exists():
            with open(path) as f:
                return RuntimeConfig.from_dict(json.load(f)).with_env_overrides()

    return RuntimeConfig().with_env_overrides()


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
