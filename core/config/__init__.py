"""
Runtime Configuration Module

Provides configuration loading and management for the staking engine.
"""

from .runtime import (
    ApiConfig,
    MarketConfig,
    RuntimeConfig,
    WalletConfig,
    get_default_config,
    load_runtime_config,
    set_default_config,
)

__all__ = [
    "ApiConfig",
    "MarketConfig",
    "RuntimeConfig",
    "WalletConfig",
    "get_default_config",
    "load_runtime_config",
    "set_default_config",
]
