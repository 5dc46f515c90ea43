"""
CLI Configuration

Loads the runtime configuration for CLI commands and renders the
template written by ``pitchpool config --init``.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.config.runtime import RuntimeConfig, load_runtime_config


DEFAULT_CONFIG_FILENAME = "pitchpool.json"


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables (PITCHPOOL_*) override file settings.

    Args:
        config_path: Optional path to a JSON or YAML config file

    Returns:
        Merged configuration
    """
    return load_runtime_config(config_path)


def get_default_config_template() -> str:
    """Get a template configuration file with every default spelled out."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"
