"""
API Dependencies

Dependency injection for the API. The market service is a process-wide
singleton: polls, stakes and votes live in memory for the lifetime of
the server.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from core.config.runtime import RuntimeConfig, load_runtime_config
from engine.context import EngineContext
from orchestrator.market import MarketService

logger = logging.getLogger(__name__)


_service: Optional[MarketService] = None
_service_lock = threading.Lock()


def build_market_service(config: RuntimeConfig | None = None) -> MarketService:
    """
    Create a MarketService from configuration.

    The .env file is loaded automatically by core.config.runtime; config
    files are searched as described in load_runtime_config.
    """
    config = config or load_runtime_config()
    ctx = EngineContext.create(config)
    logger.info(
        f"Market service ready (min_stake={config.market.min_stake}, "
        f"fee={config.market.platform_fee_rate}, "
        f"voting_window={config.market.voting_window_seconds}s)"
    )
    return MarketService(ctx)


def get_market_service() -> MarketService:
    """FastAPI dependency returning the shared market service."""
    global _service
    with _service_lock:
        if _service is None:
            _service = build_market_service()
        return _service


def set_market_service(service: Optional[MarketService]) -> None:
    """Replace the shared market service (None resets it)."""
    global _service
    with _service_lock:
        _service = service
