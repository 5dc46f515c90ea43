"""
Pytest configuration and shared fixtures for pitchpool tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_config = _common.make_config
make_poll = _common.make_poll
make_service = _common.make_service


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def market_config():
    """Provide default market rules."""
    return make_config().market


@pytest.fixture
def poll():
    """Provide an OPEN poll with an empty pool."""
    return make_poll()


@pytest.fixture
def service():
    """Provide a MarketService with a frozen clock and funded stakers."""
    return make_service(balances={
        "alice": 1000,
        "bob": 1000,
        "carol": 1000,
        "dave": 1000,
    })


@pytest.fixture
def clock(service):
    """The FrozenClock driving the service fixture."""
    return service.ctx.clock


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
