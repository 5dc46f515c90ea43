"""
Test fixtures package for pitchpool tests.

This package provides factory functions for creating test objects:
- common.py: config, poll, stake and service factories

Usage:
    from fixtures.common import make_poll, make_service

    def test_something():
        service = make_service(balances={"alice": 500})
"""

from .common import (
    DEFAULT_QUESTION,
    KICKOFF,
    START,
    clock_of,
    create_voting_poll,
    make_config,
    make_poll,
    make_pool,
    make_receipt,
    make_service,
    make_stake,
    wallet_of,
)

__all__ = [
    "DEFAULT_QUESTION",
    "KICKOFF",
    "START",
    "clock_of",
    "create_voting_poll",
    "make_config",
    "make_poll",
    "make_pool",
    "make_receipt",
    "make_service",
    "make_stake",
    "wallet_of",
]
