"""
Pitchpool CLI

Command-line interface for the pitchpool staking engine.

Usage:
    python -m pitchpool_cli preview --side yes --amount 100 --yes-pool 7000 --no-pool 3000
    python -m pitchpool_cli consensus --yes 92 --no 5 --unclear 3
    python -m pitchpool_cli lock-time --kickoff 2026-06-01T18:00:00Z --policy halftime
    python -m pitchpool_cli simulate scenario.yaml
    python -m pitchpool_cli serve
"""

__version__ = "0.1.0"
