"""
CLI Lock-Time Command

Resolve a lock policy against a kickoff time.

Usage:
    pitchpool lock-time --kickoff 2026-06-01T18:00:00Z --policy halftime
    pitchpool lock-time --kickoff 2026-06-01T18:00:00Z --policy custom --at 2026-06-01T18:30:00Z
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from datetime import datetime

from core.schemas.errors import PitchpoolException
from core.schemas.poll import LockPolicy
from engine.lifecycle import lock_time_for


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_REJECTED = 2


def parse_timestamp(value: str) -> datetime:
    """Parse ISO-8601, accepting a trailing Z for UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def lock_time_cmd(args: Namespace) -> int:
    """Execute the lock-time command."""
    try:
        kickoff = parse_timestamp(args.kickoff)
        custom_at = parse_timestamp(args.at) if args.at else None
    except ValueError as e:
        print(f"Error: invalid timestamp: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    policy = LockPolicy(args.policy)
    try:
        lock_at = lock_time_for(policy, kickoff, custom_at)
    except PitchpoolException as e:
        print(f"Rejected: {e.code}: {e.message}", file=sys.stderr)
        return EXIT_REJECTED

    if args.json:
        print(json.dumps({
            "policy": policy.value,
            "kickoff_at": kickoff.isoformat(),
            "lock_at": lock_at.isoformat(),
        }, indent=2))
    else:
        print(f"{policy.value}: staking locks at {lock_at.isoformat()}")
    return EXIT_SUCCESS
