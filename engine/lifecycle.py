"""
Poll Lifecycle

State machine: OPEN -> LOCKED -> VOTING -> RESOLVED.

The lifecycle is the only writer of ``Poll.status``. It owns no timers:
lock and voting deadlines are exposed as pure predicates over a supplied
``now`` and an external scheduler decides when to call the transitions.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from core.schemas.canonical import ensure_utc
from core.schemas.errors import InvalidPollException, InvalidStateException
from core.schemas.poll import LockPolicy, Poll, PollStatus, Side


logger = logging.getLogger(__name__)


# Minutes after kickoff for each preset
LOCK_OFFSETS_MINUTES: dict[LockPolicy, int] = {
    LockPolicy.KICKOFF: 0,
    LockPolicy.HALFTIME: 45,
    LockPolicy.SIXTY_MINUTES: 60,
}

# Each state's only legal successor
_NEXT_STATUS: dict[PollStatus, PollStatus] = {
    PollStatus.OPEN: PollStatus.LOCKED,
    PollStatus.LOCKED: PollStatus.VOTING,
    PollStatus.VOTING: PollStatus.RESOLVED,
}


def lock_time_for(
    policy: LockPolicy,
    kickoff_at: datetime,
    custom_at: Optional[datetime] = None,
) -> datetime:
    """
    Resolve a lock policy to a concrete UTC instant.

    Raises:
        InvalidPollException: If policy is CUSTOM and custom_at is missing.
    """
    if policy is LockPolicy.CUSTOM:
        if custom_at is None:
            raise InvalidPollException(
                "Custom lock policy requires an explicit lock time",
                field_path="lock_at",
            )
        return ensure_utc(custom_at)
    return ensure_utc(kickoff_at) + timedelta(minutes=LOCK_OFFSETS_MINUTES[policy])


def is_lock_due(poll: Poll, now: datetime) -> bool:
    """True once an OPEN poll has reached its lock instant."""
    return poll.status is PollStatus.OPEN and ensure_utc(now) >= ensure_utc(poll.lock_at)


def voting_deadline(concluded_at: datetime, window_seconds: int) -> datetime:
    return ensure_utc(concluded_at) + timedelta(seconds=window_seconds)


def is_voting_window_elapsed(poll: Poll, now: datetime) -> bool:
    """True once a VOTING poll has passed its deadline."""
    if poll.status is not PollStatus.VOTING or poll.voting_ends_at is None:
        return False
    return ensure_utc(now) >= ensure_utc(poll.voting_ends_at)


def is_accepting_votes(poll: Poll, now: datetime) -> bool:
    return poll.status is PollStatus.VOTING and not is_voting_window_elapsed(poll, now)


class PollLifecycle:
    """
    Applies status transitions to polls.

    Invalid moves (backwards, skipping a state, leaving RESOLVED) raise
    InvalidStateException; nothing is silently ignored.
    """

    def __init__(self, voting_window_seconds: int = 2 * 60 * 60) -> None:
        self.voting_window_seconds = voting_window_seconds

    @staticmethod
    def require_status(poll: Poll, expected: PollStatus, action: str = "operation") -> None:
        if poll.status is not expected:
            raise InvalidStateException(
                f"Cannot {action}: poll {poll.poll_id} is {poll.status.value}, "
                f"expected {expected.value}",
                poll_id=poll.poll_id,
                status=poll.status.value,
            )

    def _transition(self, poll: Poll, target: PollStatus) -> None:
        if _NEXT_STATUS.get(poll.status) is not target:
            raise InvalidStateException(
                f"Invalid transition {poll.status.value} -> {target.value} "
                f"for poll {poll.poll_id}",
                poll_id=poll.poll_id,
                status=poll.status.value,
                details={"target": target.value},
            )
        poll.status = target

    def lock(self, poll: Poll) -> Poll:
        """OPEN -> LOCKED. Staking stops."""
        self._transition(poll, PollStatus.LOCKED)
        logger.info(f"Poll {poll.poll_id} locked")
        return poll

    def open_voting(self, poll: Poll, concluded_at: datetime) -> Poll:
        """LOCKED -> VOTING once the match is reported concluded."""
        self._transition(poll, PollStatus.VOTING)
        poll.concluded_at = ensure_utc(concluded_at)
        poll.voting_ends_at = voting_deadline(concluded_at, self.voting_window_seconds)
        logger.info(
            f"Poll {poll.poll_id} open for voting until {poll.voting_ends_at.isoformat()}"
        )
        return poll

    def mark_resolved(self, poll: Poll, outcome: Side) -> Poll:
        """VOTING -> RESOLVED with the binding outcome."""
        self._transition(poll, PollStatus.RESOLVED)
        poll.outcome = outcome
        logger.info(f"Poll {poll.poll_id} resolved {outcome.value.upper()}")
        return poll
