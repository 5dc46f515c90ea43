"""
Poll Lifecycle Unit Tests
Tests for engine/lifecycle.py
"""
from datetime import datetime, timedelta, timezone

import pytest

from core.schemas.errors import InvalidPollException, InvalidStateException
from core.schemas.poll import LockPolicy, PollStatus, Side
from engine.lifecycle import (
    PollLifecycle,
    is_accepting_votes,
    is_lock_due,
    is_voting_window_elapsed,
    lock_time_for,
)
from fixtures.common import KICKOFF, make_poll


class TestLockTime:

    @pytest.mark.parametrize("policy,minutes", [
        (LockPolicy.KICKOFF, 0),
        (LockPolicy.HALFTIME, 45),
        (LockPolicy.SIXTY_MINUTES, 60),
    ])
    def test_presets_offset_from_kickoff(self, policy, minutes):
        assert lock_time_for(policy, KICKOFF) == KICKOFF + timedelta(minutes=minutes)

    def test_custom_uses_explicit_time(self):
        custom = KICKOFF + timedelta(minutes=30)
        assert lock_time_for(LockPolicy.CUSTOM, KICKOFF, custom) == custom

    def test_custom_without_time_rejected(self):
        with pytest.raises(InvalidPollException) as exc_info:
            lock_time_for(LockPolicy.CUSTOM, KICKOFF)
        assert exc_info.value.details["field_path"] == "lock_at"

    def test_naive_kickoff_treated_as_utc(self):
        naive = datetime(2026, 6, 1, 18, 0, 0)
        assert lock_time_for(LockPolicy.KICKOFF, naive).tzinfo == timezone.utc


class TestPredicates:

    def test_lock_due_at_lock_instant(self):
        poll = make_poll()
        assert not is_lock_due(poll, KICKOFF - timedelta(seconds=1))
        assert is_lock_due(poll, KICKOFF)

    def test_lock_not_due_once_locked(self):
        poll = make_poll(status=PollStatus.LOCKED)
        assert not is_lock_due(poll, KICKOFF + timedelta(hours=1))

    def test_voting_window(self):
        ends = KICKOFF + timedelta(hours=4)
        poll = make_poll(status=PollStatus.VOTING, voting_ends_at=ends)
        assert is_accepting_votes(poll, ends - timedelta(seconds=1))
        assert not is_accepting_votes(poll, ends)
        assert is_voting_window_elapsed(poll, ends)

    def test_window_never_elapsed_outside_voting(self):
        poll = make_poll(status=PollStatus.LOCKED)
        assert not is_voting_window_elapsed(poll, KICKOFF + timedelta(days=1))
        assert not is_accepting_votes(poll, KICKOFF)


class TestTransitions:

    def test_full_forward_path(self):
        lifecycle = PollLifecycle(voting_window_seconds=3600)
        poll = make_poll()
        concluded = KICKOFF + timedelta(minutes=95)

        lifecycle.lock(poll)
        assert poll.status is PollStatus.LOCKED

        lifecycle.open_voting(poll, concluded)
        assert poll.status is PollStatus.VOTING
        assert poll.concluded_at == concluded
        assert poll.voting_ends_at == concluded + timedelta(hours=1)

        lifecycle.mark_resolved(poll, Side.NO)
        assert poll.status is PollStatus.RESOLVED
        assert poll.outcome is Side.NO

    def test_cannot_skip_states(self):
        lifecycle = PollLifecycle()
        poll = make_poll()
        with pytest.raises(InvalidStateException):
            lifecycle.open_voting(poll, KICKOFF)
        with pytest.raises(InvalidStateException):
            lifecycle.mark_resolved(poll, Side.YES)
        assert poll.status is PollStatus.OPEN

    def test_cannot_lock_twice(self):
        lifecycle = PollLifecycle()
        poll = make_poll()
        lifecycle.lock(poll)
        with pytest.raises(InvalidStateException) as exc_info:
            lifecycle.lock(poll)
        assert exc_info.value.details["target"] == "locked"

    def test_resolved_is_terminal(self):
        lifecycle = PollLifecycle()
        poll = make_poll(status=PollStatus.RESOLVED, outcome=Side.YES)
        for transition in (lifecycle.lock, lambda p: lifecycle.mark_resolved(p, Side.NO)):
            with pytest.raises(InvalidStateException):
                transition(poll)
        assert poll.outcome is Side.YES

    def test_require_status(self):
        poll = make_poll(status=PollStatus.LOCKED)
        PollLifecycle.require_status(poll, PollStatus.LOCKED)
        with pytest.raises(InvalidStateException) as exc_info:
            PollLifecycle.require_status(poll, PollStatus.VOTING, "resolve")
        assert "Cannot resolve" in str(exc_info.value)
