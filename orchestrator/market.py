"""
Market Service

In-process runtime wiring for the staking and resolution engine.

Composes StakeLedger, PollLifecycle, VoteTally and ResolutionEngine
behind a poll registry. Reads ``now`` from the injected clock and passes
it down; every mutation on a poll runs under that poll's lock so that
different polls never contend.
"""
from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, Union

from core.schemas.canonical import ensure_utc
from core.schemas.errors import (
    InvalidAmountException,
    InvalidPollException,
    PollNotFoundException,
)
from core.schemas.numeric import HUNDRED, ZERO, to_decimal
from core.schemas.poll import LockPolicy, Poll, PollCategory, PollStatus, Side
from core.schemas.resolution import ResolutionDecision, ResolutionOutcome
from core.schemas.stake import Stake, StakePayout, StakePlacement, StakePreview
from core.schemas.vote import TallyResult, VoteDecision, VoteRecord

from engine.context import EngineContext
from engine.ledger import StakeLedger
from engine.lifecycle import (
    PollLifecycle,
    is_accepting_votes,
    is_lock_due,
    is_voting_window_elapsed,
    lock_time_for,
)
from engine.locks import PollLocks
from engine.payouts import preview_stake, settle_poll, vote_reward
from engine.resolution import ResolutionEngine
from engine.tally import VoteTally


logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================

@dataclass
class VoteCastResult:
    """Outcome of a single oracle vote."""
    record: VoteRecord
    tally: TallyResult
    reward: Decimal
    resolution: ResolutionDecision


@dataclass
class VoterStats:
    """An oracle's track record."""
    voter: str
    votes_cast: int = 0
    earnings: Decimal = ZERO
    resolved_votes: int = 0
    correct_votes: int = 0

    @property
    def accuracy(self) -> Optional[Decimal]:
        """Share of votes on resolved polls that matched the outcome, or None."""
        if self.resolved_votes == 0:
            return None
        return Decimal(self.correct_votes) * HUNDRED / Decimal(self.resolved_votes)


@dataclass
class SchedulerTick:
    """What one scheduler sweep changed."""
    now: datetime
    locked: list[Poll] = field(default_factory=list)
    decisions: list[ResolutionDecision] = field(default_factory=list)


def _new_poll_id() -> str:
    return f"poll_{uuid.uuid4().hex[:16]}"


# =============================================================================
# Service
# =============================================================================

class MarketService:
    """
    Poll registry plus the engine components that act on it.

    Usage:
        service = MarketService(EngineContext.create_test())
        poll = service.create_poll("match-1", "Will Haaland score a goal?",
                                   "player_event", kickoff_at=...)
        service.place_stake(poll.poll_id, "alice", Side.YES, "25")
    """

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx
        self.config = ctx.config.market
        self.locks = PollLocks()
        self.lifecycle = PollLifecycle(self.config.voting_window_seconds)
        self.ledger = StakeLedger(ctx.wallet, self.config, self.locks)
        self.votes = VoteTally(self.config, self.locks)
        self.resolution = ResolutionEngine(self.lifecycle, self.config, self.locks)
        self._polls: dict[str, Poll] = {}
        self._registry_lock = threading.Lock()

    def now(self) -> datetime:
        return ensure_utc(self.ctx.now())

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def create_poll(
        self,
        match_id: str,
        question: str,
        category: Union[PollCategory, str],
        kickoff_at: datetime,
        lock_policy: Union[LockPolicy, str] = LockPolicy.KICKOFF,
        custom_lock_at: Optional[datetime] = None,
        created_by: Optional[str] = None,
    ) -> Poll:
        """
        Register a new OPEN poll with an empty pool.

        Raises:
            InvalidPollException: Bad question length, category or lock policy.
        """
        question = (question or "").strip()
        if not (self.config.question_min_length <= len(question) <= self.config.question_max_length):
            raise InvalidPollException(
                f"Question must be {self.config.question_min_length}-"
                f"{self.config.question_max_length} characters, got {len(question)}",
                field_path="question",
            )
        if not match_id:
            raise InvalidPollException("match_id is required", field_path="match_id")

        try:
            category = PollCategory(category)
        except ValueError as e:
            raise InvalidPollException(f"Unknown category: {category}", field_path="category") from e
        try:
            lock_policy = LockPolicy(lock_policy)
        except ValueError as e:
            raise InvalidPollException(f"Unknown lock policy: {lock_policy}", field_path="lock_policy") from e

        now = self.now()
        lock_at = lock_time_for(lock_policy, kickoff_at, custom_lock_at)
        if lock_policy is LockPolicy.CUSTOM and lock_at <= now:
            raise InvalidPollException(
                f"Custom lock time {lock_at.isoformat()} is not in the future",
                field_path="lock_at",
            )

        poll = Poll(
            poll_id=_new_poll_id(),
            match_id=match_id,
            category=category,
            question=question,
            lock_policy=lock_policy,
            kickoff_at=ensure_utc(kickoff_at),
            lock_at=lock_at,
            created_at=now,
            created_by=created_by,
        )
        with self._registry_lock:
            self._polls[poll.poll_id] = poll

        logger.info(
            f"Created poll {poll.poll_id} for match {match_id} "
            f"({lock_policy.value}, locks at {lock_at.isoformat()})"
        )
        return poll

    def get_poll(self, poll_id: str) -> Poll:
        with self._registry_lock:
            poll = self._polls.get(poll_id)
        if poll is None:
            raise PollNotFoundException(poll_id)
        return poll

    def list_polls(
        self,
        status: Optional[Union[PollStatus, str]] = None,
        match_id: Optional[str] = None,
    ) -> list[Poll]:
        status = PollStatus(status) if status is not None else None
        with self._registry_lock:
            polls = list(self._polls.values())
        return [
            p for p in polls
            if (status is None or p.status is status)
            and (match_id is None or p.match_id == match_id)
        ]

    # -------------------------------------------------------------------------
    # Staking
    # -------------------------------------------------------------------------

    def preview_stake(self, poll_id: str, side: Union[Side, str], amount: Any) -> StakePreview:
        """Potential winnings for a stake that has not been placed."""
        poll = self.get_poll(poll_id)
        try:
            amount = to_decimal(amount)
        except ValueError as e:
            raise InvalidAmountException(str(amount)) from e
        with self.locks.for_poll(poll_id):
            return preview_stake(amount, Side(side), poll.pool, self.config.platform_fee_rate)

    def place_stake(
        self,
        poll_id: str,
        staker: str,
        side: Union[Side, str],
        amount: Any,
    ) -> StakePlacement:
        poll = self.get_poll(poll_id)
        return self.ledger.place_stake(poll, staker, Side(side), amount, self.now())

    def stakes_for(self, staker: str) -> list[Stake]:
        return self.ledger.stakes_for_staker(staker)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def lock_poll(self, poll_id: str) -> Poll:
        poll = self.get_poll(poll_id)
        with self.locks.for_poll(poll_id):
            return self.lifecycle.lock(poll)

    def lock_due_polls(self, now: Optional[datetime] = None) -> list[Poll]:
        """Lock every OPEN poll whose lock instant has been reached."""
        now = ensure_utc(now) if now else self.now()
        locked = []
        for poll in self.list_polls(status=PollStatus.OPEN):
            with self.locks.for_poll(poll.poll_id):
                if is_lock_due(poll, now):
                    locked.append(self.lifecycle.lock(poll))
        return locked

    def conclude_match(self, match_id: str, concluded_at: Optional[datetime] = None) -> list[Poll]:
        """
        Open the oracle voting window for every poll on a finished match.

        Polls still OPEN are locked first. Polls already voting or
        resolved are left alone.
        """
        concluded_at = ensure_utc(concluded_at) if concluded_at else self.now()
        opened = []
        for poll in self.list_polls(match_id=match_id):
            with self.locks.for_poll(poll.poll_id):
                if poll.status is PollStatus.OPEN:
                    self.lifecycle.lock(poll)
                if poll.status is PollStatus.LOCKED:
                    opened.append(self.lifecycle.open_voting(poll, concluded_at))
        if not opened:
            logger.warning(f"conclude_match({match_id}) opened no polls")
        return opened

    # -------------------------------------------------------------------------
    # Voting and resolution
    # -------------------------------------------------------------------------

    def cast_vote(
        self,
        poll_id: str,
        voter: str,
        decision: Union[VoteDecision, str],
    ) -> VoteCastResult:
        """Record an oracle vote, then try early resolution on the new tally."""
        poll = self.get_poll(poll_id)
        now = self.now()
        with self.locks.for_poll(poll_id):
            tally = self.votes.cast_vote(
                poll, voter, decision, now, stakers=self.ledger.stakers(poll_id)
            )
            record = next(v for v in self.votes.votes_for_poll(poll_id) if v.voter == voter)
            reward = vote_reward(poll.pool, self.config.vote_reward_rate)
            decision_result = self.resolution.attempt_resolve(poll, tally, now)
        return VoteCastResult(record=record, tally=tally, reward=reward, resolution=decision_result)

    def tally(self, poll_id: str) -> TallyResult:
        self.get_poll(poll_id)
        return self.votes.tally(poll_id)

    def resolve(self, poll_id: str) -> ResolutionDecision:
        poll = self.get_poll(poll_id)
        with self.locks.for_poll(poll_id):
            return self.resolution.attempt_resolve(poll, self.votes.tally(poll_id), self.now())

    def resolve_elapsed(self, now: Optional[datetime] = None) -> list[ResolutionDecision]:
        """Attempt resolution for every VOTING poll whose window has closed."""
        now = ensure_utc(now) if now else self.now()
        decisions = []
        for poll in self.list_polls(status=PollStatus.VOTING):
            with self.locks.for_poll(poll.poll_id):
                if is_voting_window_elapsed(poll, now):
                    decisions.append(
                        self.resolution.attempt_resolve(poll, self.votes.tally(poll.poll_id), now)
                    )
        return decisions

    def scheduler_tick(self, now: Optional[datetime] = None) -> SchedulerTick:
        now = ensure_utc(now) if now else self.now()
        return SchedulerTick(
            now=now,
            locked=self.lock_due_polls(now),
            decisions=self.resolve_elapsed(now),
        )

    def commit_manual_outcome(
        self,
        poll_id: str,
        outcome: Union[Side, str],
        decided_by: Optional[str] = None,
    ) -> ResolutionOutcome:
        poll = self.get_poll(poll_id)
        return self.resolution.commit_manual_outcome(poll, outcome, self.now(), decided_by)

    def outcome_for(self, poll_id: str) -> Optional[ResolutionOutcome]:
        self.get_poll(poll_id)
        return self.resolution.outcome_for(poll_id)

    # -------------------------------------------------------------------------
    # Payouts and voters
    # -------------------------------------------------------------------------

    def payouts(self, poll_id: str) -> list[StakePayout]:
        """Final payout per stake. The poll must be RESOLVED."""
        poll = self.get_poll(poll_id)
        with self.locks.for_poll(poll_id):
            self.lifecycle.require_status(poll, PollStatus.RESOLVED, "compute payouts")
            return settle_poll(
                self.ledger.stakes_for_poll(poll_id),
                poll.outcome,
                poll.pool,
                self.config.platform_fee_rate,
            )

    def available_polls(self, voter: str) -> list[Poll]:
        """VOTING polls this voter may still vote on."""
        now = self.now()
        return [
            p for p in self.list_polls(status=PollStatus.VOTING)
            if is_accepting_votes(p, now)
            and not self.ledger.has_staked(p.poll_id, voter)
            and not self.votes.has_voted(p.poll_id, voter)
        ]

    def voter_stats(self, voter: str) -> VoterStats:
        records = self.votes.votes_by_voter(voter)
        stats = VoterStats(
            voter=voter,
            votes_cast=len(records),
            earnings=self.votes.earnings(voter),
        )
        for record in records:
            outcome = self.resolution.outcome_for(record.poll_id)
            if outcome is None:
                continue
            stats.resolved_votes += 1
            if record.decision.as_side() is outcome.outcome:
                stats.correct_votes += 1
        return stats
