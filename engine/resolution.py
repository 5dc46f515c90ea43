"""
Resolution Engine

Decides when a poll in VOTING resolves and commits the binding outcome
exactly once.

Decision table for attempt_resolve:

    RESOLVED                          -> stored outcome, nothing mutated
    not VOTING                        -> InvalidStateException
    strong yes/no consensus           -> automatic-consensus, poll RESOLVED
    window elapsed, no strong yes/no  -> manual_review_required (+ review kind)
    otherwise                         -> pending

Manual review is a pending state, not an error. The poll stays in VOTING
until an adjudicator calls commit_manual_outcome.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional, Union

from core.config.runtime import MarketConfig
from core.schemas.canonical import ensure_utc
from core.schemas.errors import InvalidPollException, InvalidStateException
from core.schemas.poll import Poll, PollStatus, ReviewKind, Side
from core.schemas.resolution import (
    DecisionState,
    ResolutionDecision,
    ResolutionMethod,
    ResolutionOutcome,
)
from core.schemas.vote import ConsensusLevel, TallyResult, VoteDecision

from engine.lifecycle import PollLifecycle, is_voting_window_elapsed
from engine.locks import PollLocks


logger = logging.getLogger(__name__)


def review_kind_for(tally: TallyResult) -> ReviewKind:
    """
    Which review path an unresolved tally escalates to.

    Ties, an unclear majority and empty tallies escalate; otherwise the
    consensus level picks admin (moderate) or multi-sig (split) review.
    """
    if tally.leader is None or tally.leader is VoteDecision.UNCLEAR:
        return ReviewKind.ESCALATED
    if tally.consensus is ConsensusLevel.MODERATE:
        return ReviewKind.ADMIN
    if tally.consensus is ConsensusLevel.SPLIT:
        return ReviewKind.MULTISIG
    return ReviewKind.ESCALATED


class ResolutionEngine:
    """
    Commits resolution outcomes.

    Usage:
        engine = ResolutionEngine(PollLifecycle(), MarketConfig())
        decision = engine.attempt_resolve(poll, tally, now)
        if decision.manual_review_required:
            engine.commit_manual_outcome(poll, Side.YES, now, decided_by="admin")
    """

    def __init__(
        self,
        lifecycle: Optional[PollLifecycle] = None,
        config: Optional[MarketConfig] = None,
        locks: Optional[PollLocks] = None,
    ) -> None:
        self.config = config or MarketConfig()
        self.lifecycle = lifecycle or PollLifecycle(self.config.voting_window_seconds)
        self.locks = locks or PollLocks()
        self._outcomes: dict[str, ResolutionOutcome] = {}
        self._outcomes_lock = threading.Lock()

    def outcome_for(self, poll_id: str) -> Optional[ResolutionOutcome]:
        with self._outcomes_lock:
            return self._outcomes.get(poll_id)

    def _resolved_decision(self, poll: Poll, tally: Optional[TallyResult]) -> ResolutionDecision:
        outcome = self.outcome_for(poll.poll_id)
        return ResolutionDecision(
            poll_id=poll.poll_id,
            state=DecisionState.RESOLVED,
            outcome=outcome,
            method=outcome.method if outcome else None,
            review=poll.review_required,
            tally=tally,
        )

    def _commit(self, poll: Poll, outcome: ResolutionOutcome) -> None:
        self.lifecycle.mark_resolved(poll, outcome.outcome)
        with self._outcomes_lock:
            self._outcomes[poll.poll_id] = outcome

    def attempt_resolve(self, poll: Poll, tally: TallyResult, now: datetime) -> ResolutionDecision:
        """
        Try to resolve a poll from its current tally.

        Raises:
            InvalidStateException: If the poll is neither VOTING nor RESOLVED.
        """
        with self.locks.for_poll(poll.poll_id):
            if poll.status is PollStatus.RESOLVED:
                return self._resolved_decision(poll, tally)

            self.lifecycle.require_status(poll, PollStatus.VOTING, "resolve")

            auto_side = tally.auto_outcome
            if auto_side is not None and tally.total_votes >= self.config.early_resolution_min_votes:
                outcome = ResolutionOutcome(
                    poll_id=poll.poll_id,
                    outcome=auto_side,
                    method=ResolutionMethod.AUTOMATIC_CONSENSUS,
                    resolved_at=ensure_utc(now),
                    consensus_pct=tally.max_share,
                )
                self._commit(poll, outcome)
                logger.info(
                    f"Poll {poll.poll_id} auto-resolved {auto_side.value.upper()} "
                    f"at {tally.max_share:.2f}% consensus"
                )
                return ResolutionDecision(
                    poll_id=poll.poll_id,
                    state=DecisionState.RESOLVED,
                    outcome=outcome,
                    method=ResolutionMethod.AUTOMATIC_CONSENSUS,
                    tally=tally,
                )

            if is_voting_window_elapsed(poll, now):
                review = review_kind_for(tally)
                if poll.review_required is None:
                    poll.review_required = review
                    logger.warning(
                        f"Poll {poll.poll_id} needs {review.value} review "
                        f"(consensus={tally.consensus.value}, votes={tally.total_votes})"
                    )
                return ResolutionDecision(
                    poll_id=poll.poll_id,
                    state=DecisionState.MANUAL_REVIEW_REQUIRED,
                    method=ResolutionMethod.MANUAL_REVIEW,
                    review=poll.review_required,
                    tally=tally,
                )

            return ResolutionDecision(
                poll_id=poll.poll_id,
                state=DecisionState.PENDING,
                tally=tally,
            )

    def commit_manual_outcome(
        self,
        poll: Poll,
        outcome: Union[Side, str],
        now: datetime,
        decided_by: Optional[str] = None,
    ) -> ResolutionOutcome:
        """
        Record an adjudicated outcome for a poll flagged for review.

        A poll that is already RESOLVED keeps its outcome; the stored
        outcome is returned unchanged.

        Raises:
            InvalidPollException: If outcome is not yes or no.
            InvalidStateException: If the poll is not VOTING or was never
                flagged for manual review.
        """
        try:
            side = Side(outcome)
        except ValueError as e:
            raise InvalidPollException(
                f"Outcome must be yes or no, got {outcome!r}",
                field_path="outcome",
            ) from e

        with self.locks.for_poll(poll.poll_id):
            if poll.status is PollStatus.RESOLVED:
                existing = self.outcome_for(poll.poll_id)
                if existing is not None:
                    return existing

            self.lifecycle.require_status(poll, PollStatus.VOTING, "commit manual outcome")
            if poll.review_required is None:
                raise InvalidStateException(
                    f"Poll {poll.poll_id} has not been flagged for manual review",
                    poll_id=poll.poll_id,
                    status=poll.status.value,
                )

            result = ResolutionOutcome(
                poll_id=poll.poll_id,
                outcome=side,
                method=ResolutionMethod.MANUAL_REVIEW,
                resolved_at=ensure_utc(now),
                decided_by=decided_by,
            )
            self._commit(poll, result)
            logger.info(
                f"Poll {poll.poll_id} manually resolved {side.value.upper()} "
                f"({poll.review_required.value} review by {decided_by or 'unknown'})"
            )
            return result
