"""
Vote Tally

Aggregates oracle votes per poll and classifies consensus strength.

Consensus is the largest share among yes/no/unclear:

    >= strong_pct            STRONG    (auto-resolvable toward a yes/no leader)
    moderate_pct..strong_pct MODERATE  (admin review)
    < moderate_pct           SPLIT     (multi-sig review)
    no votes                 NONE

Thresholds are compared against the exact share, not the rounded
display percentages.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from core.config.runtime import MarketConfig
from core.schemas.errors import (
    AlreadyVotedException,
    IneligibleVoterException,
    NotInVotingWindowException,
)
from core.schemas.numeric import HUNDRED, ZERO, whole_percentages
from core.schemas.poll import Poll
from core.schemas.vote import ConsensusLevel, TallyResult, VoteDecision, VoteRecord

from engine.lifecycle import is_accepting_votes
from engine.locks import PollLocks
from engine.payouts import vote_reward


logger = logging.getLogger(__name__)


def classify_consensus(
    max_share: Decimal,
    total_votes: int,
    strong_pct: Decimal = Decimal("85"),
    moderate_pct: Decimal = Decimal("60"),
) -> ConsensusLevel:
    if total_votes == 0:
        return ConsensusLevel.NONE
    if max_share >= strong_pct:
        return ConsensusLevel.STRONG
    if max_share >= moderate_pct:
        return ConsensusLevel.MODERATE
    return ConsensusLevel.SPLIT


def compute_tally(
    poll_id: str,
    yes: int,
    no: int,
    unclear: int,
    strong_pct: Decimal = Decimal("85"),
    moderate_pct: Decimal = Decimal("60"),
) -> TallyResult:
    """
    Build a TallyResult from raw counts.

    With no votes every percentage is 0 and consensus is NONE. When two
    decisions share the top count there is no leader, so a tie can never
    resolve automatically.
    """
    counts = {
        VoteDecision.YES: yes,
        VoteDecision.NO: no,
        VoteDecision.UNCLEAR: unclear,
    }
    total = yes + no + unclear
    yes_pct, no_pct, unclear_pct = whole_percentages([yes, no, unclear], default=[0, 0, 0])

    top = max(counts.values())
    max_share = Decimal(top) * HUNDRED / Decimal(total) if total else ZERO

    leaders = [d for d, c in counts.items() if c == top]
    leader = leaders[0] if total and len(leaders) == 1 else None

    return TallyResult(
        poll_id=poll_id,
        yes_votes=yes,
        no_votes=no,
        unclear_votes=unclear,
        yes_pct=yes_pct,
        no_pct=no_pct,
        unclear_pct=unclear_pct,
        max_share=max_share,
        leader=leader,
        consensus=classify_consensus(max_share, total, strong_pct, moderate_pct),
    )


def tally_records(
    poll_id: str,
    records: Iterable[VoteRecord],
    strong_pct: Decimal = Decimal("85"),
    moderate_pct: Decimal = Decimal("60"),
) -> TallyResult:
    counts = {d: 0 for d in VoteDecision}
    for record in records:
        counts[record.decision] += 1
    return compute_tally(
        poll_id,
        counts[VoteDecision.YES],
        counts[VoteDecision.NO],
        counts[VoteDecision.UNCLEAR],
        strong_pct,
        moderate_pct,
    )


class VoteTally:
    """
    Stores oracle votes and voter earnings.

    Each accepted vote earns the voter ``vote_reward_rate`` of the poll's
    total pool at the time of the vote.
    """

    def __init__(
        self,
        config: Optional[MarketConfig] = None,
        locks: Optional[PollLocks] = None,
    ) -> None:
        self.config = config or MarketConfig()
        self.locks = locks or PollLocks()
        self._votes: dict[str, dict[str, VoteRecord]] = {}
        self._earnings: dict[str, Decimal] = {}
        self._index_lock = threading.Lock()

    def cast_vote(
        self,
        poll: Poll,
        voter: str,
        decision: Union[VoteDecision, str],
        now: datetime,
        stakers: Iterable[str] = (),
    ) -> TallyResult:
        """
        Record one oracle vote and return the updated tally.

        Raises:
            IneligibleVoterException: Voter staked on this poll.
            AlreadyVotedException: Voter already voted on this poll.
            NotInVotingWindowException: Poll is not VOTING or its window has elapsed.
        """
        decision = VoteDecision(decision)

        with self.locks.for_poll(poll.poll_id):
            if voter in set(stakers):
                logger.warning(f"Rejected vote from staker {voter} on {poll.poll_id}")
                raise IneligibleVoterException(poll.poll_id, voter)
            if self.has_voted(poll.poll_id, voter):
                raise AlreadyVotedException(poll.poll_id, voter)
            if not is_accepting_votes(poll, now):
                details = {}
                if poll.voting_ends_at is not None:
                    details["voting_ends_at"] = poll.voting_ends_at.isoformat()
                raise NotInVotingWindowException(
                    poll.poll_id, poll.status.value, details=details
                )

            record = VoteRecord(
                poll_id=poll.poll_id,
                voter=voter,
                decision=decision,
                cast_at=now,
            )
            reward = vote_reward(poll.pool, self.config.vote_reward_rate)

            with self._index_lock:
                self._votes.setdefault(poll.poll_id, {})[voter] = record
                self._earnings[voter] = self._earnings.get(voter, ZERO) + reward

            logger.info(
                f"Vote {decision.value} from {voter} on {poll.poll_id} (reward {reward})"
            )
            return self.tally(poll.poll_id)

    def tally(self, poll_id: str) -> TallyResult:
        return tally_records(
            poll_id,
            self.votes_for_poll(poll_id),
            self.config.strong_consensus_pct,
            self.config.moderate_consensus_pct,
        )

    def votes_for_poll(self, poll_id: str) -> list[VoteRecord]:
        with self._index_lock:
            return list(self._votes.get(poll_id, {}).values())

    def votes_by_voter(self, voter: str) -> list[VoteRecord]:
        with self._index_lock:
            return [
                votes[voter]
                for votes in self._votes.values()
                if voter in votes
            ]

    def has_voted(self, poll_id: str, voter: str) -> bool:
        with self._index_lock:
            return voter in self._votes.get(poll_id, {})

    def earnings(self, voter: str) -> Decimal:
        with self._index_lock:
            return self._earnings.get(voter, ZERO)
