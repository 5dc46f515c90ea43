"""
Schemas
File: vote.py

Purpose: Oracle vote records and tally results.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .numeric import ZERO
from .poll import Side


class VoteDecision(str, Enum):
    YES = "yes"
    NO = "no"
    UNCLEAR = "unclear"

    def as_side(self) -> Optional[Side]:
        """The matching poll side; None for UNCLEAR."""
        if self is VoteDecision.UNCLEAR:
            return None
        return Side(self.value)


class ConsensusLevel(str, Enum):
    """Strength of the leading vote share."""
    NONE = "none"          # no votes yet
    STRONG = "strong"      # >= 85%
    MODERATE = "moderate"  # 60% .. <85%, admin review
    SPLIT = "split"        # < 60%, multi-sig review


class VoteRecord(BaseModel):
    """One oracle's resolution input. At most one per (poll, voter)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    poll_id: str = Field(..., min_length=1)
    voter: str = Field(..., min_length=1)
    decision: VoteDecision
    cast_at: datetime


class TallyResult(BaseModel):
    """
    Aggregated votes for a poll.

    Percentages are whole numbers for display; ``max_share`` keeps the
    exact value that the consensus thresholds are compared against.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    poll_id: str
    yes_votes: int = Field(default=0, ge=0)
    no_votes: int = Field(default=0, ge=0)
    unclear_votes: int = Field(default=0, ge=0)
    yes_pct: int = 0
    no_pct: int = 0
    unclear_pct: int = 0
    max_share: Decimal = ZERO
    leader: Optional[VoteDecision] = Field(
        default=None,
        description="Decision holding the largest share; None on a tie or no votes",
    )
    consensus: ConsensusLevel = ConsensusLevel.NONE

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes + self.unclear_votes

    @property
    def auto_outcome(self) -> Optional[Side]:
        """Side an automatic resolution would pick, if any."""
        if self.consensus is not ConsensusLevel.STRONG or self.leader is None:
            return None
        return self.leader.as_side()
