"""
Schemas
File: resolution.py

Purpose: Terminal resolution outcomes and the decisions that lead to them.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .poll import ReviewKind, Side
from .vote import TallyResult


class ResolutionMethod(str, Enum):
    AUTOMATIC_CONSENSUS = "automatic-consensus"
    MANUAL_REVIEW = "manual-review"


class DecisionState(str, Enum):
    """Where a resolution attempt landed."""
    RESOLVED = "resolved"
    PENDING = "pending"
    MANUAL_REVIEW_REQUIRED = "manual_review_required"


class ResolutionOutcome(BaseModel):
    """The binding result for a poll. Created exactly once."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    poll_id: str = Field(..., min_length=1)
    outcome: Side
    method: ResolutionMethod
    resolved_at: datetime
    consensus_pct: Optional[Decimal] = Field(
        default=None,
        description="Winning vote share at resolution time",
    )
    decided_by: Optional[str] = Field(
        default=None,
        description="Adjudicator for manual outcomes",
    )


class ResolutionDecision(BaseModel):
    """
    Result of a resolution attempt.

    MANUAL_REVIEW_REQUIRED is a normal pending state, not an error: the
    poll waits for an external adjudication via commit_manual_outcome.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    poll_id: str
    state: DecisionState
    outcome: Optional[ResolutionOutcome] = None
    method: Optional[ResolutionMethod] = None
    review: Optional[ReviewKind] = None
    tally: Optional[TallyResult] = None

    @property
    def is_resolved(self) -> bool:
        return self.state is DecisionState.RESOLVED

    @property
    def manual_review_required(self) -> bool:
        return self.state is DecisionState.MANUAL_REVIEW_REQUIRED
