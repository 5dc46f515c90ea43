"""
API Response Models

Pydantic models for API response serialization.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from core.schemas.poll import Poll, PoolPercentages, Side
from core.schemas.resolution import ResolutionDecision, ResolutionOutcome
from core.schemas.stake import Stake, StakePayout, StakePlacement, StakePreview
from core.schemas.vote import TallyResult, VoteRecord


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "pitchpool-api"
    version: str = "v1"


class PollResponse(BaseModel):
    """A single poll with its current pool split."""

    ok: bool = True
    poll: Poll
    percentages: PoolPercentages


class PollListResponse(BaseModel):
    ok: bool = True
    polls: list[Poll] = Field(default_factory=list)
    count: int = 0


class PreviewResponse(BaseModel):
    """Response for POST /polls/{poll_id}/preview."""

    ok: bool = True
    poll_id: str
    preview: StakePreview


class StakeResponse(BaseModel):
    """Response for POST /polls/{poll_id}/stakes."""

    ok: bool = True
    placement: StakePlacement


class StakeListResponse(BaseModel):
    ok: bool = True
    stakes: list[Stake] = Field(default_factory=list)


class ConcludeMatchResponse(BaseModel):
    """Polls moved into their voting window."""

    ok: bool = True
    match_id: str
    polls: list[Poll] = Field(default_factory=list)


class VoteResponse(BaseModel):
    """Response for POST /polls/{poll_id}/votes."""

    ok: bool = True
    vote: VoteRecord
    tally: TallyResult
    reward: Decimal = Field(..., description="Reward credited for this vote")
    resolution: ResolutionDecision


class TallyResponse(BaseModel):
    ok: bool = True
    tally: TallyResult
    total_votes: int = 0


class ResolutionResponse(BaseModel):
    """Response for POST /polls/{poll_id}/resolve."""

    ok: bool = True
    decision: ResolutionDecision


class OutcomeResponse(BaseModel):
    """Response for POST /polls/{poll_id}/manual-outcome."""

    ok: bool = True
    outcome: ResolutionOutcome


class PayoutsResponse(BaseModel):
    """Final payouts for a resolved poll."""

    ok: bool = True
    poll_id: str
    outcome: Side
    payouts: list[StakePayout] = Field(default_factory=list)
    total_paid: Decimal = Field(..., description="Sum of all payouts")
    total_fees: Decimal = Field(..., description="Platform fees collected")


class SchedulerTickResponse(BaseModel):
    """What one scheduler sweep changed."""

    ok: bool = True
    now: datetime
    locked: list[str] = Field(default_factory=list, description="Poll ids locked")
    decisions: list[ResolutionDecision] = Field(default_factory=list)


class VoterPollsResponse(BaseModel):
    ok: bool = True
    voter: str
    polls: list[Poll] = Field(default_factory=list)


class VoterStatsResponse(BaseModel):
    """An oracle's votes, earnings and accuracy."""

    ok: bool = True
    voter: str
    votes_cast: int = 0
    earnings: Decimal = Decimal("0")
    resolved_votes: int = 0
    correct_votes: int = 0
    accuracy: Optional[Decimal] = Field(
        default=None,
        description="Percent of resolved votes matching the outcome",
    )


class FundResponse(BaseModel):
    ok: bool = True
    owner: str
    balance: Decimal


class ErrorDetail(BaseModel):
    """Error detail information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)
    retryable: bool = False


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail
