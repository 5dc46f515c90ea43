"""
API Request Models

Pydantic models for API request validation. Business rules (question
length, minimum stake, balances) are enforced by the engine so that they
come back with engine error codes.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from core.schemas.poll import LockPolicy, PollCategory, Side
from core.schemas.vote import VoteDecision


class CreatePollRequest(BaseModel):
    """Request body for POST /polls."""

    match_id: str = Field(..., min_length=1, description="Match the question is about")
    question: str = Field(..., description="Yes/No question shown to stakers")
    category: PollCategory = Field(default=PollCategory.OTHER)
    kickoff_at: datetime = Field(..., description="Scheduled match start")
    lock_policy: LockPolicy = Field(
        default=LockPolicy.KICKOFF,
        description="When staking closes: kickoff, halftime, 60min or custom",
    )
    lock_at: Optional[datetime] = Field(
        default=None,
        description="Explicit lock time; required for the custom policy",
    )
    created_by: Optional[str] = None


class PreviewRequest(BaseModel):
    """Request body for POST /polls/{poll_id}/preview."""

    side: Side
    amount: Decimal = Field(..., description="Prospective stake amount")


class StakeRequest(BaseModel):
    """Request body for POST /polls/{poll_id}/stakes."""

    staker: str = Field(..., min_length=1, description="Staker wallet address")
    side: Side
    amount: Decimal


class ConcludeMatchRequest(BaseModel):
    """Request body for POST /matches/{match_id}/conclude."""

    concluded_at: Optional[datetime] = Field(
        default=None,
        description="When the match ended; defaults to the server clock",
    )


class VoteRequest(BaseModel):
    """Request body for POST /polls/{poll_id}/votes."""

    voter: str = Field(..., min_length=1)
    decision: VoteDecision


class ManualOutcomeRequest(BaseModel):
    """Request body for POST /polls/{poll_id}/manual-outcome."""

    outcome: Side
    decided_by: Optional[str] = Field(default=None, description="Adjudicator identity")


class SchedulerTickRequest(BaseModel):
    """Request body for POST /scheduler/tick."""

    now: Optional[datetime] = Field(
        default=None,
        description="Sweep time; defaults to the server clock",
    )


class FundRequest(BaseModel):
    """Request body for POST /wallet/fund."""

    owner: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
