"""
Schemas
File: poll.py

Purpose: Poll definition, lifecycle enums and the per-poll pool account.
A poll is a binary Yes/No question tied to a match.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import InvalidAmountException
from .numeric import ZERO, whole_percentages
from .versioning import SCHEMA_VERSION, assert_supported_schema_version


class Side(str, Enum):
    """Side of a binary poll. Also the only valid resolution outcomes."""
    YES = "yes"
    NO = "no"

    @property
    def opposite(self) -> "Side":
        return Side.NO if self is Side.YES else Side.YES


class PollCategory(str, Enum):
    PLAYER_EVENT = "player_event"
    TEAM_EVENT = "team_event"
    SCORE_PREDICTION = "score_prediction"
    OTHER = "other"


class PollStatus(str, Enum):
    """Lifecycle states. Order matters: transitions only move forward."""
    OPEN = "open"
    LOCKED = "locked"
    VOTING = "voting"
    RESOLVED = "resolved"


class LockPolicy(str, Enum):
    """When staking closes, relative to the match start."""
    KICKOFF = "kickoff"
    HALFTIME = "halftime"
    SIXTY_MINUTES = "60min"
    CUSTOM = "custom"


class ReviewKind(str, Enum):
    """Which manual path a poll needs when consensus is not strong enough."""
    ADMIN = "admin"          # moderate consensus
    MULTISIG = "multisig"    # split vote
    ESCALATED = "escalated"  # unclear majority, tie for the lead, or no votes


class PoolPercentages(BaseModel):
    """Whole-number Yes/No split of a pool; always sums to 100."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    yes: int = Field(..., ge=0, le=100)
    no: int = Field(..., ge=0, le=100)

    def for_side(self, side: Side) -> int:
        return self.yes if side is Side.YES else self.no


class PoolAccount(BaseModel):
    """
    Authoritative Yes/No totals for a single poll.

    Only the stake ledger mutates this; everything else reads it.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    yes_pool: Decimal = Field(default=ZERO, ge=0, description="Total staked on YES")
    no_pool: Decimal = Field(default=ZERO, ge=0, description="Total staked on NO")
    participants: int = Field(default=0, ge=0, description="Number of stakes recorded")

    @property
    def total(self) -> Decimal:
        return self.yes_pool + self.no_pool

    def side_pool(self, side: Side) -> Decimal:
        return self.yes_pool if side is Side.YES else self.no_pool

    def opposing_pool(self, side: Side) -> Decimal:
        return self.side_pool(side.opposite)

    def apply_stake(self, side: Side, amount: Decimal) -> None:
        """
        Add a stake to one side and count the participant.

        Raises:
            InvalidAmountException: If amount is not strictly positive.
        """
        if amount <= 0:
            raise InvalidAmountException(amount)
        if side is Side.YES:
            self.yes_pool = self.yes_pool + amount
        else:
            self.no_pool = self.no_pool + amount
        self.participants = self.participants + 1

    def percentages(self) -> PoolPercentages:
        """Whole-number split; an empty pool reads 50/50."""
        yes, no = whole_percentages([self.yes_pool, self.no_pool], default=[50, 50])
        return PoolPercentages(yes=yes, no=no)


class Poll(BaseModel):
    """
    A Yes/No prediction question tied to a match.

    ``status`` is written only by the lifecycle; ``pool`` only by the
    stake ledger.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    poll_id: str = Field(..., min_length=1)
    match_id: str = Field(..., min_length=1)
    category: PollCategory
    question: str = Field(..., min_length=1)
    pool: PoolAccount = Field(default_factory=PoolAccount)
    status: PollStatus = PollStatus.OPEN
    lock_policy: LockPolicy = LockPolicy.KICKOFF
    kickoff_at: datetime = Field(..., description="Scheduled match start (UTC)")
    lock_at: datetime = Field(..., description="Instant staking closes (UTC)")
    created_at: datetime
    created_by: Optional[str] = None
    concluded_at: Optional[datetime] = Field(
        default=None,
        description="When the match was reported concluded",
    )
    voting_ends_at: Optional[datetime] = None
    outcome: Optional[Side] = None
    review_required: Optional[ReviewKind] = None

    @field_validator("schema_version")
    @classmethod
    def _known_schema_version(cls, v: str) -> str:
        assert_supported_schema_version(v)
        return v

    @property
    def is_open(self) -> bool:
        return self.status is PollStatus.OPEN

    @property
    def is_resolved(self) -> bool:
        return self.status is PollStatus.RESOLVED
