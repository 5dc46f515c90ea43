"""
Schemas
File: stake.py

Purpose: Stake records, placement results and payout figures.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.receipts.models import TransactionReceipt

from .numeric import ZERO
from .poll import PoolAccount, PoolPercentages, Side
from .versioning import SCHEMA_VERSION, assert_supported_schema_version


class Stake(BaseModel):
    """
    One user's wager on one side of a poll.

    Immutable once recorded; only ever aggregated into pool totals.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    stake_id: str = Field(..., min_length=1)
    poll_id: str = Field(..., min_length=1)
    staker: str = Field(..., min_length=1)
    side: Side
    amount: Decimal = Field(..., gt=0)
    placed_at: datetime
    receipt: TransactionReceipt

    @field_validator("schema_version")
    @classmethod
    def _known_schema_version(cls, v: str) -> str:
        assert_supported_schema_version(v)
        return v


class StakePlacement(BaseModel):
    """Result of a successful stake: the record, its receipt and the new pool."""

    model_config = ConfigDict(extra="forbid")

    stake: Stake
    receipt: TransactionReceipt
    pool: PoolAccount
    percentages: PoolPercentages


class WinningsPreview(BaseModel):
    """
    What a stake would return if its side wins.

    ``profit`` is before the platform fee; ``net_profit`` and
    ``net_payout`` are after it. ``roi`` is profit / stake * 100.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    stake_amount: Decimal = ZERO
    side: Side
    gross_winnings: Decimal = ZERO
    platform_fee: Decimal = ZERO
    profit: Decimal = ZERO
    net_profit: Decimal = ZERO
    net_payout: Decimal = ZERO
    roi: Decimal = ZERO


class StakePreview(BaseModel):
    """Winnings preview plus how the pool would look after the stake."""

    model_config = ConfigDict(extra="forbid")

    winnings: WinningsPreview
    current: PoolPercentages
    after_stake: PoolPercentages
    is_underdog: bool


class StakePayout(BaseModel):
    """Final settlement figures for one recorded stake."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    stake_id: str
    staker: str
    side: Side
    amount: Decimal
    won: bool
    refunded: bool = False
    gross_winnings: Decimal = ZERO
    platform_fee: Decimal = ZERO
    payout: Decimal = Field(default=ZERO, description="Amount owed to the staker after fees")
    net_profit: Decimal = Field(default=ZERO, description="payout - amount, after the fee; negative for losers")
