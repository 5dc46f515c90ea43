"""
Payout Calculator

Pure pari-mutuel arithmetic: pool split, potential and final winnings,
ROI, platform fee and oracle vote rewards. No mutation, no I/O.

Winners split the losing pool in proportion to their stake. The platform
fee is charged on that profit only, never on returned principal and never
on losers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from core.schemas.errors import InvalidAmountException
from core.schemas.numeric import HUNDRED, ZERO, whole_percentages
from core.schemas.poll import PoolAccount, PoolPercentages, Side
from core.schemas.stake import Stake, StakePayout, StakePreview, WinningsPreview


def pool_percentages(yes_pool: Decimal, no_pool: Decimal) -> PoolPercentages:
    """Whole-number Yes/No split summing to 100; empty pools read 50/50."""
    yes, no = whole_percentages([yes_pool, no_pool], default=[50, 50])
    return PoolPercentages(yes=yes, no=no)


def fee_on_profit_only(profit: Decimal, fee_rate: Decimal) -> Decimal:
    """Platform fee on a profit. Zero when the stake lost or broke even."""
    if profit <= 0:
        return ZERO
    return profit * fee_rate


def potential_winnings(
    stake_amount: Decimal,
    side: Side,
    yes_pool: Decimal,
    no_pool: Decimal,
    fee_rate: Decimal,
) -> WinningsPreview:
    """
    Preview the return on a stake that has not been placed yet.

    The stake is added to its own side before computing the share:

        gross = stake + stake * opposing / (own + stake)

    A stake of zero previews as all zeros. A staker alone on their side
    takes the whole opposing pool.

    Raises:
        InvalidAmountException: If stake_amount is negative.
    """
    if stake_amount < 0:
        raise InvalidAmountException(stake_amount)
    if stake_amount == 0:
        return WinningsPreview(side=side)

    own = (yes_pool if side is Side.YES else no_pool) + stake_amount
    opposing = no_pool if side is Side.YES else yes_pool

    profit = stake_amount * opposing / own
    gross = stake_amount + profit
    fee = fee_on_profit_only(profit, fee_rate)

    return WinningsPreview(
        stake_amount=stake_amount,
        side=side,
        gross_winnings=gross,
        platform_fee=fee,
        profit=profit,
        net_profit=profit - fee,
        net_payout=gross - fee,
        roi=profit / stake_amount * HUNDRED,
    )


def pool_preview(
    yes_pool: Decimal,
    no_pool: Decimal,
    side: Side,
    amount: Decimal,
) -> PoolPercentages:
    """Pool split as it would look after adding amount to side."""
    if side is Side.YES:
        return pool_percentages(yes_pool + amount, no_pool)
    return pool_percentages(yes_pool, no_pool + amount)


def is_underdog(side: Side, yes_pool: Decimal, no_pool: Decimal) -> bool:
    """True when side currently holds less than half of the pool."""
    return pool_percentages(yes_pool, no_pool).for_side(side) < 50


def preview_stake(
    amount: Decimal,
    side: Side,
    pool: PoolAccount,
    fee_rate: Decimal,
) -> StakePreview:
    """Winnings preview with current and post-stake pool splits."""
    return StakePreview(
        winnings=potential_winnings(amount, side, pool.yes_pool, pool.no_pool, fee_rate),
        current=pool.percentages(),
        after_stake=pool_preview(pool.yes_pool, pool.no_pool, side, max(amount, ZERO)),
        is_underdog=is_underdog(side, pool.yes_pool, pool.no_pool),
    )


def settle_stake(
    stake: Stake,
    outcome: Side,
    yes_pool: Decimal,
    no_pool: Decimal,
    fee_rate: Decimal,
) -> StakePayout:
    """
    Final payout for a recorded stake.

    Pools already include every stake. If nobody backed the winning side
    there is no one to pay, so every stake is refunded without a fee.
    """
    winning_pool = yes_pool if outcome is Side.YES else no_pool
    losing_pool = no_pool if outcome is Side.YES else yes_pool

    if winning_pool == 0:
        return StakePayout(
            stake_id=stake.stake_id,
            staker=stake.staker,
            side=stake.side,
            amount=stake.amount,
            won=False,
            refunded=True,
            gross_winnings=stake.amount,
            payout=stake.amount,
        )

    if stake.side is not outcome:
        return StakePayout(
            stake_id=stake.stake_id,
            staker=stake.staker,
            side=stake.side,
            amount=stake.amount,
            won=False,
            net_profit=-stake.amount,
        )

    share = stake.amount * losing_pool / winning_pool
    gross = stake.amount + share
    fee = fee_on_profit_only(share, fee_rate)
    payout = gross - fee
    return StakePayout(
        stake_id=stake.stake_id,
        staker=stake.staker,
        side=stake.side,
        amount=stake.amount,
        won=True,
        gross_winnings=gross,
        platform_fee=fee,
        payout=payout,
        net_profit=payout - stake.amount,
    )


def settle_poll(
    stakes: Iterable[Stake],
    outcome: Side,
    pool: PoolAccount,
    fee_rate: Decimal,
) -> list[StakePayout]:
    """Payouts for every stake on a resolved poll, in placement order."""
    return [
        settle_stake(stake, outcome, pool.yes_pool, pool.no_pool, fee_rate)
        for stake in stakes
    ]


def vote_reward(pool: PoolAccount, rate: Decimal) -> Decimal:
    """Oracle reward for one vote: a fixed share of the poll's total pool."""
    return pool.total * rate
