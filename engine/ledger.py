"""
Stake Ledger

The only entry point for recording a stake. Validates the request,
settles it through the wallet collaborator and then applies it to the
poll's pool account. Checks and mutation happen under the poll's lock,
so concurrent stakes never lose updates.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from core.config.runtime import MarketConfig
from core.schemas.errors import (
    BelowMinimumException,
    InsufficientFundsException,
    InvalidAmountException,
    PollLockedException,
    SettlementFailedException,
)
from core.schemas.numeric import to_decimal
from core.schemas.poll import Poll, PollStatus, Side
from core.schemas.stake import Stake, StakePlacement
from core.wallet.base import Wallet, WalletError

from engine.lifecycle import is_lock_due
from engine.locks import PollLocks


logger = logging.getLogger(__name__)


def _new_stake_id() -> str:
    return f"stk_{uuid.uuid4().hex[:16]}"


class StakeLedger:
    """
    Records stakes against polls.

    Usage:
        ledger = StakeLedger(wallet, MarketConfig())
        placement = ledger.place_stake(poll, "alice", Side.YES, Decimal("25"), now)
    """

    def __init__(
        self,
        wallet: Wallet,
        config: Optional[MarketConfig] = None,
        locks: Optional[PollLocks] = None,
    ) -> None:
        self.wallet = wallet
        self.config = config or MarketConfig()
        self.locks = locks or PollLocks()
        self._by_poll: dict[str, list[Stake]] = {}
        self._by_staker: dict[str, list[Stake]] = {}
        self._index_lock = threading.Lock()

    def place_stake(
        self,
        poll: Poll,
        staker: str,
        side: Side,
        amount: Any,
        now: datetime,
    ) -> StakePlacement:
        """
        Validate, settle and record a stake.

        Raises:
            PollLockedException: Poll is not OPEN or its lock time has passed.
            InvalidAmountException: Amount is not a positive number.
            BelowMinimumException: Amount is under the configured floor.
            InsufficientFundsException: Wallet balance does not cover the amount.
            SettlementFailedException: The wallet rejected the settlement.
        """
        try:
            amount = to_decimal(amount)
        except ValueError as e:
            raise InvalidAmountException(str(amount)) from e

        with self.locks.for_poll(poll.poll_id):
            if poll.status is not PollStatus.OPEN:
                raise PollLockedException(poll.poll_id, poll.status.value)
            if is_lock_due(poll, now):
                raise PollLockedException(
                    poll.poll_id,
                    poll.status.value,
                    details={"lock_at": poll.lock_at.isoformat()},
                )
            if amount <= 0:
                raise InvalidAmountException(amount)
            if amount < self.config.min_stake:
                raise BelowMinimumException(amount, self.config.min_stake)

            balance = self.wallet.balance_of(staker)
            if balance < amount:
                raise InsufficientFundsException(staker, amount, balance)

            memo = f"Stake {side.value.upper()} on {poll.poll_id}"
            try:
                receipt = self.wallet.settle(staker, amount, memo)
            except WalletError as e:
                logger.warning(f"Settlement failed for {staker} on {poll.poll_id}: {e}")
                raise SettlementFailedException(
                    f"Settlement failed: {e}",
                    staker=staker,
                    retryable=e.retryable,
                ) from e
            except OSError as e:
                logger.warning(f"Wallet unreachable for {staker} on {poll.poll_id}: {e}")
                raise SettlementFailedException(
                    f"Wallet unreachable: {e}",
                    staker=staker,
                    retryable=True,
                ) from e

            stake = Stake(
                stake_id=_new_stake_id(),
                poll_id=poll.poll_id,
                staker=staker,
                side=side,
                amount=amount,
                placed_at=now,
                receipt=receipt,
            )
            poll.pool.apply_stake(side, amount)

            with self._index_lock:
                self._by_poll.setdefault(poll.poll_id, []).append(stake)
                self._by_staker.setdefault(staker, []).append(stake)

            logger.info(
                f"Stake {stake.stake_id}: {staker} {amount} on {side.value.upper()} "
                f"(poll {poll.poll_id}, pool yes={poll.pool.yes_pool} no={poll.pool.no_pool})"
            )
            return StakePlacement(
                stake=stake,
                receipt=receipt,
                pool=poll.pool.model_copy(),
                percentages=poll.pool.percentages(),
            )

    def stakes_for_poll(self, poll_id: str) -> list[Stake]:
        with self._index_lock:
            return list(self._by_poll.get(poll_id, []))

    def stakes_for_staker(self, staker: str) -> list[Stake]:
        with self._index_lock:
            return list(self._by_staker.get(staker, []))

    def stakers(self, poll_id: str) -> set[str]:
        """Everyone who staked on a poll; they may not vote on it."""
        with self._index_lock:
            return {s.staker for s in self._by_poll.get(poll_id, [])}

    def has_staked(self, poll_id: str, staker: str) -> bool:
        return staker in self.stakers(poll_id)

    def total_staked(self, poll_id: str) -> Decimal:
        return sum((s.amount for s in self.stakes_for_poll(poll_id)), Decimal("0"))
