"""
Simulated Wallet

In-memory wallet used by development servers, the CLI simulator and
tests. Balances live in process memory; settlement produces a receipt
with a deterministic hash. Failure injection is an explicit, seeded
strategy so runs are reproducible.
"""

from __future__ import annotations

import logging
import random
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Protocol

from core.crypto.hashing import hash_canonical, to_hex
from core.receipts.models import TransactionReceipt
from core.schemas.numeric import ZERO

from .base import WalletError


logger = logging.getLogger(__name__)

STROOPS_PER_XLM = 10_000_000
LEDGER_BASE = 50_000_000

NETWORK_FAILURE_REASONS = (
    "Network congestion, try again shortly",
    "Transaction timeout, ledger did not respond",
)


class FailureStrategy(Protocol):
    """Decides whether a settlement attempt fails, and why."""

    def failure_reason(self, source: str, amount: Decimal) -> Optional[str]:
        """Return a failure message, or None to let the settlement through."""
        ...


class NeverFail:
    """Settlements always go through."""

    def failure_reason(self, source: str, amount: Decimal) -> Optional[str]:
        return None


class SeededFailure:
    """
    Fails a fixed fraction of settlements using a private seeded RNG.

    Two instances built with the same seed fail on the same attempts.
    """

    def __init__(self, rate: float, seed: Optional[int] = None) -> None:
        if not 0.0 <= rate <= 1.0:
            raise ValueError(f"rate must be in [0, 1], got {rate}")
        self.rate = rate
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def failure_reason(self, source: str, amount: Decimal) -> Optional[str]:
        with self._lock:
            if self._rng.random() < self.rate:
                return self._rng.choice(NETWORK_FAILURE_REASONS)
        return None


class SimulatedWallet:
    """
    In-memory wallet.

    Usage:
        wallet = SimulatedWallet(starting_balance=Decimal("500"))
        wallet.fund("alice", Decimal("100"))
        receipt = wallet.settle("alice", Decimal("25"), memo="Stake YES on poll_1")
    """

    def __init__(
        self,
        starting_balance: Decimal = ZERO,
        contract_id: str = "CPITCHPOOLSTAKINGCONTRACT",
        base_fee_stroops: int = 100,
        failure_strategy: Optional[FailureStrategy] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.starting_balance = starting_balance
        self.contract_id = contract_id
        self.base_fee_stroops = base_fee_stroops
        self.failure_strategy: FailureStrategy = failure_strategy or NeverFail()
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._balances: dict[str, Decimal] = {}
        self._nonce = 0
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config, now: Optional[Callable[[], datetime]] = None) -> "SimulatedWallet":
        """Build from a WalletConfig."""
        strategy: FailureStrategy
        if config.failure_rate > 0:
            strategy = SeededFailure(config.failure_rate, seed=config.seed)
        else:
            strategy = NeverFail()
        return cls(
            starting_balance=config.starting_balance,
            contract_id=config.contract_id,
            base_fee_stroops=config.base_fee_stroops,
            failure_strategy=strategy,
            now=now,
        )

    def _balance(self, owner: str) -> Decimal:
        return self._balances.setdefault(owner, self.starting_balance)

    def balance_of(self, owner: str) -> Decimal:
        with self._lock:
            return self._balance(owner)

    def fund(self, owner: str, amount: Decimal) -> Decimal:
        """Credit an account; returns the new balance."""
        if amount <= 0:
            raise ValueError(f"Funding amount must be positive, got {amount}")
        with self._lock:
            self._balances[owner] = self._balance(owner) + amount
            logger.debug(f"Funded {owner} with {amount}")
            return self._balances[owner]

    def settle(self, source: str, amount: Decimal, memo: str) -> TransactionReceipt:
        reason = self.failure_strategy.failure_reason(source, amount)
        if reason is not None:
            logger.warning(f"Simulated settlement failure for {source}: {reason}")
            raise WalletError(reason, owner=source, retryable=True)

        with self._lock:
            balance = self._balance(source)
            if amount > balance:
                raise WalletError(
                    f"Insufficient balance: need {amount}, have {balance}",
                    owner=source,
                )
            self._balances[source] = balance - amount
            self._nonce += 1
            nonce = self._nonce

        request = {
            "source": source,
            "destination": self.contract_id,
            "amount": amount,
            "memo": memo,
            "nonce": nonce,
        }
        fee_xlm = Decimal(self.base_fee_stroops) / STROOPS_PER_XLM
        return TransactionReceipt(
            tx_hash=to_hex(hash_canonical(request)),
            ledger=LEDGER_BASE + nonce,
            fee=f"{self.base_fee_stroops} stroops ({fee_xlm:.7f} XLM)",
            source=source,
            destination=self.contract_id,
            amount=amount,
            memo=memo,
            timestamp=self._now(),
            metadata={"nonce": nonce},
        )
