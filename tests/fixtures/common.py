"""
Common test fixtures shared by all modules.

Provides factory functions for core pitchpool data structures:
- RuntimeConfig
- Poll / PoolAccount
- TransactionReceipt / Stake
- MarketService wired with a frozen clock and simulated wallet

These are the foundational building blocks used by higher-level tests.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable, Optional

from core.config.runtime import MarketConfig, RuntimeConfig, WalletConfig
from core.receipts.models import TransactionReceipt
from core.schemas.poll import (
    LockPolicy,
    Poll,
    PollCategory,
    PollStatus,
    PoolAccount,
    Side,
)
from core.schemas.stake import Stake
from core.wallet.simulated import SimulatedWallet
from engine.context import EngineContext, FrozenClock
from orchestrator.market import MarketService


# Reference times: service clocks start two hours before kickoff
KICKOFF = datetime(2026, 6, 1, 18, 0, 0, tzinfo=timezone.utc)
START = KICKOFF - timedelta(hours=2)

DEFAULT_QUESTION = "Will Haaland score a goal?"


# =============================================================================
# Config Factory
# =============================================================================

def make_config(
    starting_balance: Any = "0",
    failure_rate: float = 0.0,
    seed: Optional[int] = None,
    **market: Any,
) -> RuntimeConfig:
    """
    Create a RuntimeConfig for testing.

    Args:
        starting_balance: Balance every unknown wallet account starts with
        failure_rate: Simulated settlement failure probability
        seed: Seed for failure injection
        **market: MarketConfig overrides (min_stake, voting_window_seconds, ...)
    """
    return RuntimeConfig(
        market=MarketConfig(**market),
        wallet=WalletConfig(
            starting_balance=starting_balance,
            failure_rate=failure_rate,
            seed=seed,
        ),
    )


# =============================================================================
# Poll Factories
# =============================================================================

def make_pool(yes: Any = "0", no: Any = "0", participants: int = 0) -> PoolAccount:
    return PoolAccount(yes_pool=Decimal(str(yes)), no_pool=Decimal(str(no)), participants=participants)


def make_poll(
    poll_id: str = "poll_test_001",
    match_id: str = "match_001",
    question: str = DEFAULT_QUESTION,
    status: PollStatus = PollStatus.OPEN,
    kickoff_at: datetime = KICKOFF,
    lock_at: Optional[datetime] = None,
    pool: Optional[PoolAccount] = None,
    voting_ends_at: Optional[datetime] = None,
    **kwargs: Any,
) -> Poll:
    """
    Create a Poll for testing, bypassing the market service.

    Lock time defaults to kickoff.
    """
    return Poll(
        poll_id=poll_id,
        match_id=match_id,
        category=kwargs.pop("category", PollCategory.PLAYER_EVENT),
        question=question,
        pool=pool or PoolAccount(),
        status=status,
        lock_policy=kwargs.pop("lock_policy", LockPolicy.KICKOFF),
        kickoff_at=kickoff_at,
        lock_at=lock_at or kickoff_at,
        created_at=kwargs.pop("created_at", START),
        voting_ends_at=voting_ends_at,
        **kwargs,
    )


# =============================================================================
# Stake Factories
# =============================================================================

def make_receipt(source: str = "alice", amount: Any = "10", nonce: int = 1) -> TransactionReceipt:
    return TransactionReceipt(
        tx_hash=f"0x{nonce:064x}",
        ledger=50_000_000 + nonce,
        fee="100 stroops (0.0000100 XLM)",
        source=source,
        destination="CPITCHPOOLSTAKINGCONTRACT",
        amount=Decimal(str(amount)),
        timestamp=START,
    )


def make_stake(
    staker: str = "alice",
    side: Side = Side.YES,
    amount: Any = "10",
    poll_id: str = "poll_test_001",
    stake_id: Optional[str] = None,
) -> Stake:
    return Stake(
        stake_id=stake_id or f"stk_{staker}_{side.value}",
        poll_id=poll_id,
        staker=staker,
        side=side,
        amount=Decimal(str(amount)),
        placed_at=START,
        receipt=make_receipt(staker, amount),
    )


# =============================================================================
# Service Factories
# =============================================================================

def make_service(
    config: Optional[RuntimeConfig] = None,
    balances: Optional[dict[str, Any]] = None,
    frozen_time: datetime = START,
) -> MarketService:
    """
    Create a MarketService with a FrozenClock and SimulatedWallet.

    Args:
        config: Runtime config (defaults to make_config())
        balances: Accounts to fund before returning
        frozen_time: Initial clock time
    """
    ctx = EngineContext.create_test(config=config or make_config(), frozen_time=frozen_time)
    for owner, amount in (balances or {}).items():
        ctx.wallet.fund(owner, Decimal(str(amount)))
    return MarketService(ctx)


def clock_of(service: MarketService) -> FrozenClock:
    return service.ctx.clock


def wallet_of(service: MarketService) -> SimulatedWallet:
    return service.ctx.wallet


def create_voting_poll(
    service: MarketService,
    stakes: Iterable[tuple[str, Side, Any]] = (),
    match_id: str = "match_001",
    question: str = DEFAULT_QUESTION,
) -> Poll:
    """
    Create a poll, place the given stakes, then conclude the match.

    Advances the service clock to one minute past kickoff + 90 minutes.
    Stakers must already be funded.
    """
    poll = service.create_poll(
        match_id=match_id,
        question=question,
        category=PollCategory.PLAYER_EVENT,
        kickoff_at=KICKOFF,
    )
    for staker, side, amount in stakes:
        service.place_stake(poll.poll_id, staker, side, amount)

    clock = clock_of(service)
    clock.set_time(KICKOFF + timedelta(minutes=91))
    service.conclude_match(match_id)
    return service.get_poll(poll.poll_id)
