"""
Engine Context

Provides dependency injection for the engine, containing:
- Market configuration
- Wallet collaborator
- Clock (can be frozen for determinism)

Engine components never read wall-clock time or build their own
collaborators; the market service takes a context and passes ``now``
values down explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from core.config import RuntimeConfig
    from core.wallet import Wallet


class Clock(Protocol):
    """
    Protocol for time source.

    Can be real time or frozen for deterministic testing.
    """
    def now(self) -> datetime:
        """Get current UTC time."""
        ...


class RealClock:
    """Real-time clock implementation."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Frozen clock for deterministic testing.

    Always returns the same time until moved with set_time() or advance().
    """

    def __init__(self, frozen_time: Optional[datetime] = None) -> None:
        self._time = frozen_time or datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._time

    def set_time(self, time: datetime) -> None:
        """Set the frozen time."""
        self._time = time

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta expressed as keyword arguments."""
        self._time = self._time + timedelta(**kwargs)
        return self._time


@dataclass
class EngineContext:
    """
    Collaborators handed to the market service.

    Usage:
        ctx = EngineContext.create(config)
        service = MarketService(ctx)
    """

    config: "RuntimeConfig"
    wallet: "Wallet"
    clock: Clock = field(default_factory=RealClock)

    @classmethod
    def create(
        cls,
        config: "RuntimeConfig",
        *,
        wallet: Optional["Wallet"] = None,
        clock: Optional[Clock] = None,
    ) -> "EngineContext":
        """
        Create a context from configuration.

        Args:
            config: Runtime configuration
            wallet: Wallet collaborator; defaults to a SimulatedWallet built
                    from config.wallet
            clock: Time source; defaults to RealClock
        """
        from core.wallet import SimulatedWallet

        clock = clock or RealClock()
        if wallet is None:
            wallet = SimulatedWallet.from_config(config.wallet, now=clock.now)

        return cls(config=config, wallet=wallet, clock=clock)

    @classmethod
    def create_test(
        cls,
        *,
        config: Optional["RuntimeConfig"] = None,
        frozen_time: Optional[datetime] = None,
    ) -> "EngineContext":
        """Create a context with a frozen clock and an in-memory wallet."""
        from core.config import RuntimeConfig

        return cls.create(
            config or RuntimeConfig(),
            clock=FrozenClock(frozen_time),
        )

    def now(self) -> datetime:
        """Get current time from clock."""
        return self.clock.now()
