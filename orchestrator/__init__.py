"""
Market orchestration.

Public API:
- MarketService: Poll registry composing the staking and resolution engine
- VoteCastResult: Result of a single oracle vote
- VoterStats: An oracle's votes, earnings and accuracy
- SchedulerTick: Polls locked and decisions taken by one scheduler sweep
"""

from orchestrator.market import (
    MarketService,
    SchedulerTick,
    VoteCastResult,
    VoterStats,
)


__all__ = [
    "MarketService",
    "SchedulerTick",
    "VoteCastResult",
    "VoterStats",
]
