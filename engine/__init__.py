"""
Staking and resolution engine.

Leaves first: payouts (pure arithmetic), ledger (stakes), lifecycle
(status machine), tally (oracle votes), resolution (outcome commit).
"""

from .context import Clock, EngineContext, FrozenClock, RealClock
from .ledger import StakeLedger
from .lifecycle import (
    LOCK_OFFSETS_MINUTES,
    PollLifecycle,
    is_accepting_votes,
    is_lock_due,
    is_voting_window_elapsed,
    lock_time_for,
    voting_deadline,
)
from .locks import PollLocks
from .payouts import (
    fee_on_profit_only,
    is_underdog,
    pool_percentages,
    pool_preview,
    potential_winnings,
    preview_stake,
    settle_poll,
    settle_stake,
    vote_reward,
)
from .resolution import ResolutionEngine, review_kind_for
from .tally import VoteTally, classify_consensus, compute_tally, tally_records

__all__ = [
    # Context
    "Clock",
    "EngineContext",
    "FrozenClock",
    "RealClock",
    # Components
    "PollLocks",
    "StakeLedger",
    "PollLifecycle",
    "VoteTally",
    "ResolutionEngine",
    # Lifecycle helpers
    "LOCK_OFFSETS_MINUTES",
    "is_accepting_votes",
    "is_lock_due",
    "is_voting_window_elapsed",
    "lock_time_for",
    "voting_deadline",
    # Payouts
    "fee_on_profit_only",
    "is_underdog",
    "pool_percentages",
    "pool_preview",
    "potential_winnings",
    "preview_stake",
    "settle_poll",
    "settle_stake",
    "vote_reward",
    # Tally / resolution helpers
    "classify_consensus",
    "compute_tally",
    "tally_records",
    "review_kind_for",
]
