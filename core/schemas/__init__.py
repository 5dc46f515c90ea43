"""
Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    SCHEMA_VERSION,
    SUPPORTED_SCHEMA_VERSIONS,
    SchemaVersion,
    UnsupportedSchemaVersionError,
    assert_supported_schema_version,
)

# Canonical serialization
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
)

# Decimal helpers
from .numeric import (
    CENT,
    HUNDRED,
    ZERO,
    quantize_currency,
    share_pct,
    to_decimal,
    whole_percentages,
)

# Error models and exceptions
from .errors import (
    AlreadyVotedException,
    BelowMinimumException,
    ErrorCodes,
    IneligibleVoterException,
    InsufficientFundsException,
    InvalidAmountException,
    InvalidPollException,
    InvalidStateException,
    NotInVotingWindowException,
    PitchpoolError,
    PitchpoolException,
    PollLockedException,
    PollNotFoundException,
    SettlementFailedException,
)

# Poll schemas
from .poll import (
    LockPolicy,
    Poll,
    PollCategory,
    PollStatus,
    PoolAccount,
    PoolPercentages,
    ReviewKind,
    Side,
)

# Stake schemas
from .stake import (
    Stake,
    StakePayout,
    StakePlacement,
    StakePreview,
    WinningsPreview,
)

# Vote schemas
from .vote import (
    ConsensusLevel,
    TallyResult,
    VoteDecision,
    VoteRecord,
)

# Resolution schemas
from .resolution import (
    DecisionState,
    ResolutionDecision,
    ResolutionMethod,
    ResolutionOutcome,
)

__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SchemaVersion",
    "UnsupportedSchemaVersionError",
    "assert_supported_schema_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    # Numeric
    "CENT",
    "HUNDRED",
    "ZERO",
    "quantize_currency",
    "share_pct",
    "to_decimal",
    "whole_percentages",
    # Errors
    "AlreadyVotedException",
    "BelowMinimumException",
    "ErrorCodes",
    "IneligibleVoterException",
    "InsufficientFundsException",
    "InvalidAmountException",
    "InvalidPollException",
    "InvalidStateException",
    "NotInVotingWindowException",
    "PitchpoolError",
    "PitchpoolException",
    "PollLockedException",
    "PollNotFoundException",
    "SettlementFailedException",
    # Poll
    "LockPolicy",
    "Poll",
    "PollCategory",
    "PollStatus",
    "PoolAccount",
    "PoolPercentages",
    "ReviewKind",
    "Side",
    # Stake
    "Stake",
    "StakePayout",
    "StakePlacement",
    "StakePreview",
    "WinningsPreview",
    # Vote
    "ConsensusLevel",
    "TallyResult",
    "VoteDecision",
    "VoteRecord",
    # Resolution
    "DecisionState",
    "ResolutionDecision",
    "ResolutionMethod",
    "ResolutionOutcome",
]
