"""
Schemas
File: errors.py

Purpose: Error taxonomy for the staking and resolution engine.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the engine."""

    # Stake validation
    INVALID_AMOUNT = "INVALID_AMOUNT"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"

    # Lifecycle
    INVALID_STATE = "INVALID_STATE"
    POLL_LOCKED = "POLL_LOCKED"
    POLL_NOT_FOUND = "POLL_NOT_FOUND"
    INVALID_POLL = "INVALID_POLL"

    # Voting
    ALREADY_VOTED = "ALREADY_VOTED"
    INELIGIBLE_VOTER = "INELIGIBLE_VOTER"
    NOT_IN_VOTING_WINDOW = "NOT_IN_VOTING_WINDOW"

    # External collaborators
    SETTLEMENT_FAILED = "SETTLEMENT_FAILED"


# =============================================================================
# Pydantic Error Model (Structured Communication)
# =============================================================================

class PitchpoolError(BaseModel):
    """
    Structured error passed across the API boundary.

    Mirrors PitchpoolException so errors can be serialized without
    losing their code or details.
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.BELOW_MINIMUM],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the caller may retry the operation",
    )

    def to_exception(self) -> "PitchpoolException":
        """Convert this error model to a raised exception."""
        return PitchpoolException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    return value


class PitchpoolException(Exception):
    """
    Base exception for all engine errors.

    Carries structured error information and can be converted to a
    PitchpoolError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "PITCHPOOL_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = {k: _jsonable(v) for k, v in (details or {}).items()}
        self.retryable = retryable

    def to_error_model(self) -> PitchpoolError:
        """Convert this exception to a PitchpoolError model."""
        return PitchpoolError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class InvalidAmountException(PitchpoolException):
    """Stake amount is zero or negative."""

    def __init__(self, amount: Any, details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details["amount"] = amount
        super().__init__(
            message=f"Stake amount must be positive, got {amount}",
            code=ErrorCodes.INVALID_AMOUNT,
            details=full_details,
        )


class BelowMinimumException(PitchpoolException):
    """Stake amount is below the configured floor."""

    def __init__(self, amount: Decimal, minimum: Decimal) -> None:
        super().__init__(
            message=f"Minimum stake is {minimum}, got {amount}",
            code=ErrorCodes.BELOW_MINIMUM,
            details={"amount": amount, "minimum": minimum},
        )


class InsufficientFundsException(PitchpoolException):
    """Staker's available balance does not cover the stake."""

    def __init__(self, staker: str, amount: Decimal, balance: Decimal) -> None:
        super().__init__(
            message=f"Insufficient balance for {staker}: need {amount}, have {balance}",
            code=ErrorCodes.INSUFFICIENT_FUNDS,
            details={"staker": staker, "amount": amount, "balance": balance},
        )


class InvalidStateException(PitchpoolException):
    """Operation is not allowed in the poll's current lifecycle state."""

    def __init__(
        self,
        message: str,
        poll_id: str | None = None,
        status: str | None = None,
        code: str = ErrorCodes.INVALID_STATE,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if poll_id:
            full_details["poll_id"] = poll_id
        if status:
            full_details["status"] = status
        super().__init__(message=message, code=code, details=full_details)


class PollLockedException(InvalidStateException):
    """Poll no longer accepts stakes."""

    def __init__(self, poll_id: str, status: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            message=f"Poll {poll_id} is not open for staking (status={status})",
            poll_id=poll_id,
            status=status,
            code=ErrorCodes.POLL_LOCKED,
            details=details,
        )


class PollNotFoundException(PitchpoolException):
    """No poll with the given id."""

    def __init__(self, poll_id: str) -> None:
        super().__init__(
            message=f"Poll not found: {poll_id}",
            code=ErrorCodes.POLL_NOT_FOUND,
            details={"poll_id": poll_id},
        )


class InvalidPollException(PitchpoolException):
    """Poll definition fails validation (question length, lock policy)."""

    def __init__(self, message: str, field_path: str | None = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_POLL,
            details={"field_path": field_path} if field_path else {},
        )


class AlreadyVotedException(PitchpoolException):
    """Voter already cast a vote on this poll."""

    def __init__(self, poll_id: str, voter: str) -> None:
        super().__init__(
            message=f"{voter} has already voted on poll {poll_id}",
            code=ErrorCodes.ALREADY_VOTED,
            details={"poll_id": poll_id, "voter": voter},
        )


class IneligibleVoterException(PitchpoolException):
    """Voter staked on the poll and may not resolve it."""

    def __init__(self, poll_id: str, voter: str) -> None:
        super().__init__(
            message=f"{voter} staked on poll {poll_id} and cannot vote on it",
            code=ErrorCodes.INELIGIBLE_VOTER,
            details={"poll_id": poll_id, "voter": voter},
        )


class NotInVotingWindowException(PitchpoolException):
    """Poll is not currently accepting oracle votes."""

    def __init__(self, poll_id: str, status: str, details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details.update({"poll_id": poll_id, "status": status})
        super().__init__(
            message=f"Poll {poll_id} is not in its voting window (status={status})",
            code=ErrorCodes.NOT_IN_VOTING_WINDOW,
            details=full_details,
        )


class SettlementFailedException(PitchpoolException):
    """The wallet collaborator could not settle the transaction."""

    def __init__(
        self,
        message: str,
        staker: str | None = None,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if staker:
            full_details["staker"] = staker
        super().__init__(
            message=message,
            code=ErrorCodes.SETTLEMENT_FAILED,
            details=full_details,
            retryable=retryable,
        )
