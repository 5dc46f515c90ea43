"""
API Error Handling

Standardized error handling for the API. Domain exceptions raised by the
engine are rendered with the same envelope as API-level errors.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from api.models.responses import ErrorResponse, ErrorDetail
from core.schemas.errors import ErrorCodes, PitchpoolException


logger = logging.getLogger(__name__)


# HTTP status per engine error code; unknown codes fall back to 400
DOMAIN_STATUS_CODES: dict[str, int] = {
    ErrorCodes.INVALID_AMOUNT: 400,
    ErrorCodes.BELOW_MINIMUM: 400,
    ErrorCodes.INVALID_POLL: 400,
    ErrorCodes.INSUFFICIENT_FUNDS: 402,
    ErrorCodes.POLL_NOT_FOUND: 404,
    ErrorCodes.INVALID_STATE: 409,
    ErrorCodes.POLL_LOCKED: 409,
    ErrorCodes.ALREADY_VOTED: 409,
    ErrorCodes.INELIGIBLE_VOTER: 409,
    ErrorCodes.NOT_IN_VOTING_WINDOW: 409,
    ErrorCodes.SETTLEMENT_FAILED: 502,
}


class APIError(Exception):
    """Base API error with structured response."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=self.code,
                message=self.message,
                details=self.details,
            ),
        )


class InvalidRequestError(APIError):
    """Invalid request parameters."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code="INVALID_REQUEST",
            message=message,
            status_code=400,
            details=details,
        )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(),
    )


async def domain_error_handler(request: Request, exc: PitchpoolException) -> JSONResponse:
    """Handle engine exceptions (rejected stakes, votes, transitions)."""
    status_code = DOMAIN_STATUS_CODES.get(exc.code, 400)
    logger.warning(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                retryable=exc.retryable,
            ),
        ).model_dump(),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            ok=False,
            error=ErrorDetail(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred",
                details={"type": type(exc).__name__},
            ),
        ).model_dump(),
    )
