"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import (
    APIError,
    api_error_handler,
    domain_error_handler,
    generic_error_handler,
)
from api.routes import health, polls, resolution, stakes, votes, wallet
from core.config.runtime import load_runtime_config
from core.schemas.errors import PitchpoolException


def _resolve_log_level() -> int:
    """Resolve log level from PITCHPOOL_LOG_LEVEL or pitchpool.json, defaulting to INFO."""
    try:
        raw = load_runtime_config().log_level
    except (OSError, ValueError):
        raw = "INFO"
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Pitchpool API",
        description="""
HTTP API for the pitchpool sports prediction market.

## Endpoints

- **POST /polls** - Create a Yes/No poll on a match
- **POST /polls/{poll_id}/stakes** - Stake on a side
- **POST /matches/{match_id}/conclude** - Open oracle voting for a match
- **POST /polls/{poll_id}/votes** - Cast an oracle vote
- **POST /polls/{poll_id}/resolve** - Attempt resolution
- **GET /polls/{poll_id}/payouts** - Final payouts for a resolved poll
- **POST /scheduler/tick** - Lock due polls, resolve elapsed windows
- **GET /health** - Health check

## Errors

Rejected operations return `{"ok": false, "error": {code, message, details}}`
with 400 (invalid input), 402 (insufficient funds), 404 (unknown poll),
409 (wrong lifecycle state) or 502 (settlement failed).
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(PitchpoolException, domain_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(polls.router)
    app.include_router(stakes.router)
    app.include_router(votes.router)
    app.include_router(resolution.router)
    app.include_router(wallet.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
