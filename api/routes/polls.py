"""
Poll Routes

Create, list and inspect polls; lock them and conclude matches.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_market_service
from api.models.requests import ConcludeMatchRequest, CreatePollRequest
from api.models.responses import ConcludeMatchResponse, PollListResponse, PollResponse
from core.schemas.poll import Poll, PollStatus
from orchestrator.market import MarketService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["polls"])


def poll_response(poll: Poll) -> PollResponse:
    return PollResponse(ok=True, poll=poll, percentages=poll.pool.percentages())


@router.post("/polls", response_model=PollResponse, status_code=201)
def create_poll(
    request: CreatePollRequest,
    service: MarketService = Depends(get_market_service),
) -> PollResponse:
    """Create an OPEN poll with an empty pool."""
    poll = service.create_poll(
        match_id=request.match_id,
        question=request.question,
        category=request.category,
        kickoff_at=request.kickoff_at,
        lock_policy=request.lock_policy,
        custom_lock_at=request.lock_at,
        created_by=request.created_by,
    )
    return poll_response(poll)


@router.get("/polls", response_model=PollListResponse)
def list_polls(
    status: Optional[PollStatus] = None,
    match_id: Optional[str] = None,
    service: MarketService = Depends(get_market_service),
) -> PollListResponse:
    polls = service.list_polls(status=status, match_id=match_id)
    return PollListResponse(ok=True, polls=polls, count=len(polls))


@router.get("/polls/{poll_id}", response_model=PollResponse)
def get_poll(
    poll_id: str,
    service: MarketService = Depends(get_market_service),
) -> PollResponse:
    return poll_response(service.get_poll(poll_id))


@router.post("/polls/{poll_id}/lock", response_model=PollResponse)
def lock_poll(
    poll_id: str,
    service: MarketService = Depends(get_market_service),
) -> PollResponse:
    """Close staking on a poll ahead of its scheduled lock time."""
    return poll_response(service.lock_poll(poll_id))


@router.post("/matches/{match_id}/conclude", response_model=ConcludeMatchResponse)
def conclude_match(
    match_id: str,
    request: Optional[ConcludeMatchRequest] = None,
    service: MarketService = Depends(get_market_service),
) -> ConcludeMatchResponse:
    """Open the oracle voting window for every poll on a finished match."""
    concluded_at = request.concluded_at if request else None
    polls = service.conclude_match(match_id, concluded_at)
    logger.info(f"Match {match_id} concluded: {len(polls)} poll(s) now voting")
    return ConcludeMatchResponse(ok=True, match_id=match_id, polls=polls)
