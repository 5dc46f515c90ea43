"""
Vote Routes

Oracle votes, tallies and per-voter views.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_market_service
from api.models.requests import VoteRequest
from api.models.responses import (
    TallyResponse,
    VoterPollsResponse,
    VoterStatsResponse,
    VoteResponse,
)
from orchestrator.market import MarketService


router = APIRouter(tags=["voting"])


@router.post("/polls/{poll_id}/votes", response_model=VoteResponse, status_code=201)
def cast_vote(
    poll_id: str,
    request: VoteRequest,
    service: MarketService = Depends(get_market_service),
) -> VoteResponse:
    """Record an oracle vote. May resolve the poll on strong consensus."""
    result = service.cast_vote(poll_id, request.voter, request.decision)
    return VoteResponse(
        ok=True,
        vote=result.record,
        tally=result.tally,
        reward=result.reward,
        resolution=result.resolution,
    )


@router.get("/polls/{poll_id}/tally", response_model=TallyResponse)
def get_tally(
    poll_id: str,
    service: MarketService = Depends(get_market_service),
) -> TallyResponse:
    tally = service.tally(poll_id)
    return TallyResponse(ok=True, tally=tally, total_votes=tally.total_votes)


@router.get("/voters/{voter}/polls", response_model=VoterPollsResponse)
def available_polls(
    voter: str,
    service: MarketService = Depends(get_market_service),
) -> VoterPollsResponse:
    """Polls in their voting window that this voter may still vote on."""
    return VoterPollsResponse(ok=True, voter=voter, polls=service.available_polls(voter))


@router.get("/voters/{voter}/stats", response_model=VoterStatsResponse)
def voter_stats(
    voter: str,
    service: MarketService = Depends(get_market_service),
) -> VoterStatsResponse:
    stats = service.voter_stats(voter)
    return VoterStatsResponse(
        ok=True,
        voter=stats.voter,
        votes_cast=stats.votes_cast,
        earnings=stats.earnings,
        resolved_votes=stats.resolved_votes,
        correct_votes=stats.correct_votes,
        accuracy=stats.accuracy,
    )
