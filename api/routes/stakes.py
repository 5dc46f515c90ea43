"""
Stake Routes

Preview potential winnings and place stakes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_market_service
from api.models.requests import PreviewRequest, StakeRequest
from api.models.responses import PreviewResponse, StakeListResponse, StakeResponse
from orchestrator.market import MarketService


router = APIRouter(tags=["staking"])


@router.post("/polls/{poll_id}/preview", response_model=PreviewResponse)
def preview_stake(
    poll_id: str,
    request: PreviewRequest,
    service: MarketService = Depends(get_market_service),
) -> PreviewResponse:
    """Potential winnings and pool split for a stake that is not placed."""
    preview = service.preview_stake(poll_id, request.side, request.amount)
    return PreviewResponse(ok=True, poll_id=poll_id, preview=preview)


@router.post("/polls/{poll_id}/stakes", response_model=StakeResponse, status_code=201)
def place_stake(
    poll_id: str,
    request: StakeRequest,
    service: MarketService = Depends(get_market_service),
) -> StakeResponse:
    """
    Settle and record a stake.

    Rejections come back as 409 (poll locked), 400 (bad amount),
    402 (insufficient funds) or 502 (settlement failed).
    """
    placement = service.place_stake(poll_id, request.staker, request.side, request.amount)
    return StakeResponse(ok=True, placement=placement)


@router.get("/stakers/{staker}/stakes", response_model=StakeListResponse)
def stakes_for_staker(
    staker: str,
    service: MarketService = Depends(get_market_service),
) -> StakeListResponse:
    return StakeListResponse(ok=True, stakes=service.stakes_for(staker))
