"""
Resolution Routes

Resolution attempts, manual adjudication, payouts and the scheduler sweep.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_market_service
from api.models.requests import ManualOutcomeRequest, SchedulerTickRequest
from api.models.responses import (
    OutcomeResponse,
    PayoutsResponse,
    ResolutionResponse,
    SchedulerTickResponse,
)
from orchestrator.market import MarketService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["resolution"])


@router.post("/polls/{poll_id}/resolve", response_model=ResolutionResponse)
def resolve_poll(
    poll_id: str,
    service: MarketService = Depends(get_market_service),
) -> ResolutionResponse:
    """
    Attempt resolution from the current tally.

    The decision state is one of resolved, pending or
    manual_review_required; review is not an error.
    """
    return ResolutionResponse(ok=True, decision=service.resolve(poll_id))


@router.post("/polls/{poll_id}/manual-outcome", response_model=OutcomeResponse)
def commit_manual_outcome(
    poll_id: str,
    request: ManualOutcomeRequest,
    service: MarketService = Depends(get_market_service),
) -> OutcomeResponse:
    outcome = service.commit_manual_outcome(poll_id, request.outcome, request.decided_by)
    return OutcomeResponse(ok=True, outcome=outcome)


@router.get("/polls/{poll_id}/payouts", response_model=PayoutsResponse)
def get_payouts(
    poll_id: str,
    service: MarketService = Depends(get_market_service),
) -> PayoutsResponse:
    payouts = service.payouts(poll_id)
    poll = service.get_poll(poll_id)
    return PayoutsResponse(
        ok=True,
        poll_id=poll_id,
        outcome=poll.outcome,
        payouts=payouts,
        total_paid=sum((p.payout for p in payouts), Decimal("0")),
        total_fees=sum((p.platform_fee for p in payouts), Decimal("0")),
    )


@router.post("/scheduler/tick", response_model=SchedulerTickResponse)
def scheduler_tick(
    request: Optional[SchedulerTickRequest] = None,
    service: MarketService = Depends(get_market_service),
) -> SchedulerTickResponse:
    """Lock polls past their lock time and resolve elapsed voting windows."""
    tick = service.scheduler_tick(request.now if request else None)
    if tick.locked or tick.decisions:
        logger.info(
            f"Scheduler tick at {tick.now.isoformat()}: locked {len(tick.locked)}, "
            f"decided {len(tick.decisions)}"
        )
    return SchedulerTickResponse(
        ok=True,
        now=tick.now,
        locked=[p.poll_id for p in tick.locked],
        decisions=tick.decisions,
    )
