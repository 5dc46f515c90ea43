"""
Wallet Route

Funding for the simulated wallet, used in demos and tests.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_market_service
from api.errors import InvalidRequestError
from api.models.requests import FundRequest
from api.models.responses import FundResponse
from core.wallet.simulated import SimulatedWallet
from orchestrator.market import MarketService


router = APIRouter(tags=["wallet"])


@router.post("/wallet/fund", response_model=FundResponse)
def fund_wallet(
    request: FundRequest,
    service: MarketService = Depends(get_market_service),
) -> FundResponse:
    wallet = service.ctx.wallet
    if not isinstance(wallet, SimulatedWallet):
        raise InvalidRequestError("Funding is only available with the simulated wallet")
    balance = wallet.fund(request.owner, request.amount)
    return FundResponse(ok=True, owner=request.owner, balance=balance)
