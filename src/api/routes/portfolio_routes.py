"""
Portfolio API Routes

Holdings are addressed by their position in the user's portfolio.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_app_container, get_current_user_id
from src.api.errors import error_response
from src.api.models.request_models import AddHoldingRequest, UpdateHoldingRequest
from src.domain.exceptions import CoinNotFoundError, InvalidIndexError
from src.infrastructure.container import Container

router = APIRouter()


@router.get("", summary="Current user's holdings")
async def get_portfolio(
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    holdings = await container.holdings_service.get_portfolio(user_id)
    return [holding.to_dict() for holding in holdings]


@router.get("/stats", summary="Portfolio valuation at live prices")
async def get_portfolio_stats(
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    report = await container.portfolio_valuation.execute(user_id)
    return report.to_dict()


@router.post("/add", status_code=status.HTTP_201_CREATED, summary="Add a holding")
async def add_holding(
    request: AddHoldingRequest,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    try:
        holdings = await container.holdings_service.add_holding(
            user_id,
            request.coin_id,
            request.amount,
            request.purchase_price,
        )
    except CoinNotFoundError as e:
        return error_response(e, status_code=status.HTTP_400_BAD_REQUEST)
    return [holding.to_dict() for holding in holdings]


@router.put("/update/{index}", summary="Replace amount and price of a holding")
async def update_holding(
    index: int,
    request: UpdateHoldingRequest,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    try:
        holdings = await container.holdings_service.update_holding(
            user_id,
            index,
            request.amount,
            request.purchase_price,
        )
    except InvalidIndexError as e:
        return error_response(e, status_code=status.HTTP_404_NOT_FOUND)
    return [holding.to_dict() for holding in holdings]


@router.delete("/remove/{index}", summary="Remove a holding")
async def remove_holding(
    index: int,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    holdings = await container.holdings_service.remove_holding(user_id, index)
    return [holding.to_dict() for holding in holdings]
