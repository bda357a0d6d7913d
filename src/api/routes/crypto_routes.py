"""
Crypto API Routes

Market data lookups and the authenticated watchlist.
Trending and watchlist routes are declared before ``/{coin_id}`` so they are not
captured as coin ids.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.dependencies import get_app_container, get_current_user_id
from src.api.errors import error_response
from src.api.models.request_models import AddWatchlistRequest
from src.domain.exceptions import CoinNotFoundError
from src.infrastructure.container import Container

router = APIRouter()


@router.get("/top", summary="Top coins by market cap")
async def get_top_coins(
    limit: Optional[int] = Query(None, ge=1, le=250),
    container: Container = Depends(get_app_container),
):
    snapshots = await container.market_data_adapter.fetch_top_coins(limit)
    return [snapshot.to_dict() for snapshot in snapshots]


@router.get("/trending", summary="Trending coins")
async def get_trending_coins(container: Container = Depends(get_app_container)):
    coins = await container.market_data_adapter.fetch_trending()
    return [coin.to_dict() for coin in coins]


@router.get("/watchlist", summary="Current user's watchlist")
async def get_watchlist(
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    entries = await container.holdings_service.get_watchlist(user_id)
    return [entry.to_dict() for entry in entries]


@router.get("/watchlist/details", summary="Watchlist with live prices")
async def get_watchlist_details(
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    overview = await container.watchlist_overview.execute(user_id)
    return overview.to_dict()


@router.post("/watchlist/add", summary="Add a coin to the watchlist")
async def add_to_watchlist(
    request: AddWatchlistRequest,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    try:
        entries = await container.holdings_service.add_to_watchlist(user_id, request.coin_id)
    except CoinNotFoundError as e:
        return error_response(e, status_code=400)
    return [entry.to_dict() for entry in entries]


@router.delete("/watchlist/remove/{coin_id}", summary="Remove a coin from the watchlist")
async def remove_from_watchlist(
    coin_id: str,
    user_id: str = Depends(get_current_user_id),
    container: Container = Depends(get_app_container),
):
    entries = await container.holdings_service.remove_from_watchlist(user_id, coin_id)
    return [entry.to_dict() for entry in entries]


@router.get("/{coin_id}/chart", summary="Coin price history")
async def get_coin_chart(
    coin_id: str,
    days: int = Query(30, ge=1, le=365),
    container: Container = Depends(get_app_container),
):
    history = await container.market_data_adapter.fetch_market_chart(coin_id, days)
    return history.to_dict()


@router.get("/{coin_id}", summary="Coin detail")
async def get_coin_detail(
    coin_id: str,
    container: Container = Depends(get_app_container),
) -> JSONResponse:
    snapshot = await container.market_data_adapter.fetch_coin_detail(coin_id)
    return JSONResponse(snapshot.to_dict())
