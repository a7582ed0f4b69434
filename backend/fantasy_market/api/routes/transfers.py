"""Transfer Routes — HTTP surface over the TransferMarket facade.

Invariants:
    - Routes translate HTTP to facade calls and back; no market rules here
    - Failures propagate as MarketError to the global handler (never swallowed)
    - The caller is always the X-User-Id identity: sellers list/retract as themselves,
      buyers buy as themselves
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from fantasy_market.api.dependencies import get_current_user_id, get_transfer_market
from fantasy_market.schemas.market import (
    BuyPlayerRequest, CreateListingRequest, ListingView, MarketFilters,
    MarketPage, SettlementResult,
)
from fantasy_market.services.transfer_market import TransferMarket

router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])

MarketDep = Annotated[TransferMarket, Depends(get_transfer_market)]
UserDep = Annotated[UUID, Depends(get_current_user_id)]


@router.get("/market", response_model=MarketPage)
async def get_market_listings(
    filters: Annotated[MarketFilters, Query()],
    market: MarketDep,
    user_id: UserDep,
):
    """Browse active listings with filters and pagination."""
    return await market.query_market(filters)


@router.get("/my-listings", response_model=list[ListingView])
async def get_my_listings(market: MarketDep, user_id: UserDep):
    """The caller's own active listings."""
    return await market.seller_listings(user_id)


@router.post(
    "/listings", response_model=ListingView,
    status_code=status.HTTP_201_CREATED,
)
async def create_listing(
    body: CreateListingRequest, market: MarketDep, user_id: UserDep,
):
    """Put one of the caller's players on the market."""
    return await market.create_listing(user_id, body.player_id, body.price)


@router.delete(
    "/listings/{listing_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_listing(listing_id: str, market: MarketDep, user_id: UserDep):
    """Withdraw one of the caller's active listings."""
    await market.retract_listing(user_id, listing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/buy", response_model=SettlementResult)
async def buy_player(body: BuyPlayerRequest, market: MarketDep, user_id: UserDep):
    """Buy a listed player at its clearing price."""
    return await market.buy(user_id, body.transfer_listing_id)
