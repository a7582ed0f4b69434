"""Market Schemas — Pydantic models for listings, market pages, and settlement results.

Invariants:
    - MarketFilters: page >= 1, 1 <= limit <= 100, prices >= 0, min_price <= max_price
    - MarketFilters.search is stripped first, then limited to 100 chars, blank becomes None
    - View models are built from ORM rows (from_attributes) before the session closes

Design Decisions:
    - Filters validated by Pydantic, re-raised as InvalidFilterError by the query service
      so library callers and HTTP callers see the same error kind
"""

from datetime import datetime
from uuid import UUID

from pydantic import (
    BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator,
)

from fantasy_market.core.domain_types import ListingState, Position


DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_SEARCH_LENGTH = 100


class MarketFilters(BaseModel):
    """Market query filters — all optional except pagination."""
    position: Position | None = None
    search: str | None = None
    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    page: int = Field(1, ge=1, le=1000)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("search")
    @classmethod
    def strip_search(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if len(v) > MAX_SEARCH_LENGTH:
            raise ValueError(f"search must be at most {MAX_SEARCH_LENGTH} characters")
        return v or None

    @model_validator(mode="after")
    def check_price_range(self):
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot be greater than max_price")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# --- Requests -----------------------------------------------------------------

class CreateListingRequest(BaseModel):
    """Sell request — price bounds are enforced by the listing manager."""
    player_id: UUID
    price: int


class BuyPlayerRequest(BaseModel):
    transfer_listing_id: UUID


# --- Views --------------------------------------------------------------------

class PlayerView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    team: str
    position: Position
    reference_price: int


class SellerView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str


class ListingView(BaseModel):
    """Listing as shown on the market and in the seller's own list."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ask_price: int
    state: ListingState
    created_at: datetime
    player: PlayerView
    seller: SellerView


class MarketPage(BaseModel):
    listings: list[ListingView]
    total_count: int
    page: int
    limit: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.limit)


class SettlementResult(BaseModel):
    """Outcome of a committed purchase."""
    listing_id: UUID
    player: PlayerView
    paid_price: int
    original_price: int
    discount_applied: int
    new_buyer_budget: int
