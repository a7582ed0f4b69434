"""Market Query Service — paginated, filtered read view over active listings.

Invariants:
    - Only ACTIVE listings are ever returned
    - Order is created_at DESC, then id DESC: pages are deterministic under timestamp ties
    - total_count and the page are read in the same transaction
    - No writes

Design Decisions:
    - search matches player name OR team, case-insensitive literal substring (ILIKE, wildcards escaped)
    - Raw filter dicts accepted and validated here so library callers get InvalidFilterError
      instead of a pydantic ValidationError
"""

from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_market.core.domain_types import ListingState
from fantasy_market.core.enforce_market import parse_identifier
from fantasy_market.core.errors import InvalidFilterError
from fantasy_market.infrastructure.ledger_store import LedgerStore
from fantasy_market.models.listing import Listing
from fantasy_market.models.player import Player
from fantasy_market.schemas.market import ListingView, MarketFilters, MarketPage


def coerce_filters(filters: MarketFilters | dict | None) -> MarketFilters:
    """Validate a raw filter mapping into MarketFilters."""
    if isinstance(filters, MarketFilters):
        return filters
    try:
        return MarketFilters.model_validate(filters or {})
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or "filters"
        raise InvalidFilterError(first["msg"], field)


def _escape_like(term: str) -> str:
    """Make % and _ match literally inside an ILIKE pattern."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _apply_filters(query: Select, filters: MarketFilters) -> Select:
    query = query.where(Listing.state == ListingState.ACTIVE.value)
    if filters.position is not None:
        query = query.where(Player.position == filters.position.value)
    if filters.min_price is not None:
        query = query.where(Listing.ask_price >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Listing.ask_price <= filters.max_price)
    if filters.search:
        pattern = f"%{_escape_like(filters.search)}%"
        query = query.where(or_(
            Player.name.ilike(pattern, escape="\\"),
            Player.team.ilike(pattern, escape="\\"),
        ))
    return query


class MarketQueryService:
    """Read-only market browsing."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def query(self, filters: MarketFilters | dict | None = None) -> MarketPage:
        """One page of active listings plus the total match count."""
        f = coerce_filters(filters)

        async def work(db: AsyncSession) -> MarketPage:
            count_query = _apply_filters(
                select(func.count(Listing.id)).join(Player, Listing.player_id == Player.id),
                f,
            )
            total = await db.scalar(count_query)

            page_query = (
                _apply_filters(
                    select(Listing).join(Player, Listing.player_id == Player.id), f,
                )
                .order_by(Listing.created_at.desc(), Listing.id.desc())
                .limit(f.limit)
                .offset(f.offset)
            )
            result = await db.execute(page_query)
            return MarketPage(
                listings=[ListingView.model_validate(row) for row in result.scalars()],
                total_count=total or 0,
                page=f.page,
                limit=f.limit,
            )

        return await self.store.run(work, operation="query_market")

    async def seller_listings(self, seller_id: UUID | str) -> list[ListingView]:
        """The seller's own active listings, newest first."""
        seller = parse_identifier(seller_id, "seller_id")

        async def work(db: AsyncSession) -> list[ListingView]:
            result = await db.execute(
                select(Listing)
                .where(Listing.seller_id == seller)
                .where(Listing.state == ListingState.ACTIVE.value)
                .order_by(Listing.created_at.desc(), Listing.id.desc())
            )
            return [ListingView.model_validate(row) for row in result.scalars()]

        return await self.store.run(work, operation="seller_listings")
