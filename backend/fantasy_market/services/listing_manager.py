"""Listing Manager — create and retract fixed-price transfer listings.

Invariants:
    - A listing is created only while the seller owns the player
    - At most one ACTIVE listing per player; a racing duplicate fails on the partial unique index
    - Retraction flips ACTIVE -> RETRACTED with one conditional UPDATE; no other side effects
    - Retracting a missing, closed, or foreign listing is ListingNotFoundError (indistinct)

Design Decisions:
    - Price validated before the store is touched: invalid input never opens a transaction
    - Ownership row locked FOR UPDATE while listing: serializes with a concurrent sale
    - No funds or ownership move at listing time
"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_market.core.domain_types import ListingState
from fantasy_market.core.enforce_market import (
    MAX_ASK_PRICE, parse_identifier, validate_ask_price,
)
from fantasy_market.core.errors import (
    DuplicateListingError, ErrorContext, ListingNotFoundError, OwnershipNotFoundError,
)
from fantasy_market.infrastructure.ledger_store import LedgerStore
from fantasy_market.models.listing import Listing
from fantasy_market.models.ownership import Ownership
from fantasy_market.schemas.market import ListingView


class ListingManager:
    """Creates and retracts listings against the ledger."""

    def __init__(self, store: LedgerStore, max_ask_price: int = MAX_ASK_PRICE):
        self.store = store
        self.max_ask_price = max_ask_price

    async def create_listing(
        self, seller_id: UUID | str, player_id: UUID | str, ask_price: int,
    ) -> ListingView:
        """List an owned player at a fixed ask price."""
        seller = parse_identifier(seller_id, "seller_id")
        player = parse_identifier(player_id, "player_id")
        price = validate_ask_price(ask_price, self.max_ask_price)

        async def work(db: AsyncSession) -> ListingView:
            return await self._create_in_tx(db, seller, player, price)

        return await self.store.run(work, operation="create_listing")

    async def _create_in_tx(
        self, db: AsyncSession, seller_id: UUID, player_id: UUID, price: int,
    ) -> ListingView:
        ctx = ErrorContext(user_id=str(seller_id), player_id=str(player_id))

        result = await db.execute(
            select(Ownership)
            .where(Ownership.user_id == seller_id)
            .where(Ownership.player_id == player_id)
            .with_for_update()
        )
        if result.scalar_one_or_none() is None:
            raise OwnershipNotFoundError(ctx)

        existing = await db.execute(
            select(Listing.id)
            .where(Listing.seller_id == seller_id)
            .where(Listing.player_id == player_id)
            .where(Listing.state == ListingState.ACTIVE.value)
        )
        if existing.first() is not None:
            raise DuplicateListingError(ctx)

        listing = Listing(
            seller_id=seller_id,
            player_id=player_id,
            ask_price=price,
            state=ListingState.ACTIVE.value,
        )
        db.add(listing)
        try:
            await db.flush()
        except IntegrityError:
            # lost the race to another createListing for this player
            raise DuplicateListingError(ctx)
        await db.refresh(listing, attribute_names=["player", "seller"])
        return ListingView.model_validate(listing)

    async def retract_listing(
        self, seller_id: UUID | str, listing_id: UUID | str,
    ) -> None:
        """Withdraw an active listing owned by seller_id."""
        seller = parse_identifier(seller_id, "seller_id")
        listing = parse_identifier(listing_id, "listing_id")

        async def work(db: AsyncSession) -> None:
            result = await db.execute(
                update(Listing)
                .where(Listing.id == listing)
                .where(Listing.seller_id == seller)
                .where(Listing.state == ListingState.ACTIVE.value)
                .values(
                    state=ListingState.RETRACTED.value,
                    closed_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ListingNotFoundError(
                    ErrorContext(user_id=str(seller), listing_id=str(listing)),
                )

        await self.store.run(work, operation="retract_listing")
