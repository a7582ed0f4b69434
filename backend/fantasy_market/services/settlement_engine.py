"""Settlement Engine — executes a purchase as one all-or-nothing ledger transaction.

Invariants:
    - Checks run first (listing active, not self-purchase, buyer exists, budget covers
      the clearing price); no row is written until all of them pass
    - The listing is closed with UPDATE ... WHERE state = 'active': of two racing buyers
      exactly one sees rowcount 1, the other gets ListingNotFoundError
    - The same clearing price leaves the buyer and reaches the seller: money is conserved
    - Seller ownership deleted and buyer ownership inserted in the same transaction
    - Player.reference_price becomes the clearing price
    - The notifier runs only after commit and cannot undo or fail a settlement

Design Decisions:
    - Listing and both accounts locked FOR UPDATE, accounts in id order: opposite-direction
      trades between the same two users queue instead of deadlocking
    - Buyer debit guarded by budget >= price in the UPDATE itself: two concurrent purchases
      by the same buyer cannot overdraw even if both passed the early budget check
    - Any failure after the first write simply raises; the store's transaction rolls back,
      there are no compensating writes
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from fantasy_market.core.domain_types import ListingId, ListingState, Money, PlayerId, UserId
from fantasy_market.core.enforce_market import (
    check_budget, check_not_self_purchase, parse_identifier,
)
from fantasy_market.core.errors import (
    BuyerNotFoundError, ErrorContext, InsufficientBudgetError,
    ListingNotFoundError, OwnershipNotFoundError,
)
from fantasy_market.core.market_events import SettlementCompleted, SettlementNotifier
from fantasy_market.core.pricing import (
    DEFAULT_FEE_RATE, clearing_price, discount_applied, normalize_fee_rate,
)
from fantasy_market.infrastructure.ledger_store import LedgerStore
from fantasy_market.models.listing import Listing
from fantasy_market.models.ownership import Ownership
from fantasy_market.models.user import User
from fantasy_market.schemas.market import PlayerView, SettlementResult

logger = logging.getLogger(__name__)


@dataclass
class _Settled:
    """Transaction output: the API result plus the event to publish after commit."""
    result: SettlementResult
    event: SettlementCompleted


class SettlementEngine:
    """Runs buy(buyer, listing) against the ledger."""

    def __init__(
        self,
        store: LedgerStore,
        notifier: SettlementNotifier | None = None,
        fee_rate: Decimal = DEFAULT_FEE_RATE,
    ):
        self.store = store
        self.notifier = notifier
        self.fee_rate = normalize_fee_rate(fee_rate)

    async def buy(
        self, buyer_id: UUID | str, listing_id: UUID | str,
    ) -> SettlementResult:
        """Buy a listed player. Retrying after a conflict is safe: a sold listing is NotFound."""
        buyer = parse_identifier(buyer_id, "buyer_id")
        listing = parse_identifier(listing_id, "listing_id")

        async def work(db: AsyncSession) -> _Settled:
            return await self._settle(db, buyer, listing)

        settled = await self.store.run(work, operation="buy")
        logger.info(
            f"Settlement committed for listing {listing}",
            extra=settled.event.as_log_extra(),
        )
        await self._publish(settled.event)
        return settled.result

    async def _settle(
        self, db: AsyncSession, buyer_id: UUID, listing_id: UUID,
    ) -> _Settled:
        ctx = ErrorContext(user_id=str(buyer_id), listing_id=str(listing_id))

        # 1. listing must exist and be active
        listing = await self._load_active_listing(db, listing_id, ctx)
        seller_id = listing.seller_id
        player_id = listing.player_id
        ctx.player_id = str(player_id)

        # 2. no buying from yourself
        check_not_self_purchase(seller_id, buyer_id, ctx)

        # 3. buyer account (locked together with the seller's)
        accounts = await self._lock_accounts(db, buyer_id, seller_id)
        buyer = accounts.get(buyer_id)
        if buyer is None:
            raise BuyerNotFoundError(ctx)

        # 4-5. price and budget
        price = clearing_price(listing.ask_price, self.fee_rate)
        check_budget(buyer.budget, price, ctx)

        # 9. close the listing first: only the winner of a race gets past this
        await self._close_listing(db, listing_id, buyer_id, price, ctx)

        # 6. ownership moves
        await self._transfer_ownership(db, seller_id, buyer_id, player_id, price, ctx)

        # 7. funds move
        buyer_budget = await self._debit(db, buyer_id, price, ctx)
        seller_budget = await self._credit(db, seller_id, price)

        # 8. market remembers the clearing price
        player = listing.player
        player.reference_price = price
        await db.flush()

        result = SettlementResult(
            listing_id=listing_id,
            player=PlayerView.model_validate(player),
            paid_price=price,
            original_price=listing.ask_price,
            discount_applied=discount_applied(listing.ask_price, price),
            new_buyer_budget=buyer_budget,
        )
        event = SettlementCompleted(
            listing_id=ListingId(listing_id),
            player_id=PlayerId(player_id),
            seller_id=UserId(seller_id),
            buyer_id=UserId(buyer_id),
            ask_price=Money(listing.ask_price),
            clearing_price=price,
            buyer_budget=Money(buyer_budget),
            seller_budget=Money(seller_budget),
        )
        return _Settled(result=result, event=event)

    async def _load_active_listing(
        self, db: AsyncSession, listing_id: UUID, ctx: ErrorContext,
    ) -> Listing:
        result = await db.execute(
            select(Listing)
            .where(Listing.id == listing_id)
            .with_for_update(of=Listing)
        )
        listing = result.scalar_one_or_none()
        if listing is None or not listing.active:
            raise ListingNotFoundError(ctx)
        return listing

    async def _lock_accounts(
        self, db: AsyncSession, buyer_id: UUID, seller_id: UUID,
    ) -> dict[UUID, User]:
        """Lock buyer and seller rows in primary-key order."""
        result = await db.execute(
            select(User)
            .where(User.id.in_([buyer_id, seller_id]))
            .order_by(User.id)
            .with_for_update()
        )
        return {u.id: u for u in result.scalars().all()}

    async def _close_listing(
        self,
        db: AsyncSession,
        listing_id: UUID,
        buyer_id: UUID,
        price: int,
        ctx: ErrorContext,
    ) -> None:
        result = await db.execute(
            update(Listing)
            .where(Listing.id == listing_id)
            .where(Listing.state == ListingState.ACTIVE.value)
            .values(
                state=ListingState.SOLD.value,
                buyer_id=buyer_id,
                sold_price=price,
                closed_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ListingNotFoundError(ctx)

    async def _transfer_ownership(
        self,
        db: AsyncSession,
        seller_id: UUID,
        buyer_id: UUID,
        player_id: UUID,
        price: int,
        ctx: ErrorContext,
    ) -> None:
        result = await db.execute(
            delete(Ownership)
            .where(Ownership.user_id == seller_id)
            .where(Ownership.player_id == player_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise OwnershipNotFoundError(ctx)
        db.add(Ownership(
            user_id=buyer_id, player_id=player_id, acquisition_price=price,
        ))
        await db.flush()

    async def _debit(
        self, db: AsyncSession, buyer_id: UUID, price: int, ctx: ErrorContext,
    ) -> int:
        result = await db.execute(
            update(User)
            .where(User.id == buyer_id)
            .where(User.budget >= price)
            .values(budget=User.budget - price)
            .returning(User.budget)
            .execution_options(synchronize_session=False)
        )
        new_budget = result.scalar_one_or_none()
        if new_budget is None:
            current = await db.scalar(select(User.budget).where(User.id == buyer_id))
            raise InsufficientBudgetError(price, current or 0, ctx)
        return new_budget

    async def _credit(self, db: AsyncSession, seller_id: UUID, price: int) -> int:
        result = await db.execute(
            update(User)
            .where(User.id == seller_id)
            .values(budget=User.budget + price)
            .returning(User.budget)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one()

    async def _publish(self, event: SettlementCompleted) -> None:
        """Hand the committed settlement to the notifier; failures are logged only."""
        if self.notifier is None:
            return
        try:
            await self.notifier.notify(event)
        except Exception as e:
            logger.error(
                f"Settlement notifier failed: {e}",
                extra=event.as_log_extra(),
                exc_info=True,
            )
