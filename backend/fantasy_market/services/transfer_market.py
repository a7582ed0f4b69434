"""Transfer Market — the single entry point the HTTP layer (or any caller) talks to.

Invariants:
    - Every component shares the same LedgerStore handle
    - Caller identity is already authenticated; ids are taken at face value

Design Decisions:
    - Facade over three components: routes depend on one object, tests can still
      drive each component directly
"""

from decimal import Decimal
from uuid import UUID

from fantasy_market.core.enforce_market import MAX_ASK_PRICE
from fantasy_market.core.market_events import SettlementNotifier
from fantasy_market.core.pricing import DEFAULT_FEE_RATE
from fantasy_market.infrastructure.ledger_store import LedgerStore
from fantasy_market.schemas.market import (
    ListingView, MarketFilters, MarketPage, SettlementResult,
)
from fantasy_market.services.listing_manager import ListingManager
from fantasy_market.services.market_query import MarketQueryService
from fantasy_market.services.settlement_engine import SettlementEngine


class TransferMarket:
    """create_listing / retract_listing / buy / query_market / seller_listings."""

    def __init__(
        self,
        store: LedgerStore,
        *,
        notifier: SettlementNotifier | None = None,
        fee_rate: Decimal = DEFAULT_FEE_RATE,
        max_ask_price: int = MAX_ASK_PRICE,
    ):
        self.store = store
        self.listings = ListingManager(store, max_ask_price=max_ask_price)
        self.settlement = SettlementEngine(store, notifier=notifier, fee_rate=fee_rate)
        self.market = MarketQueryService(store)

    async def create_listing(
        self, seller_id: UUID | str, player_id: UUID | str, ask_price: int,
    ) -> ListingView:
        return await self.listings.create_listing(seller_id, player_id, ask_price)

    async def retract_listing(
        self, seller_id: UUID | str, listing_id: UUID | str,
    ) -> None:
        await self.listings.retract_listing(seller_id, listing_id)

    async def buy(
        self, buyer_id: UUID | str, listing_id: UUID | str,
    ) -> SettlementResult:
        return await self.settlement.buy(buyer_id, listing_id)

    async def query_market(
        self, filters: MarketFilters | dict | None = None,
    ) -> MarketPage:
        return await self.market.query(filters)

    async def seller_listings(self, seller_id: UUID | str) -> list[ListingView]:
        return await self.market.seller_listings(seller_id)
