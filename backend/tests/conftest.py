"""Root conftest — shared test configuration and ledger fixtures.

Invariants:
    - Every test gets a fresh SQLite file database (separate connections per session,
      so concurrent transactions really contend)
    - LedgerStore retries fast (1ms base delay) to keep conflict tests quick
    - Seeding writes go through their own committed transactions, like squad generation would

Design Decisions:
    - SQLite file over :memory:: in-memory SQLite is one shared connection, which would
      serialize the concurrency tests instead of exercising them
"""

import os
from datetime import datetime, timezone
from uuid import UUID

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("LOG_FORMAT", "text")

from fantasy_market.core.domain_types import ListingState, Position  # noqa: E402
from fantasy_market.db.base import Base  # noqa: E402
from fantasy_market.infrastructure.ledger_store import LedgerStore  # noqa: E402
from fantasy_market.models import Listing, Ownership, Player, User  # noqa: E402
from fantasy_market.services.transfer_market import TransferMarket  # noqa: E402


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(test_engine):
    return LedgerStore(test_engine, max_attempts=3, base_delay_ms=1, max_delay_ms=5)


@pytest.fixture
def market(store):
    return TransferMarket(store)


class Ledger:
    """Seeds and inspects ledger rows outside the code under test."""

    def __init__(self, store: LedgerStore):
        self.store = store
        self._seq = 0

    async def add_user(self, budget: int = 5_000_000, email: str | None = None) -> UUID:
        self._seq += 1
        user = User(email=email or f"user{self._seq}@example.com", budget=budget)
        async with self.store.transaction() as db:
            db.add(user)
        return user.id

    async def add_player(
        self,
        name: str = "Test Player",
        team: str = "Test FC",
        position: Position = Position.MID,
        reference_price: int = 1_000_000,
        owner: UUID | None = None,
    ) -> UUID:
        player = Player(
            name=name, team=team, position=position.value,
            reference_price=reference_price,
        )
        async with self.store.transaction() as db:
            db.add(player)
            await db.flush()
            if owner is not None:
                db.add(Ownership(
                    user_id=owner, player_id=player.id,
                    acquisition_price=reference_price,
                ))
        return player.id

    async def add_listing(
        self,
        seller: UUID,
        player: UUID,
        ask_price: int = 1_000_000,
        state: ListingState = ListingState.ACTIVE,
        created_at: datetime | None = None,
    ) -> UUID:
        listing = Listing(
            seller_id=seller, player_id=player, ask_price=ask_price,
            state=state.value,
            created_at=created_at or datetime.now(timezone.utc),
        )
        async with self.store.transaction() as db:
            db.add(listing)
        return listing.id

    async def budget(self, user_id: UUID) -> int:
        async with self.store.transaction() as db:
            return await db.scalar(select(User.budget).where(User.id == user_id))

    async def owners(self, player_id: UUID) -> list[Ownership]:
        async with self.store.transaction() as db:
            result = await db.execute(
                select(Ownership).where(Ownership.player_id == player_id),
            )
            return list(result.scalars().all())

    async def listing(self, listing_id: UUID) -> Listing:
        async with self.store.transaction() as db:
            return await db.get(Listing, listing_id)

    async def player(self, player_id: UUID) -> Player:
        async with self.store.transaction() as db:
            return await db.get(Player, player_id)

    async def listings_for(self, player_id: UUID) -> list[Listing]:
        async with self.store.transaction() as db:
            result = await db.execute(
                select(Listing).where(Listing.player_id == player_id),
            )
            return list(result.scalars().all())


@pytest.fixture
def ledger(store):
    return Ledger(store)


@pytest.fixture
async def seller(ledger):
    return await ledger.add_user(budget=2_000_000, email="seller@example.com")


@pytest.fixture
async def buyer(ledger):
    return await ledger.add_user(budget=5_000_000, email="buyer@example.com")


@pytest.fixture
async def owned_player(ledger, seller):
    """Player X owned by the seller."""
    return await ledger.add_player(
        name="Xavi Hernandez", team="Barcelona", owner=seller,
    )
