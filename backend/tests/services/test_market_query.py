"""Market Query Service — filters, ordering, pagination, and visibility.

Tests cover:
    - Only ACTIVE listings are visible (retracted and sold are hidden)
    - Newest first, id as tie-breaker, stable across pages
    - position, price range (inclusive), and case-insensitive name/team search, wildcards matched literally
    - total_count reflects filters, not the page
    - Invalid filters are InvalidInput
    - seller_listings returns only the seller's active listings
"""

from datetime import datetime, timedelta, timezone

import pytest

from fantasy_market.core.domain_types import ListingState, Position
from fantasy_market.core.errors import InvalidFilterError
from fantasy_market.schemas.market import ListingView, MarketFilters
from fantasy_market.services.market_query import MarketQueryService

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def service(store):
    return MarketQueryService(store)


@pytest.fixture
async def market_rows(ledger, seller):
    """Four active listings across positions and prices, plus one retracted and one sold."""
    specs = [
        ("Alisson Becker", "Liverpool", Position.GK, 800_000),
        ("Virgil van Dijk", "Liverpool", Position.DEF, 1_500_000),
        ("Kevin De Bruyne", "Man City", Position.MID, 2_500_000),
        ("Erling Haaland", "Man City", Position.ATT, 4_000_000),
    ]
    ids = {}
    for i, (name, team, pos, price) in enumerate(specs):
        player = await ledger.add_player(name=name, team=team, position=pos, owner=seller)
        ids[name] = await ledger.add_listing(
            seller, player, ask_price=price, created_at=T0 + timedelta(minutes=i),
        )
    for state in (ListingState.RETRACTED, ListingState.SOLD):
        player = await ledger.add_player(name=f"Closed {state.value}", owner=seller)
        await ledger.add_listing(
            seller, player, ask_price=1_000_000, state=state,
            created_at=T0 + timedelta(hours=1),
        )
    return ids


async def test_only_active_listings_visible(service, market_rows):
    page = await service.query()
    assert page.total_count == 4
    assert all(v.state is ListingState.ACTIVE for v in page.listings)
    assert not any(v.player.name.startswith("Closed") for v in page.listings)


async def test_newest_first(service, market_rows):
    page = await service.query()
    assert [v.player.name for v in page.listings] == [
        "Erling Haaland", "Kevin De Bruyne", "Virgil van Dijk", "Alisson Becker",
    ]


async def test_filter_by_position(service, market_rows):
    page = await service.query(MarketFilters(position=Position.DEF))
    assert page.total_count == 1
    assert page.listings[0].player.position is Position.DEF


async def test_price_bounds_are_inclusive(service, market_rows):
    page = await service.query({"min_price": 1_500_000, "max_price": 2_500_000})
    assert page.total_count == 2
    assert {v.ask_price for v in page.listings} == {1_500_000, 2_500_000}


async def test_search_matches_name_case_insensitive(service, market_rows):
    page = await service.query({"search": "haALand"})
    assert [v.player.name for v in page.listings] == ["Erling Haaland"]


async def test_search_matches_team(service, market_rows):
    page = await service.query({"search": "liverpool"})
    assert page.total_count == 2


async def test_search_wildcards_match_literally(service, market_rows):
    assert (await service.query({"search": "_"})).total_count == 0
    assert (await service.query({"search": "%"})).total_count == 0


async def test_search_with_literal_underscore(service, ledger, seller):
    player = await ledger.add_player(name="Team_B Keeper", team="Reserves", owner=seller)
    await ledger.add_listing(seller, player)
    other = await ledger.add_player(name="TeamXB Striker", team="Reserves", owner=seller)
    await ledger.add_listing(seller, other)

    page = await service.query({"search": "team_b"})
    assert [v.player.name for v in page.listings] == ["Team_B Keeper"]


async def test_padded_search_is_trimmed_before_length_check(service, market_rows):
    page = await service.query({"search": " " * 120 + "haaland" + " " * 120})
    assert page.total_count == 1


async def test_blank_search_is_ignored(service, market_rows):
    page = await service.query({"search": "   "})
    assert page.total_count == 4


async def test_pagination(service, market_rows):
    first = await service.query({"page": 1, "limit": 3})
    second = await service.query({"page": 2, "limit": 3})

    assert first.total_count == second.total_count == 4
    assert len(first.listings) == 3
    assert len(second.listings) == 1
    assert first.total_pages == 2
    seen = {v.id for v in first.listings} | {v.id for v in second.listings}
    assert len(seen) == 4


async def test_ties_broken_by_id_descending(service, ledger, seller):
    ids = []
    for i in range(3):
        player = await ledger.add_player(name=f"Twin {i}", owner=seller)
        ids.append(await ledger.add_listing(seller, player, created_at=T0))

    page = await service.query()
    assert [v.id for v in page.listings] == sorted(ids, reverse=True)


async def test_page_beyond_end_is_empty(service, market_rows):
    page = await service.query({"page": 5, "limit": 20})
    assert page.listings == []
    assert page.total_count == 4


@pytest.mark.parametrize("filters", [
    {"page": 0},
    {"limit": 0},
    {"limit": 101},
    {"min_price": -1},
    {"min_price": 10, "max_price": 5},
    {"position": "CF"},
    {"search": "x" * 101},
])
async def test_invalid_filters_rejected(service, filters):
    with pytest.raises(InvalidFilterError):
        await service.query(filters)


async def test_listing_view_includes_seller(service, market_rows, seller):
    page = await service.query({"limit": 1})
    assert page.listings[0].seller.id == seller
    assert page.listings[0].seller.email == "seller@example.com"


async def test_seller_listings(service, ledger, seller, buyer, market_rows):
    own_player = await ledger.add_player(name="Buyer Own", owner=buyer)
    await ledger.add_listing(buyer, own_player)

    mine = await service.seller_listings(seller)
    theirs = await service.seller_listings(buyer)

    assert len(mine) == 4
    assert [v.player.name for v in theirs] == ["Buyer Own"]


def test_seller_listings_annotation_resolves():
    # The class defines a method named after a builtin; annotations must still evaluate.
    assert MarketQueryService.seller_listings.__annotations__["return"] == list[ListingView]
