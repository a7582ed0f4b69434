"""Domain Types — identity wrappers and enum values."""

from uuid import uuid4

from fantasy_market.core.domain_types import (
    ListingId, ListingState, PlayerId, Position, UserId,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert UserId(uid) == uid
    assert PlayerId(uid) == uid
    assert ListingId(uid) == uid


def test_position_has_four_values():
    assert [p.value for p in Position] == ["GK", "DEF", "MID", "ATT"]


def test_listing_states():
    assert set(ListingState) == {
        ListingState.ACTIVE, ListingState.RETRACTED, ListingState.SOLD,
    }


def test_enums_serialize_to_string():
    assert ListingState.SOLD.value == "sold"
    assert Position("ATT") is Position.ATT
