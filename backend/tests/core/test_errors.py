"""Error Hierarchy — kinds, HTTP status, retryability, and response envelope."""

from fantasy_market.core.errors import (
    BuyerNotFoundError, ConcurrencyError, DatabaseError, DuplicateListingError,
    ErrorContext, ErrorKind, InvalidFilterError, ListingNotFoundError,
    MarketError, OwnershipNotFoundError, SelfPurchaseError,
)


def test_all_errors_share_base():
    for err in (
        ListingNotFoundError(), OwnershipNotFoundError(), BuyerNotFoundError(),
        SelfPurchaseError(), DuplicateListingError(),
        ConcurrencyError("x"), DatabaseError("x", "commit"),
    ):
        assert isinstance(err, MarketError)


def test_not_found_kinds_map_to_404():
    for err in (ListingNotFoundError(), OwnershipNotFoundError(), BuyerNotFoundError()):
        assert err.kind is ErrorKind.NOT_FOUND
        assert err.http_status == 404


def test_only_conflict_is_retryable():
    assert ConcurrencyError("x").retryable
    assert not DatabaseError("x", "commit").retryable
    assert not ListingNotFoundError().retryable


def test_store_unavailable_is_503():
    err = DatabaseError("down", "execute")
    assert err.kind is ErrorKind.STORE_UNAVAILABLE
    assert err.http_status == 503
    assert err.message == "Database execute failed: down"


def test_listing_not_found_message_does_not_leak_state():
    assert ListingNotFoundError().message == "Transfer listing not found or inactive"


def test_to_response_envelope():
    ctx = ErrorContext(listing_id="abc", player_id="p1")
    body = DuplicateListingError(ctx).to_response()["error"]
    assert body["code"] == "DUPLICATE_LISTING"
    assert body["kind"] == "precondition_failed"
    assert body["retryable"] is False
    assert body["context"]["listing_id"] == "abc"
    assert body["context"]["player_id"] == "p1"


def test_invalid_filter_keeps_field():
    err = InvalidFilterError("bad", "limit")
    assert err.field == "limit"
    assert err.kind is ErrorKind.INVALID_INPUT
