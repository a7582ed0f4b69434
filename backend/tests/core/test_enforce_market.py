"""Market Preconditions — pure checks that gate every ledger write.

Tests:
    - ask price must be a positive integer within the bound
    - identifiers must parse as UUIDs
    - self-purchase and insufficient budget raise typed errors
"""

from uuid import uuid4

import pytest

from fantasy_market.core.enforce_market import (
    MAX_ASK_PRICE, check_budget, check_not_self_purchase,
    parse_identifier, validate_ask_price,
)
from fantasy_market.core.errors import (
    ErrorKind, InsufficientBudgetError, InvalidIdentifierError,
    InvalidPriceError, SelfPurchaseError,
)


def test_valid_price_passes_through():
    assert validate_ask_price(1_000_000) == 1_000_000
    assert validate_ask_price(MAX_ASK_PRICE) == MAX_ASK_PRICE


@pytest.mark.parametrize("price", [0, -5, -1_000_000])
def test_non_positive_price_is_invalid_input(price):
    with pytest.raises(InvalidPriceError) as exc_info:
        validate_ask_price(price)
    assert exc_info.value.kind is ErrorKind.INVALID_INPUT


@pytest.mark.parametrize("price", [1.5, "100", None, True])
def test_non_integer_price_is_invalid(price):
    with pytest.raises(InvalidPriceError):
        validate_ask_price(price)


def test_price_above_bound_is_invalid():
    with pytest.raises(InvalidPriceError):
        validate_ask_price(MAX_ASK_PRICE + 1)


def test_custom_bound():
    with pytest.raises(InvalidPriceError):
        validate_ask_price(501, max_ask_price=500)


def test_parse_identifier_accepts_uuid_and_string():
    uid = uuid4()
    assert parse_identifier(uid, "x") is uid
    assert parse_identifier(str(uid), "x") == uid


@pytest.mark.parametrize("value", ["not-a-uuid", "", 42, None])
def test_parse_identifier_rejects_malformed(value):
    with pytest.raises(InvalidIdentifierError) as exc_info:
        parse_identifier(value, "listing_id")
    assert exc_info.value.field == "listing_id"


def test_self_purchase_rejected():
    uid = uuid4()
    with pytest.raises(SelfPurchaseError) as exc_info:
        check_not_self_purchase(uid, uid)
    assert exc_info.value.kind is ErrorKind.PRECONDITION_FAILED


def test_distinct_users_may_trade():
    check_not_self_purchase(uuid4(), uuid4())


def test_budget_exactly_covering_price_passes():
    check_budget(950_000, 950_000)


def test_budget_below_price_raises_with_amounts():
    with pytest.raises(InsufficientBudgetError) as exc_info:
        check_budget(100, 950_000)
    assert exc_info.value.required == 950_000
    assert exc_info.value.available == 100
    assert "950,000" in exc_info.value.message
