"""Market Precondition Enforcement — pure checks run before any ledger mutation.

Invariants:
    - Every function is PURE: raises a MarketError subclass or returns a normalized value
    - No function touches the store; the shell loads state, calls these, then writes
    - MAX_ASK_PRICE (1 billion) is the default upper bound for listing prices

Design Decisions:
    - Raise instead of returning error dicts: services run inside a transaction and
      an exception is what rolls it back
    - bool rejected as a price: True is an int in Python but never a valid amount
"""

from uuid import UUID

from fantasy_market.core.domain_types import Money
from fantasy_market.core.errors import (
    ErrorContext,
    InsufficientBudgetError,
    InvalidIdentifierError,
    InvalidPriceError,
    SelfPurchaseError,
)


MAX_ASK_PRICE: int = 1_000_000_000


def parse_identifier(value: UUID | str, field: str) -> UUID:
    """Accept a UUID or its string form; anything else is InvalidInput."""
    if isinstance(value, UUID):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifierError(field)
    try:
        return UUID(value.strip())
    except ValueError:
        raise InvalidIdentifierError(field)


def validate_ask_price(ask_price: object, max_ask_price: int = MAX_ASK_PRICE) -> Money:
    """Ask price must be an integer in [1, max_ask_price]."""
    if isinstance(ask_price, bool) or not isinstance(ask_price, int):
        raise InvalidPriceError("Price must be an integer amount")
    if ask_price <= 0:
        raise InvalidPriceError("Price must be greater than zero")
    if ask_price > max_ask_price:
        raise InvalidPriceError(f"Price cannot exceed {max_ask_price:,}")
    return Money(ask_price)


def check_not_self_purchase(
    seller_id: UUID, buyer_id: UUID, context: ErrorContext | None = None,
) -> None:
    if seller_id == buyer_id:
        raise SelfPurchaseError(context)


def check_budget(
    budget: int, required: int, context: ErrorContext | None = None,
) -> None:
    """Buyer must hold at least the clearing price."""
    if budget < required:
        raise InsufficientBudgetError(required, budget, context)
