"""Settlement Pricing — clearing price computation for a purchase.

Invariants:
    - clearing_price = floor(ask_price * (1 - fee_rate)), never negative
    - The same clearing price is debited from the buyer and credited to the seller
    - fee_rate is in [0, 1)

Design Decisions:
    - Decimal arithmetic: floor(1_000_000 * 0.95) must be exactly 950_000, binary floats
      can land one unit low on the floor
    - Markdown model (buyer pays less, seller receives less): no platform account takes a cut
"""

from decimal import Decimal, ROUND_FLOOR

from fantasy_market.core.domain_types import Money


DEFAULT_FEE_RATE: Decimal = Decimal("0.05")


def normalize_fee_rate(fee_rate: Decimal | float | str) -> Decimal:
    """Coerce a configured fee rate to Decimal and check 0 <= rate < 1."""
    rate = fee_rate if isinstance(fee_rate, Decimal) else Decimal(str(fee_rate))
    if not (Decimal("0") <= rate < Decimal("1")):
        raise ValueError(f"fee rate must be in [0, 1), got {rate}")
    return rate


def clearing_price(ask_price: int, fee_rate: Decimal = DEFAULT_FEE_RATE) -> Money:
    """Amount that actually moves from buyer to seller for a listing."""
    discounted = Decimal(ask_price) * (Decimal("1") - fee_rate)
    return Money(int(discounted.to_integral_value(rounding=ROUND_FLOOR)))


def discount_applied(ask_price: int, paid_price: int) -> Money:
    return Money(ask_price - paid_price)
