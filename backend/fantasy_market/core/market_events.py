"""Market Events & Boundary Protocols — what the core emits after commit.

Invariants:
    - SettlementCompleted is built only from committed values
    - Notifiers are outbound collaborators: delivery and retry are theirs, not settlement's

Design Decisions:
    - Protocol over ABC: structural subtyping, the shell supplies any object with notify()
    - Frozen dataclass: events are facts, never edited after emission
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from fantasy_market.core.domain_types import ListingId, Money, PlayerId, UserId


@dataclass(frozen=True)
class SettlementCompleted:
    """A purchase that has been committed to the ledger."""
    listing_id: ListingId
    player_id: PlayerId
    seller_id: UserId
    buyer_id: UserId
    ask_price: Money
    clearing_price: Money
    buyer_budget: Money
    seller_budget: Money
    settled_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    def as_log_extra(self) -> dict:
        return {
            "listing_id": str(self.listing_id),
            "player_id": str(self.player_id),
            "user_id": str(self.buyer_id),
            "clearing_price": self.clearing_price,
        }


class SettlementNotifier(Protocol):
    """Contract for post-commit settlement delivery — implemented by shell."""
    async def notify(self, event: SettlementCompleted) -> None: ...
