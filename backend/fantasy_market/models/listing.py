"""Listing ORM — a seller's fixed-price offer, kept forever as audit trail.

Invariants:
    - state is one of ListingState; only ACTIVE rows may change state
    - at most one ACTIVE listing per player (partial unique index)
    - ask_price > 0 (CHECK constraint)
    - rows are never deleted; closed_at set when the listing leaves ACTIVE
    - buyer_id and sold_price set only when state is SOLD

Design Decisions:
    - Tagged state over a boolean flag: retraction and sale stay distinguishable in history
    - Partial unique index on player_id WHERE state = 'active': two racing createListing
      calls cannot both commit
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from fantasy_market.core.domain_types import ListingState
from fantasy_market.db.base import Base


_ACTIVE_ONLY = text("state = 'active'")


class Listing(Base):
    """Transfer listing — created ACTIVE, closed as RETRACTED or SOLD."""
    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("ask_price > 0", name="ck_listings_ask_price_positive"),
        Index(
            "uq_listings_active_player", "player_id", unique=True,
            postgresql_where=_ACTIVE_ONLY, sqlite_where=_ACTIVE_ONLY,
        ),
        Index("ix_listings_state_created", "state", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    seller_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    player_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("players.id"), nullable=False,
    )
    ask_price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    state: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ListingState.ACTIVE.value,
    )
    buyer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True,
    )
    sold_price: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    player: Mapped["Player"] = relationship("Player", lazy="selectin")
    seller: Mapped["User"] = relationship(
        "User", foreign_keys=[seller_id], lazy="selectin",
    )

    @property
    def active(self) -> bool:
        return self.state == ListingState.ACTIVE.value
