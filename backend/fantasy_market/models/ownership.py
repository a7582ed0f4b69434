"""Ownership ORM — exclusive binding of one player to one user.

Invariants:
    - player_id is UNIQUE: a player has at most one owner at any time
    - acquisition_price is what the owner paid (clearing price, or squad-generation value)
    - a sale deletes the seller's row and inserts the buyer's in the same transaction

Design Decisions:
    - Unique constraint instead of an application check: a racing insert fails in the database
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from fantasy_market.db.base import Base


class Ownership(Base):
    """User x Player assignment with the price it was acquired at."""
    __tablename__ = "ownerships"
    __table_args__ = (
        UniqueConstraint("player_id", name="uq_ownerships_player"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    player_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("players.id"), nullable=False,
    )
    acquisition_price: Mapped[int] = mapped_column(
        BigInteger, nullable=False,
    )
    acquired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
