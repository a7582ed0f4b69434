"""Player ORM — a tradeable footballer with a drifting reference price.

Invariants:
    - position is one of Position (GK/DEF/MID/ATT)
    - reference_price >= 0; updated to the clearing price of every completed sale
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from fantasy_market.db.base import Base


class Player(Base):
    """Player record — created by squad generation, repriced by settlement."""
    __tablename__ = "players"
    __table_args__ = (
        CheckConstraint(
            "reference_price >= 0", name="ck_players_reference_price_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    team: Mapped[str] = mapped_column(String(120), nullable=False)
    position: Mapped[str] = mapped_column(String(3), nullable=False)
    reference_price: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
