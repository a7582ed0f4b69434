"""User ORM — account holding the transfer budget.

Invariants:
    - budget is a non-negative integer (CHECK constraint)
    - budget changes only through settlement (and squad generation, outside this service)
    - users are never deleted while listings reference them

Design Decisions:
    - BigInteger for money: budgets are in the smallest currency unit
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from fantasy_market.db.base import Base


class User(Base):
    """Market participant — buys and sells players with its budget."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("budget >= 0", name="ck_users_budget_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True,
    )
    budget: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
