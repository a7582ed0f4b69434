"""ORM Models — SQLAlchemy declarative models for the ledger entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - users, players, ownerships, listings are the whole ledger

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from fantasy_market.models.user import User  # noqa: F401
from fantasy_market.models.player import Player  # noqa: F401
from fantasy_market.models.ownership import Ownership  # noqa: F401
from fantasy_market.models.listing import Listing  # noqa: F401
