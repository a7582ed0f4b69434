"""Domain Types — rich types that replace bare primitives across the market.

Invariants:
    - UserId, PlayerId, ListingId wrap UUIDs — never use bare UUID in domain logic
    - Money is an integer amount in the smallest currency unit
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as-is in String columns and serialized to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
PlayerId = NewType("PlayerId", UUID)
ListingId = NewType("ListingId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Money = NewType("Money", int)   # >= 0, smallest currency unit


# ─── Enums ───────────────────────────────────────────────────────

class Position(str, Enum):
    """Player positions on the pitch."""
    GK = "GK"
    DEF = "DEF"
    MID = "MID"
    ATT = "ATT"


class ListingState(str, Enum):
    """Listing lifecycle — ACTIVE is the only state that may transition.

    ACTIVE -> RETRACTED (seller withdrew) or ACTIVE -> SOLD (settled).
    Closed listings are kept for audit, never reopened.
    """
    ACTIVE = "active"
    RETRACTED = "retracted"
    SOLD = "sold"
