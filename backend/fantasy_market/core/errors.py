"""Error Hierarchy — typed, categorized exceptions for every market failure mode.

Invariants:
    - Every error has a code (str), kind (ErrorKind), severity (ErrorSeverity)
    - Domain errors (400-level) are final for the request; CONFLICT is safe to retry
    - to_response() produces the REST envelope
    - ListingNotFoundError never says whether the listing exists, is closed, or belongs to someone else

Design Decisions:
    - Single hierarchy with MarketError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorKind(str, Enum):
    """High-level error kinds for routing and retry decisions."""
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    PRECONDITION_FAILED = "precondition_failed"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    listing_id: str | None = None
    player_id: str | None = None
    retry_after_ms: int | None = None


class MarketError(Exception):
    """Base exception for all transfer-market errors."""

    def __init__(
        self,
        message: str,
        code: str,
        kind: ErrorKind,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.kind = kind
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def retryable(self) -> bool:
        return self.kind is ErrorKind.CONFLICT

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "kind": self.kind.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "listing_id": self.context.listing_id,
                    "player_id": self.context.player_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Not Found (404) ────────────────────────────────────────────

class ListingNotFoundError(MarketError):
    """Listing missing, closed, or not owned by the caller (deliberately indistinct)."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Transfer listing not found or inactive",
            "LISTING_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class OwnershipNotFoundError(MarketError):
    """Seller does not currently own the player."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Player not found in your team",
            "OWNERSHIP_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class BuyerNotFoundError(MarketError):
    """Buyer account does not exist."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Buyer not found",
            "BUYER_NOT_FOUND", ErrorKind.NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Invalid Input (400) ────────────────────────────────────────

class InvalidPriceError(MarketError):
    """Ask price is not a positive integer within the configured bound."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_PRICE", ErrorKind.INVALID_INPUT,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidIdentifierError(MarketError):
    """Identifier is not a well-formed UUID."""
    def __init__(self, field: str, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed identifier for '{field}'",
            "INVALID_IDENTIFIER", ErrorKind.INVALID_INPUT,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidFilterError(MarketError):
    """Market query filter out of range or inconsistent."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_FILTER", ErrorKind.INVALID_INPUT,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Precondition Failed ────────────────────────────────────────

class SelfPurchaseError(MarketError):
    """Buyer attempted to buy their own listing."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Cannot buy your own player",
            "SELF_PURCHASE", ErrorKind.PRECONDITION_FAILED,
            ErrorSeverity.ERROR, context, 400,
        )


class DuplicateListingError(MarketError):
    """Player already has an active listing."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Player is already listed for transfer",
            "DUPLICATE_LISTING", ErrorKind.PRECONDITION_FAILED,
            ErrorSeverity.ERROR, context, 409,
        )


class InsufficientBudgetError(MarketError):
    """Buyer budget is below the clearing price."""
    def __init__(
        self, required: int, available: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Insufficient budget. You need {required:,} but only have {available:,}",
            "INSUFFICIENT_BUDGET", ErrorKind.PRECONDITION_FAILED,
            ErrorSeverity.ERROR, context, 400,
        )
        self.required = required
        self.available = available


# ─── Infrastructure Errors ──────────────────────────────────────

class ConcurrencyError(MarketError):
    """Concurrent transaction conflict reported by the store; safe to retry."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorKind.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class DatabaseError(MarketError):
    """Transaction could not be started or committed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorKind.STORE_UNAVAILABLE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
