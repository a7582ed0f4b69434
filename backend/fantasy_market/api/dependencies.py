"""API Dependencies — request-scoped access to the market and the caller identity.

Invariants:
    - The TransferMarket and LedgerStore live on app.state (built by the lifespan)
    - X-User-Id carries an identity already authenticated upstream; absent or
      malformed -> 401

Design Decisions:
    - app.state over module globals: tests swap the market via dependency_overrides
"""

from uuid import UUID

from fastapi import Header, HTTPException, Request, status

from fantasy_market.infrastructure.ledger_store import LedgerStore
from fantasy_market.services.transfer_market import TransferMarket


def get_transfer_market(request: Request) -> TransferMarket:
    market = getattr(request.app.state, "market", None)
    if market is None:
        raise RuntimeError("Transfer market not initialized")
    return market


def get_ledger_store(request: Request) -> LedgerStore | None:
    return getattr(request.app.state, "ledger", None)


def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> UUID:
    """Caller identity as established by the authentication layer."""
    if not x_user_id:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED, detail="Missing user identity",
        )
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED, detail="Invalid user identity",
        )
