"""Ledger Store — transactional access to users, players, ownerships, listings.

Invariants:
    - Every transaction() is one session and one BEGIN..COMMIT; any exception rolls back
    - No partial commits: services never call commit() themselves
    - Serialization failures, deadlocks, and SQLite lock contention map to ConcurrencyError
    - All other SQLAlchemy failures map to DatabaseError
    - run() retries ConcurrencyError only, at most max_attempts times in total

Design Decisions:
    - Store handle passed to every component (no module-level singleton): the lifespan
      owns open/close, tests build their own store around a throwaway engine
    - Engine-wide isolation level (SERIALIZABLE by default): the settlement race is
      resolved by the database, not by application locks
    - Exponential backoff with ±25% jitter between attempts: two losers of the same
      race do not collide again on the next attempt
    - expire_on_commit=False: results stay readable after the transaction closes
"""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)

from fantasy_market.core.errors import ConcurrencyError, DatabaseError, MarketError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLSTATE codes: serialization_failure, deadlock_detected
_CONFLICT_SQLSTATES = frozenset({"40001", "40P01"})
_SQLITE_LOCK_MESSAGES = ("database is locked", "database table is locked")


def _is_conflict(exc: DBAPIError) -> bool:
    """True when the driver reports a retryable concurrency failure."""
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) in _CONFLICT_SQLSTATES:
            return True
    message = str(orig).lower()
    return any(m in message for m in _SQLITE_LOCK_MESSAGES)


class LedgerStore:
    """Transaction boundary and conflict retry for every ledger operation."""

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        max_attempts: int = 3,
        base_delay_ms: int = 50,
        max_delay_ms: int = 1000,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.engine = engine
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session inside BEGIN; commit on exit, roll back on exception."""
        session = self._session_factory()
        try:
            async with session.begin():
                yield session
        except MarketError:
            raise
        except IntegrityError as e:
            logger.error(f"Ledger integrity error: {e}")
            raise DatabaseError("Integrity constraint violated", "commit")
        except (OperationalError, DBAPIError) as e:
            if _is_conflict(e):
                raise ConcurrencyError("Concurrent ledger update, retry the operation")
            logger.error(f"Ledger driver error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except SQLAlchemyError as e:
            logger.error(f"Ledger SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await session.close()

    async def run(
        self,
        work: Callable[[AsyncSession], Awaitable[T]],
        *,
        operation: str = "transaction",
    ) -> T:
        """Execute work(session) in one transaction, retrying on conflict."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                async with self.transaction() as session:
                    return await work(session)
            except ConcurrencyError as e:
                if attempt >= self.max_attempts:
                    logger.warning(
                        f"Ledger {operation} gave up after {attempt} attempts",
                        extra={"attempt": attempt, "error_code": e.code},
                    )
                    raise
                delay_ms = self._backoff_delay_ms(attempt)
                e.context.retry_after_ms = delay_ms
                logger.warning(
                    f"Ledger {operation} conflict (attempt {attempt}/"
                    f"{self.max_attempts}), retrying in {delay_ms}ms",
                    extra={"attempt": attempt, "error_code": e.code},
                )
                await asyncio.sleep(delay_ms / 1000)
        raise AssertionError("unreachable")  # loop always returns or raises

    def _backoff_delay_ms(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter, capped at max_delay_ms."""
        delay = min(self.base_delay_ms * (2 ** (attempt - 1)), self.max_delay_ms)
        jitter = delay * 0.25 * (2 * random.random() - 1)
        return max(0, int(delay + jitter))

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.transaction() as db:
                await db.execute(text("SELECT 1"))
            return True
        except MarketError as e:
            logger.error(f"Ledger health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def create_ledger_store(
    database_url: str,
    *,
    pool_size: int = 20,
    max_overflow: int = 10,
    isolation_level: str | None = "SERIALIZABLE",
    max_attempts: int = 3,
    base_delay_ms: int = 50,
    max_delay_ms: int = 1000,
) -> LedgerStore:
    """Build the engine and wrap it; pool sizing is skipped for SQLite."""
    engine_kwargs: dict = {"pool_pre_ping": True}
    if isolation_level:
        engine_kwargs["isolation_level"] = isolation_level
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_recycle=3600,
        )
    engine = create_async_engine(database_url, **engine_kwargs)
    return LedgerStore(
        engine,
        max_attempts=max_attempts,
        base_delay_ms=base_delay_ms,
        max_delay_ms=max_delay_ms,
    )
