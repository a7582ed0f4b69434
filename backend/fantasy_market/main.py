"""Fantasy Market API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MarketError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Ledger store opened on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan is the composition root: it reads settings once and hands plain values
      to the store and the TransferMarket; nothing below reads settings
    - Store and market kept on app.state, not in module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fantasy_market.api.error_handlers import register_error_handlers
from fantasy_market.api.routes import health, transfers
from fantasy_market.config import Settings, get_settings
from fantasy_market.infrastructure.ledger_store import create_ledger_store
from fantasy_market.infrastructure.observability import setup_logging
from fantasy_market.infrastructure.settlement_notifier import LoggingSettlementNotifier
from fantasy_market.services.transfer_market import TransferMarket

logger = logging.getLogger(__name__)


def build_transfer_market(settings: Settings) -> TransferMarket:
    """Wire store, notifier and components from settings."""
    store = create_ledger_store(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        isolation_level=settings.database_isolation_level,
        max_attempts=settings.ledger_max_attempts,
        base_delay_ms=settings.ledger_base_delay_ms,
        max_delay_ms=settings.ledger_max_delay_ms,
    )
    return TransferMarket(
        store,
        notifier=LoggingSettlementNotifier(),
        fee_rate=settings.market_fee_rate,
        max_ask_price=settings.market_max_ask_price,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    market = build_transfer_market(settings)
    app.state.market = market
    app.state.ledger = market.store
    logger.info("Fantasy Market API started")
    yield
    logger.info("Fantasy Market API shutting down")
    await market.store.dispose()


app = FastAPI(
    title="Fantasy Market API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(transfers.router)

register_error_handlers(app)
