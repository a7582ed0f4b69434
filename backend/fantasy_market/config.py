"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - market_fee_rate is in [0, 1)

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Services never call get_settings(); the lifespan passes values in explicitly
"""

from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from fantasy_market.core.enforce_market import MAX_ASK_PRICE
from fantasy_market.core.pricing import DEFAULT_FEE_RATE, normalize_fee_rate


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://market:market@db:5432/market"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_isolation_level: str = "SERIALIZABLE"

    # Ledger transactions
    ledger_max_attempts: int = 3
    ledger_base_delay_ms: int = 50
    ledger_max_delay_ms: int = 1000

    # Market rules
    market_fee_rate: Decimal = DEFAULT_FEE_RATE
    market_max_ask_price: int = MAX_ASK_PRICE

    @field_validator("market_fee_rate")
    @classmethod
    def check_fee_rate(cls, v: Decimal) -> Decimal:
        return normalize_fee_rate(v)

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
