"""API test fixtures — FastAPI app wired to the per-test ledger.

Invariants:
    - get_transfer_market / get_ledger_store overridden to the test store
    - Lifespan is not run: httpx ASGITransport skips it, the overrides replace it
"""

import pytest
from httpx import ASGITransport, AsyncClient

from fantasy_market.api.dependencies import get_ledger_store, get_transfer_market
from fantasy_market.main import app


@pytest.fixture
async def client(store, market):
    app.dependency_overrides[get_transfer_market] = lambda: market
    app.dependency_overrides[get_ledger_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
