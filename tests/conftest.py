"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from trackrecord.api.main import app, get_store
from trackrecord.core.entities.deposit import CashMove
from trackrecord.core.entities.trade import Trade
from trackrecord.infrastructure.persistence.fallback_store import FallbackRecordStore
from trackrecord.infrastructure.persistence.local_store import LocalJsonStore


def make_trade(amount, outcome, date="2024-01-01", id=None, asset="EURUSD", side="long"):
    return Trade(
        id=id or f"t-{date}-{outcome}-{amount}",
        date=date,
        asset=asset,
        side=side,
        outcome=outcome,
        amount=amount
    )


def make_deposit(amount, date="2024-01-01", id=None):
    return CashMove(id=id or f"d-{date}-{amount}", date=date, amount=amount)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def local_store():
    return LocalJsonStore()


@pytest.fixture
async def client(local_store):
    """Async HTTP client for testing FastAPI endpoints against an in-memory store."""
    app.dependency_overrides[get_store] = lambda: FallbackRecordStore(local_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
