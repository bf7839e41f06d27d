"""
DishManager Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (isolated store, recording
       broadcaster, API client).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── engine: SQLite (aiosqlite) database file in tmp_path, tables created
    ├── session_factory / db_session: Sessions bound to that engine
    ├── broadcaster: RecordingBroadcaster capturing published events
    ├── app: FastAPI app wired to the test store and broadcaster
    ├── test_client: HTTPX AsyncClient for API endpoint testing
    └── sample_dish_payload: camelCase body for POST /api/dishes
"""

import os

# Override settings for testing BEFORE any app imports
# Why: settings and the default engine are built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import AsyncGenerator, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from dishmanager.database import Base, build_engine, build_session_factory, get_db_session
from dishmanager.main import create_app
from dishmanager.models import dish  # noqa: F401  (registers the dishes table)
from dishmanager.schemas.events import DishEvent
from dishmanager.services.broadcast_base import BroadcastPublisher


class RecordingBroadcaster(BroadcastPublisher):
    """In-memory publisher: remembers every event in publish order."""

    def __init__(self) -> None:
        self.events: List[DishEvent] = []

    async def publish(self, event: DishEvent) -> None:
        self.events.append(event)

    @property
    def connected_clients(self) -> int:
        return 0

    @property
    def names(self) -> List[str]:
        return [event.event_name for event in self.events]


# ══════════════════════════════════════════════════════════════════════════
# Store Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    """
    A fresh SQLite database per test.

    A file (not :memory:) so every pooled connection sees the same tables.
    """
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'dishes.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


# ══════════════════════════════════════════════════════════════════════════
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(session_factory, broadcaster):
    """The FastAPI app with its session dependency pointed at the test store."""
    application = create_app(broadcaster=broadcaster)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    Why:     Enables testing of HTTP endpoints without running a server.
    How:     Uses ASGITransport to route requests directly to the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_dish_payload():
    return {
        "dishId": "dish-010",
        "dishName": "Tiramisu",
        "imageUrl": "https://example.com/tiramisu.jpg",
    }
