"""
Test fixtures for the Club Finance test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - store: SqlDocumentStore bound to the test session
  - memory_store: dict-backed DocumentStore for pure service tests
  - client: Async HTTP test client with the test database injected
  - fixed ids and a fixed clock for deterministic responses

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database — no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test session,
    so the application code works exactly as it does in production.
"""

import itertools
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from club_finance.database import Base, get_db
from club_finance.dependencies import get_id_factory, get_now
from club_finance.exceptions import DocumentNotFoundError
from club_finance.main import app
from club_finance.services.document_store import SqlDocumentStore


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"

# "Now" for every HTTP test: 15 March 2025, inside FY 2025
FIXED_NOW = datetime(2025, 3, 15, 10, 30, tzinfo=timezone.utc)


class MemoryDocumentStore:
    """DocumentStore kept in a plain dict."""

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = dict(files or {})
        self.saved: list[str] = []

    async def get(self, key: str) -> bytes:
        if key not in self.files:
            raise DocumentNotFoundError(key)
        return self.files[key]

    async def save(self, key: str, content: bytes) -> None:
        self.files[key] = content
        self.saved.append(key)

    async def list(self, prefix: str) -> list[str]:
        return sorted(key for key in self.files if key.startswith(prefix))


def sequential_ids(prefix: str = "txn"):
    """Id factory returning txn-1, txn-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


@pytest.fixture
def memory_store():
    return MemoryDocumentStore()


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def store(db_session):
    return SqlDocumentStore(db_session)


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    Overrides get_db so all requests hit the in-memory test database, and
    pins the clock and transaction ids so responses are deterministic.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    id_factory = sequential_ids()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    app.dependency_overrides[get_id_factory] = lambda: id_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
