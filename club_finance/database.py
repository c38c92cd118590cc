"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

The database only backs the key-addressed document store (see
services/document_store.py); ledger semantics live entirely in the
service layer.

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits
  on success and rolls back on any exception, so a request that fails
  half-way through a multi-month import writes nothing.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from club_finance.config import settings


# echo=True in debug mode logs all SQL statements.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)

# expire_on_commit=False prevents lazy-load errors after commit in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
