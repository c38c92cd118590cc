"""
FastAPI dependencies for the ledger and report routers.

Everything the services need from the outside world is injected here
rather than imported as a global:

  get_document_store  (AsyncSession -> SqlDocumentStore)
  get_id_factory      transaction id generator for imports
  get_now             the current time, used to resolve report periods

Tests override these with app.dependency_overrides to get a fixed clock
or deterministic transaction ids.
"""

from datetime import datetime, timezone

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from club_finance.database import get_db
from club_finance.services.document_store import DocumentStore, SqlDocumentStore
from club_finance.services.reconciler import IdFactory, new_transaction_id


async def get_document_store(
    db: AsyncSession = Depends(get_db),
) -> DocumentStore:
    """Document store bound to the request's database session."""
    return SqlDocumentStore(db)


def get_id_factory() -> IdFactory:
    return new_transaction_id


def get_now() -> datetime:
    return datetime.now(timezone.utc)
