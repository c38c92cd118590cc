"""
Document store — a key-addressed byte store backed by the documents table.

The ledger engine depends only on the DocumentStore protocol:

    get(key)            -> bytes, or DocumentNotFoundError
    save(key, content)  -> whole-document replace
    list(prefix)        -> keys under the prefix, sorted

SqlDocumentStore implements it on top of the request's AsyncSession.
Anything else with the same three coroutines (an in-memory dict in tests,
say) can be passed to the ledger and report services instead.

Error contract:
  A missing key raises DocumentNotFoundError, which callers may treat as
  "no data yet". Every other database failure is logged and re-raised as
  StoreError; callers never retry, the request simply fails.

There is no locking. Two requests writing the same key race, and the last
commit wins.
"""

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from club_finance.exceptions import DocumentNotFoundError, StoreError
from club_finance.models.document import StoredDocument

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    async def get(self, key: str) -> bytes: ...

    async def save(self, key: str, content: bytes) -> None: ...

    async def list(self, prefix: str) -> list[str]: ...


class SqlDocumentStore:
    """DocumentStore over a SQLAlchemy async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, key: str) -> bytes:
        try:
            document = await self.db.get(StoredDocument, key)
        except SQLAlchemyError as exc:
            logger.error("Failed to read document %s: %s", key, exc)
            raise StoreError(str(exc)) from exc

        if document is None:
            raise DocumentNotFoundError(key)
        return document.content

    async def save(self, key: str, content: bytes) -> None:
        try:
            document = await self.db.get(StoredDocument, key)
            if document is None:
                self.db.add(StoredDocument(key=key, content=content))
            else:
                document.content = content
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("Failed to save document %s: %s", key, exc)
            raise StoreError(str(exc)) from exc

    async def list(self, prefix: str) -> list[str]:
        try:
            result = await self.db.execute(
                select(StoredDocument.key)
                .where(StoredDocument.key.startswith(prefix, autoescape=True))
                .order_by(StoredDocument.key.asc())
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to list documents under %s: %s", prefix, exc)
            raise StoreError(str(exc)) from exc
        return list(result.scalars().all())
