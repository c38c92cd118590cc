"""
StoredDocument model — one opaque document per storage key.

The ledger engine only needs a key-addressed byte store: get a document,
replace a document, list the keys under a prefix. This table is that store.

Key layout (owned by services/ledger_store.py):
  - ledger/<TYPE>/<YYYY-MM>.json   one MonthlyLedger per type and month
  - categories.json                the category list

Documents are always written whole. There is no partial update and no
version history: a save replaces the previous content for the key.
"""

from datetime import datetime, timezone

from sqlalchemy import String, LargeBinary, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from club_finance.database import Base


class StoredDocument(Base):
    __tablename__ = "documents"

    # Slash-separated storage key, e.g. "ledger/BANK/2024-06.json"
    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )

    # Raw document bytes (UTF-8 JSON for everything the service writes)
    content: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
