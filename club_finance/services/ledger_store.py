"""
Ledger store — MonthlyLedger persistence on top of a DocumentStore.

Key layout:
    ledger/<TYPE>/<YYYY-MM>.json    one document per ledger type and month
    categories.json                 JSON array of category labels

Ledgers are written whole. Saving a month replaces the stored document for
that (type, month); nothing links one month to the next, so continuity of
balances across months is checked at read time (see ledger_service).
"""

import json
import logging
from collections import defaultdict

from pydantic import TypeAdapter, ValidationError

from club_finance.exceptions import InvalidLedgerFormatError
from club_finance.schemas.ledger import MONTH_PATTERN, MonthlyLedger
from club_finance.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

LEDGER_PREFIX = "ledger/"
CATEGORIES_KEY = "categories.json"

_categories_adapter = TypeAdapter(list[str])


def ledger_key(ledger_type: str, month: str) -> str:
    return f"{LEDGER_PREFIX}{ledger_type}/{month}.json"


def _split_ledger_key(key: str) -> tuple[str, str] | None:
    """Return (type, month) for a well-formed ledger key, else None."""
    if not key.startswith(LEDGER_PREFIX) or not key.endswith(".json"):
        return None
    parts = key[len(LEDGER_PREFIX):-len(".json")].split("/")
    if len(parts) != 2 or not parts[0] or not MONTH_PATTERN.match(parts[1]):
        return None
    return parts[0], parts[1]


class LedgerStore:
    """Reads and writes MonthlyLedger documents by (type, month)."""

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    async def get(self, ledger_type: str, month: str) -> MonthlyLedger:
        """
        Load one ledger.

        Raises:
            DocumentNotFoundError: If no ledger is stored for (type, month).
            InvalidLedgerFormatError: If the stored document does not decode.
            StoreError: On any other storage failure.
        """
        key = ledger_key(ledger_type, month)
        content = await self.documents.get(key)
        return self._decode(key, content)

    async def save(self, ledger_type: str, ledger: MonthlyLedger) -> None:
        """Replace the stored document for (ledger_type, ledger.month)."""
        key = ledger_key(ledger_type, ledger.month)
        await self.documents.save(key, ledger.model_dump_json(by_alias=True).encode("utf-8"))

    async def list_months(self, ledger_type: str) -> list[str]:
        """Months stored for a ledger type, ascending."""
        months = []
        for key in await self.documents.list(f"{LEDGER_PREFIX}{ledger_type}/"):
            parsed = _split_ledger_key(key)
            if parsed is not None and parsed[0] == ledger_type:
                months.append(parsed[1])
        return sorted(months)

    async def list_types(self) -> list[str]:
        """Ledger types with at least one stored month, ascending."""
        types = set()
        for key in await self.documents.list(LEDGER_PREFIX):
            parsed = _split_ledger_key(key)
            if parsed is not None:
                types.add(parsed[0])
        return sorted(types)

    async def load_all(self) -> dict[str, list[MonthlyLedger]]:
        """
        Load every stored ledger, grouped by ledger type.

        Each type's ledgers are in ascending month order. Keys under
        ledger/ that are not <TYPE>/<YYYY-MM>.json are ignored.
        """
        ledgers_by_type: dict[str, list[MonthlyLedger]] = defaultdict(list)
        for key in await self.documents.list(LEDGER_PREFIX):
            parsed = _split_ledger_key(key)
            if parsed is None:
                continue
            content = await self.documents.get(key)
            ledgers_by_type[parsed[0]].append(self._decode(key, content))

        for ledgers in ledgers_by_type.values():
            ledgers.sort(key=lambda ledger: ledger.month)
        return dict(ledgers_by_type)

    async def get_categories(self) -> list[str]:
        """
        Raises:
            DocumentNotFoundError: If no category list has been saved.
        """
        content = await self.documents.get(CATEGORIES_KEY)
        try:
            return _categories_adapter.validate_json(content)
        except ValidationError as exc:
            raise InvalidLedgerFormatError(CATEGORIES_KEY) from exc

    async def save_categories(self, categories: list[str]) -> None:
        await self.documents.save(CATEGORIES_KEY, json.dumps(categories).encode("utf-8"))

    @staticmethod
    def _decode(key: str, content: bytes) -> MonthlyLedger:
        try:
            return MonthlyLedger.model_validate_json(content)
        except ValidationError as exc:
            logger.warning("Undecodable ledger document %s: %s", key, exc)
            raise InvalidLedgerFormatError(key) from exc
