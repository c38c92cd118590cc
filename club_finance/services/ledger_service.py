"""
Ledger service — import, read and bulk-write operations on monthly ledgers.

This module orchestrates the import pipeline and the ledger read/write
endpoints. Every function takes the DocumentStore it should use as its
first argument; nothing here holds process-wide state.

Import pipeline:
  1. parse_rows()          raw CSV text -> rows in file order
  2. reconcile()           opening balance + running balances + ids
  3. partition_by_month()  one MonthlyLedger per calendar month
  4. save each month       whole-document replace, ascending month order

All validation and all computation happen before the first write, so an
invalid payload or a failing id generator never leaves partial data behind.
A store failure part-way through the writes is surfaced immediately; the
months already written are not rolled back by this layer.

Reads:
  Ledgers are stored per month with no link between months. When a month
  has no document, get_ledger() looks back up to LEDGER_LOOKBACK_MONTHS for
  the nearest earlier month and carries its closing balance forward.
"""

import logging
import re
from decimal import Decimal

from club_finance.config import settings
from club_finance.currency import ZERO
from club_finance.exceptions import DocumentNotFoundError, LedgerValidationError
from club_finance.schemas.ledger import MONTH_PATTERN, BankImportResponse, MonthlyLedger
from club_finance.services.categorizer import DEFAULT_CATEGORIES
from club_finance.services.csv_ingestor import parse_rows
from club_finance.services.document_store import DocumentStore
from club_finance.services.ledger_store import LedgerStore
from club_finance.services.partitioner import ledger_pk, partition_by_month
from club_finance.services.reconciler import IdFactory, new_transaction_id, reconcile

logger = logging.getLogger(__name__)

# Ledger types become one segment of a storage key, so no "/" or dots.
LEDGER_TYPE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def require_ledger_type(ledger_type: str | None) -> str:
    """Return the trimmed ledger type, or raise if it is missing or not key-safe."""
    value = (ledger_type or "").strip()
    if not value:
        raise LedgerValidationError("Type is required")
    if not LEDGER_TYPE_PATTERN.match(value):
        raise LedgerValidationError("Type may only contain letters, digits, '-' and '_'")
    return value


def require_month(month: str | None) -> str:
    """Return a YYYY-MM month string, or raise if it is missing or malformed."""
    value = (month or "").strip()
    if not value:
        raise LedgerValidationError("Month is required")
    if not MONTH_PATTERN.match(value):
        raise LedgerValidationError("Month must be YYYY-MM")
    return value


def previous_month(month: str) -> str:
    year, month_number = (int(part) for part in month.split("-"))
    if month_number == 1:
        return f"{year - 1}-12"
    return f"{year}-{month_number - 1:02d}"


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

async def import_bank_statement(
    store: DocumentStore,
    csv_text: str,
    current_balance: Decimal | None,
    ledger_type: str | None = None,
    id_factory: IdFactory = new_transaction_id,
) -> BankImportResponse:
    """
    Import a bank statement export into monthly ledgers.

    Args:
        store: Document store to write the ledgers to.
        csv_text: The raw export (tab or comma separated).
        current_balance: Account balance after the last row of the export.
        ledger_type: Ledger to import into; defaults to DEFAULT_LEDGER_TYPE.
                     Normalized to upper case.
        id_factory: Transaction id generator.

    Returns:
        Summary of the import: affected months, row count, boundary balances.

    Raises:
        LedgerValidationError: If the type is not key-safe, or the balance or
            CSV content is missing.
        ParseError: If the CSV is structurally unreadable.
        EmptyImportError: If no usable rows remain after filtering.
        StoreError: If a write fails.
    """
    ledger_type = require_ledger_type(
        (ledger_type or "").strip() or settings.DEFAULT_LEDGER_TYPE
    ).upper()

    if current_balance is None:
        raise LedgerValidationError("Current balance is required")
    if not csv_text or not csv_text.strip():
        raise LedgerValidationError("CSV content is required")

    rows = parse_rows(csv_text)
    reconciliation = reconcile(rows, current_balance, ledger_type, id_factory)
    ledgers = partition_by_month(reconciliation.rows, ledger_type)

    ledger_store = LedgerStore(store)
    for ledger in ledgers:
        await ledger_store.save(ledger_type, ledger)

    months = [ledger.month for ledger in ledgers]
    logger.info(
        "Imported %d transactions into %s across %d month(s) (%s)",
        len(rows), ledger_type, len(months), ", ".join(months),
    )

    return BankImportResponse(
        type=ledger_type,
        months=months,
        count=len(months),
        transactions=len(rows),
        opening_balance=reconciliation.opening_balance,
        closing_balance=reconciliation.closing_balance,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def find_previous_closing_balance(
    ledger_store: LedgerStore,
    ledger_type: str,
    month: str,
    lookback_months: int,
) -> Decimal | None:
    """
    Closing balance of the nearest stored month before `month`.

    Searches at most `lookback_months` months back. Missing months are
    skipped; any other store error, or an undecodable ledger, propagates.

    Returns:
        The closing balance, or None if nothing was found in the window.
    """
    candidate = month
    for _ in range(lookback_months):
        candidate = previous_month(candidate)
        try:
            ledger = await ledger_store.get(ledger_type, candidate)
        except DocumentNotFoundError:
            continue
        return ledger.closing_balance
    return None


async def get_ledger(
    store: DocumentStore,
    ledger_type: str | None,
    month: str | None,
    lookback_months: int | None = None,
) -> MonthlyLedger:
    """
    Get the ledger for one type and month.

    When the month has no stored ledger, an empty ledger is returned whose
    opening and closing balances are the closing balance of the nearest
    earlier stored month (0.00 if none within the lookback window).

    Raises:
        LedgerValidationError: If type or month is missing or malformed.
        InvalidLedgerFormatError: If a stored ledger does not decode.
        StoreError: On any storage failure other than a missing document.
    """
    ledger_type = require_ledger_type(ledger_type)
    month = require_month(month)
    if lookback_months is None:
        lookback_months = settings.LEDGER_LOOKBACK_MONTHS

    ledger_store = LedgerStore(store)
    try:
        return await ledger_store.get(ledger_type, month)
    except DocumentNotFoundError:
        logger.debug("No %s ledger for %s; looking back", ledger_type, month)

    balance = await find_previous_closing_balance(ledger_store, ledger_type, month, lookback_months)
    if balance is None:
        balance = ZERO
    return MonthlyLedger(
        pk=ledger_pk(ledger_type, month),
        month=month,
        type=ledger_type,
        opening_balance=balance,
        closing_balance=balance,
        transactions=[],
    )


async def list_months(store: DocumentStore, ledger_type: str | None) -> list[str]:
    """Months with a stored ledger for the given type."""
    return await LedgerStore(store).list_months(require_ledger_type(ledger_type))


async def list_types(store: DocumentStore) -> list[str]:
    """Ledger types with at least one stored month."""
    return await LedgerStore(store).list_types()


# ---------------------------------------------------------------------------
# Bulk write
# ---------------------------------------------------------------------------

async def save_ledgers(
    store: DocumentStore,
    ledger_type: str | None,
    ledgers: list[MonthlyLedger],
) -> list[str]:
    """
    Write complete ledgers, each replacing the document for its own month.

    Ledgers are written independently and in the order given. Month format
    is validated on the models before any of them is written.

    Returns:
        The months written.
    """
    ledger_type = require_ledger_type(ledger_type)
    ledger_store = LedgerStore(store)
    for ledger in ledgers:
        await ledger_store.save(ledger_type, ledger)
    logger.info("Saved %d %s ledger(s)", len(ledgers), ledger_type)
    return [ledger.month for ledger in ledgers]


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

async def get_categories(store: DocumentStore) -> list[str]:
    """The saved category list, or the default list when none is saved."""
    try:
        return await LedgerStore(store).get_categories()
    except DocumentNotFoundError:
        return list(DEFAULT_CATEGORIES)


async def save_categories(store: DocumentStore, categories: list[str]) -> None:
    """Replace the category list."""
    await LedgerStore(store).save_categories(categories)
