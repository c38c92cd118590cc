"""
Ledger router — monthly ledgers, bank statement import, categories.

Endpoints:
  GET  /ledger?type=&month=                   — One monthly ledger
  POST /ledger?type=                          — Bulk write complete ledgers
  POST /ledger/import?type=&currentBalance=   — Import a bank statement export
  GET  /ledger/months?type=                   — Months stored for a ledger type
  GET  /ledger/types                          — Ledger types with stored data
  GET  /ledger/categories                     — Category list
  POST /ledger/categories                     — Replace the category list

Routes only translate HTTP into service calls; all ledger semantics live in
services/ledger_service.py.
"""

from decimal import Decimal, InvalidOperation

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError

from club_finance.currency import round_currency
from club_finance.dependencies import get_document_store, get_id_factory
from club_finance.exceptions import AmountOutOfRangeError, LedgerValidationError, ParseError
from club_finance.schemas.ledger import (
    BankImportRequest,
    BankImportResponse,
    MonthlyLedger,
    StatusResponse,
)
from club_finance.services import ledger_service
from club_finance.services.document_store import DocumentStore
from club_finance.services.reconciler import IdFactory

router = APIRouter()


# ---------------------------------------------------------------------------
# Monthly ledgers
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=MonthlyLedger,
    summary="Get the ledger for one type and month",
)
async def get_ledger(
    type: str | None = Query(None, description="Ledger type, e.g. BANK"),
    month: str | None = Query(None, description="Month as YYYY-MM"),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Return the stored ledger for a type and month.

    If the month has no ledger yet, an empty ledger is returned whose
    opening and closing balance carry forward the closing balance of the
    most recent earlier month (looking back up to six months).
    """
    return await ledger_service.get_ledger(store, type, month)


@router.post(
    "",
    response_model=StatusResponse,
    summary="Save complete monthly ledgers",
)
async def save_ledgers(
    ledgers: list[MonthlyLedger],
    type: str | None = Query(None, description="Ledger type, e.g. BANK"),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Write each ledger in the body, replacing the stored ledger for its month.

    Each ledger is written whole, keyed by its own `month` field.
    """
    await ledger_service.save_ledgers(store, type, ledgers)
    return StatusResponse()


@router.get(
    "/months",
    response_model=list[str],
    summary="List months stored for a ledger type",
)
async def list_months(
    type: str | None = Query(None, description="Ledger type, e.g. BANK"),
    store: DocumentStore = Depends(get_document_store),
):
    return await ledger_service.list_months(store, type)


@router.get(
    "/types",
    response_model=list[str],
    summary="List ledger types with stored data",
)
async def list_types(store: DocumentStore = Depends(get_document_store)):
    return await ledger_service.list_types(store)


# ---------------------------------------------------------------------------
# Bank statement import
# ---------------------------------------------------------------------------

def _parse_balance(raw: str | None) -> Decimal | None:
    value = (raw or "").strip()
    if not value:
        return None
    try:
        balance = Decimal(value)
    except InvalidOperation:
        raise LedgerValidationError("Current balance must be a number")
    if not balance.is_finite():
        raise LedgerValidationError("Current balance must be a number")
    try:
        return round_currency(balance)
    except AmountOutOfRangeError:
        raise LedgerValidationError("Current balance is out of range")


@router.post(
    "/import",
    response_model=BankImportResponse,
    summary="Import a bank statement export",
)
async def import_bank_statement(
    request: Request,
    type: str | None = Query(None, description="Ledger type (default BANK)"),
    current_balance: str | None = Query(
        None,
        alias="currentBalance",
        description="Account balance after the last transaction in the export",
    ),
    store: DocumentStore = Depends(get_document_store),
    id_factory: IdFactory = Depends(get_id_factory),
):
    """
    Import a bank statement export into monthly ledgers.

    The body is either the raw export (tab or comma separated rows of
    `DD/MM/YYYY, amount, description`) or a JSON object
    `{"csv": ..., "currentBalance": ..., "type": ...}`. A body starting with
    `{` is always read as JSON. Query parameters take precedence over the
    JSON fields.

    Every month touched by the export is rewritten in full.
    """
    try:
        raw_body = (await request.body()).decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("payload is not UTF-8 text") from exc
    csv_text = raw_body.strip()
    ledger_type = (type or "").strip()
    balance = _parse_balance(current_balance)

    if csv_text.startswith("{"):
        try:
            payload = BankImportRequest.model_validate_json(raw_body)
        except ValidationError as exc:
            error = exc.errors()[0]
            raise LedgerValidationError(f"Invalid import request: {error['msg']}") from exc
        csv_text = payload.csv
        if not ledger_type:
            ledger_type = payload.type.strip()
        if balance is None:
            balance = payload.current_balance

    return await ledger_service.import_bank_statement(
        store,
        csv_text=csv_text,
        current_balance=balance,
        ledger_type=ledger_type,
        id_factory=id_factory,
    )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@router.get(
    "/categories",
    response_model=list[str],
    summary="Get the category list",
)
async def get_categories(store: DocumentStore = Depends(get_document_store)):
    """Saved categories, or the default list when none have been saved."""
    return await ledger_service.get_categories(store)


@router.post(
    "/categories",
    response_model=StatusResponse,
    summary="Replace the category list",
)
async def save_categories(
    categories: list[str],
    store: DocumentStore = Depends(get_document_store),
):
    await ledger_service.save_categories(store, categories)
    return StatusResponse()
