"""
Report service — financial statement and balance sheet from stored ledgers.

A report is computed from scratch on every request:

  1. resolve_period()   period key + "now" -> date window
  2. load_all()         every MonthlyLedger of every ledger type
  3. build_statement()  income/expenditure by category inside the window
  4. build_assets()     per-type balance as at the end of the window
  5. build_notes()      fixed notes, one itemizing the asset balances

Financial years run 1 July to 30 June and are named after the year they
end in: FY 2024 is 1 Jul 2023 - 30 Jun 2024.

The balance sheet does not depend on the statement window. For each ledger
type it starts from the opening balance of the earliest stored month and
replays every transaction up to the end date, so a report for last year
and a report for this year are both derived from the full history.

Every addition is rounded to cents immediately (see club_finance.currency);
totals are summed from the already-rounded line items.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from club_finance.currency import ZERO, add_currency, format_currency, round_currency
from club_finance.exceptions import InvalidPeriodError
from club_finance.schemas.ledger import MonthlyLedger
from club_finance.schemas.report import (
    BalanceSheetSection,
    FinancialReportResponse,
    ReportLineItem,
    ReportNote,
    StatementSection,
)
from club_finance.services.document_store import DocumentStore
from club_finance.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

UNCATEGORISED = "Uncategorised"
EQUITY_LABEL = "Accumulated funds"

ASSET_LABELS = {
    "BANK": "Bank account",
    "CASH": "Cash on hand",
    "CARD": "Card balance",
}

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

# Number of financial years back for each fixed-year period key
_PRIOR_YEAR_OFFSETS = {"fy-1": 1, "fy-2": 2}


@dataclass(frozen=True)
class ReportPeriod:
    key: str
    label: str
    start: datetime
    end: datetime


# ---------------------------------------------------------------------------
# Period resolution
# ---------------------------------------------------------------------------

def current_financial_year_end(now: datetime) -> int:
    """Calendar year in which the financial year containing `now` ends."""
    return now.year + 1 if now.month >= 7 else now.year


def resolve_period(key: str, now: datetime) -> ReportPeriod:
    """
    Turn a period key into a concrete reporting window.

    Args:
        key: "ytd" (current financial year to date), "fy-1" (last complete
             financial year) or "fy-2" (the one before).
        now: Current time. Its tzinfo is carried onto the window bounds.

    Raises:
        InvalidPeriodError: For any other key.
    """
    fy_end = current_financial_year_end(now)

    if key == "ytd":
        start = datetime(fy_end - 1, 7, 1, tzinfo=now.tzinfo)
        return ReportPeriod(key=key, label="Current YTD", start=start, end=now)

    if key in _PRIOR_YEAR_OFFSETS:
        end_year = fy_end - _PRIOR_YEAR_OFFSETS[key]
        start = datetime(end_year - 1, 7, 1, tzinfo=now.tzinfo)
        end = datetime.combine(date(end_year, 6, 30), time(23, 59, 59), tzinfo=now.tzinfo)
        return ReportPeriod(key=key, label=f"FY {end_year}", start=start, end=end)

    raise InvalidPeriodError(key)


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------

def _totals_to_items(totals: dict[str, Decimal]) -> list[ReportLineItem]:
    return [
        ReportLineItem(label=label, amount=round_currency(amount))
        for label, amount in sorted(totals.items())
    ]


def _sum_items(items: list[ReportLineItem]) -> Decimal:
    return add_currency(*(item.amount for item in items))


def build_statement(
    start: date,
    end: date,
    ledgers_by_type: dict[str, list[MonthlyLedger]],
) -> StatementSection:
    """
    Income and expenditure by category for transactions dated start..end inclusive.

    Non-negative amounts count as income; negative amounts count as
    expenditure, by magnitude. A blank category is reported as
    "Uncategorised".
    """
    income: dict[str, Decimal] = defaultdict(lambda: ZERO)
    expenditure: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for ledgers in ledgers_by_type.values():
        for ledger in ledgers:
            for txn in ledger.transactions:
                if txn.date < start or txn.date > end:
                    continue
                category = txn.category.strip() or UNCATEGORISED
                if txn.amount >= 0:
                    income[category] = round_currency(income[category] + txn.amount)
                else:
                    expenditure[category] = round_currency(expenditure[category] - txn.amount)

    income_items = _totals_to_items(income)
    expense_items = _totals_to_items(expenditure)
    total_income = _sum_items(income_items)
    total_expense = _sum_items(expense_items)

    return StatementSection(
        income=income_items,
        expenditure=expense_items,
        total_income=total_income,
        total_expenditure=total_expense,
        net_result=round_currency(total_income - total_expense),
    )


# ---------------------------------------------------------------------------
# Balance sheet
# ---------------------------------------------------------------------------

def _month_start(month: str) -> date:
    year, month_number = (int(part) for part in month.split("-"))
    return date(year, month_number, 1)


def ledger_balance_as_at(ledgers: list[MonthlyLedger], end: date) -> Decimal | None:
    """
    Balance of one ledger type at the end of day `end`.

    Only months starting on or before `end` take part. The earliest of
    those seeds the balance with its opening balance; then every
    transaction dated on or before `end` is applied in date order.

    Returns:
        The balance, or None when no stored month starts on or before `end`.
    """
    relevant = sorted(
        (ledger for ledger in ledgers if _month_start(ledger.month) <= end),
        key=lambda ledger: ledger.month,
    )
    if not relevant:
        return None

    transactions = [
        txn
        for ledger in relevant
        for txn in ledger.transactions
        if txn.date <= end
    ]
    # Stable sort: same-day transactions keep their stored order.
    transactions.sort(key=lambda txn: txn.date)

    balance = relevant[0].opening_balance
    for txn in transactions:
        balance = round_currency(balance + txn.amount)
    return balance


def asset_label(ledger_type: str) -> str:
    return ASSET_LABELS.get(ledger_type, f"{ledger_type} ledger")


def build_assets(end: date, ledgers_by_type: dict[str, list[MonthlyLedger]]) -> list[ReportLineItem]:
    """One line per ledger type with a balance as at `end`, sorted by label."""
    assets = []
    for ledger_type, ledgers in ledgers_by_type.items():
        balance = ledger_balance_as_at(ledgers, end)
        if balance is None:
            continue
        assets.append(ReportLineItem(label=asset_label(ledger_type), amount=balance))
    assets.sort(key=lambda item: item.label)
    return assets


def build_balance_sheet(end: date, ledgers_by_type: dict[str, list[MonthlyLedger]]) -> BalanceSheetSection:
    assets = build_assets(end, ledgers_by_type)
    # Liabilities are not tracked in the ledgers.
    liabilities: list[ReportLineItem] = []
    total_assets = _sum_items(assets)
    total_liabilities = _sum_items(liabilities)
    return BalanceSheetSection(
        assets=assets,
        liabilities=liabilities,
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        equity=round_currency(total_assets - total_liabilities),
        equity_label=EQUITY_LABEL,
    )


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

def build_notes(assets: list[ReportLineItem]) -> list[ReportNote]:
    if assets:
        details = [f"{asset.label}: {format_currency(asset.amount)}" for asset in assets]
        details.append("Balances derived from ledger transactions.")
    else:
        details = ["No ledger balances available for the period."]

    return [
        ReportNote(title="Bank accounts", details=details),
        ReportNote(
            title="Grants",
            details=["Not available from ledgers; requires separate grant register."],
        ),
        ReportNote(
            title="Loans",
            details=["Not available from ledgers; requires loan schedule data."],
        ),
        ReportNote(
            title="Trust money",
            details=["Not available from ledgers; requires trust money ledger."],
        ),
    ]


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

def format_report_date(value: date) -> str:
    """e.g. 1 Jul 2023, regardless of locale"""
    return f"{value.day} {MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def build_report(
    period: ReportPeriod,
    ledgers_by_type: dict[str, list[MonthlyLedger]],
) -> FinancialReportResponse:
    """Assemble the full report for a resolved period from loaded ledgers."""
    start, end = period.start.date(), period.end.date()

    statement = build_statement(start, end, ledgers_by_type)
    balance_sheet = build_balance_sheet(end, ledgers_by_type)

    return FinancialReportResponse(
        period=period.key,
        label=period.label,
        range=f"{format_report_date(start)} - {format_report_date(end)}",
        as_at=f"As at {format_report_date(end)}",
        statement=statement,
        balance_sheet=balance_sheet,
        notes=build_notes(balance_sheet.assets),
    )


async def generate_report(
    store: DocumentStore,
    period_key: str,
    now: datetime,
) -> FinancialReportResponse:
    """
    Generate the financial report for a period.

    The period is resolved before anything is read from the store, so an
    unknown key costs no I/O.

    Raises:
        InvalidPeriodError: If the period key is unknown.
        InvalidLedgerFormatError: If a stored ledger does not decode.
        StoreError: On any storage failure.
    """
    period = resolve_period(period_key, now)
    ledgers_by_type = await LedgerStore(store).load_all()
    logger.info(
        "Building %s report from %d ledger type(s)", period.label, len(ledgers_by_type),
    )
    return build_report(period, ledgers_by_type)
