"""
Monthly partitioner — splits reconciled rows into MonthlyLedger documents.

Each calendar month (YYYY-MM of the transaction date) becomes one ledger.
A month's opening balance is the running balance just before its first
transaction and its closing balance is the running balance after its last,
so consecutive months chain up (closing[N-1] == opening[N]) whenever the
import covers both.

The output is fully determined by the input rows: partitioning the same
reconciliation twice produces identical documents, and saving them
replaces whatever was stored for those months before.
"""

from collections import defaultdict
from collections.abc import Iterable

from club_finance.currency import round_currency
from club_finance.schemas.ledger import LedgerTransaction, MonthlyLedger
from club_finance.services.reconciler import ReconciledRow, chronological_key


def ledger_pk(ledger_type: str, month: str) -> str:
    return f"LEDGER#{ledger_type}#{month}"


def partition_by_month(
    rows: Iterable[ReconciledRow],
    ledger_type: str,
) -> list[MonthlyLedger]:
    """
    Group reconciled rows into one MonthlyLedger per calendar month.

    Args:
        rows: Rows with running balances already assigned.
        ledger_type: Ledger type recorded on every produced document.

    Returns:
        Ledgers in ascending month order.
    """
    by_month: dict[str, list[ReconciledRow]] = defaultdict(list)
    for row in rows:
        by_month[row.month].append(row)

    ledgers: list[MonthlyLedger] = []
    for month in sorted(by_month):
        # Same-day rows keep file order.
        month_rows = sorted(by_month[month], key=chronological_key)
        first, last = month_rows[0], month_rows[-1]

        ledgers.append(
            MonthlyLedger(
                pk=ledger_pk(ledger_type, month),
                month=month,
                type=ledger_type,
                opening_balance=round_currency(first.running_balance - first.amount),
                closing_balance=round_currency(last.running_balance),
                transactions=[
                    LedgerTransaction(
                        id=row.id,
                        date=row.date,
                        category=row.category,
                        description=row.description,
                        amount=row.amount,
                        running_balance=row.running_balance,
                    )
                    for row in month_rows
                ],
            )
        )
    return ledgers
