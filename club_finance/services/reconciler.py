"""
Balance reconciler — derives running balances for an imported statement.

A bank export lists transactions but not reliably the balance before the
first one. What the importer does know is the account balance NOW, i.e.
after every row in the file has been applied. Working backwards:

  1. total_delta = sum of all amounts, taken in file order
  2. opening_balance = current_balance - total_delta
  3. rows are re-sorted chronologically (date, then file position)
  4. running balances are replayed forward from opening_balance

Every addition is rounded to cents immediately (see club_finance.currency).

Note on ordering: the delta is summed in file order, while balances are
allocated in date order. Exports are expected newest-first; when a file
is not, the derived opening balance still satisfies
opening + sum(amounts) == current, but it may not correspond to a real
calendar boundary.

Identity: every row gets a fresh id from ``id_factory``. Importing the same
file twice yields two sets of transactions with different ids; there is no
de-duplication across imports.
"""

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from club_finance.currency import ZERO, round_currency
from club_finance.services.categorizer import categorize
from club_finance.services.csv_ingestor import RawRow

IdFactory = Callable[[], str]


def new_transaction_id() -> str:
    """Default id factory: a random UUID4 string."""
    return str(uuid.uuid4())


@dataclass
class ReconciledRow:
    """A statement row with its identity, category and running balance assigned."""
    id: str
    file_index: int
    date: date
    amount: Decimal
    description: str
    category: str
    running_balance: Decimal

    @property
    def month(self) -> str:
        return self.date.strftime("%Y-%m")


@dataclass
class Reconciliation:
    """Output of reconcile(): the rows in chronological order plus boundary balances."""
    ledger_type: str
    opening_balance: Decimal
    closing_balance: Decimal
    rows: list[ReconciledRow] = field(default_factory=list)


def chronological_key(row: RawRow | ReconciledRow) -> tuple[date, int]:
    """Sort key: date ascending, then original file position ascending."""
    return row.date, row.file_index


def reconcile(
    rows: Sequence[RawRow],
    current_balance: Decimal,
    ledger_type: str,
    id_factory: IdFactory = new_transaction_id,
) -> Reconciliation:
    """
    Assign running balances, ids and categories to imported rows.

    Args:
        rows: Parsed rows in original file order.
        current_balance: Account balance after all rows are applied.
        ledger_type: The ledger the rows belong to (e.g. "BANK").
        id_factory: Produces a unique id per row. Any exception it raises
                    propagates, aborting the import before anything is saved.

    Returns:
        A Reconciliation with rows in chronological order.
    """
    total_delta = ZERO
    for row in rows:
        total_delta = round_currency(total_delta + row.amount)

    opening_balance = round_currency(current_balance - total_delta)

    running = opening_balance
    reconciled: list[ReconciledRow] = []
    for row in sorted(rows, key=chronological_key):
        running = round_currency(running + row.amount)
        reconciled.append(
            ReconciledRow(
                id=id_factory(),
                file_index=row.file_index,
                date=row.date,
                amount=round_currency(row.amount),
                description=row.description,
                category=row.category or categorize(row.description),
                running_balance=running,
            )
        )

    return Reconciliation(
        ledger_type=ledger_type,
        opening_balance=opening_balance,
        closing_balance=round_currency(current_balance),
        rows=reconciled,
    )
