"""
Pydantic schemas for ledger documents and ledger endpoints.

These models double as the persisted document format: a MonthlyLedger is
serialized with ``model_dump_json(by_alias=True)`` and stored as-is, so the
JSON field names (camelCase) are part of the storage contract.

All monetary amounts are Decimal values rounded to cents (see
club_finance.currency.Money) and appear as JSON numbers on the wire.
"""

import re
import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from club_finance.currency import Money, ZERO

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class CamelModel(BaseModel):
    """Base for models whose JSON field names are camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LedgerTransaction(CamelModel):
    """One reconciled transaction inside a monthly ledger."""
    id: str
    date: datetime.date
    category: str = ""
    description: str = ""
    amount: Money
    running_balance: Money = ZERO


class MonthlyLedger(CamelModel):
    """
    All transactions of one ledger type for one calendar month.

    Transactions are in chronological order (ties keep import-file order).
    For ledgers produced by an import, closing_balance equals
    opening_balance plus the sum of the amounts, and the last transaction's
    running_balance equals closing_balance.
    """
    pk: str = ""
    month: str
    type: str = ""
    opening_balance: Money = ZERO
    closing_balance: Money = ZERO
    transactions: list[LedgerTransaction] = Field(default_factory=list)

    @field_validator("month")
    @classmethod
    def month_must_be_year_month(cls, value: str) -> str:
        """Month keys are always YYYY-MM."""
        if not MONTH_PATTERN.match(value):
            raise ValueError("Month must be YYYY-MM")
        return value


class BankImportRequest(CamelModel):
    """JSON body accepted by POST /ledger/import (a raw CSV body also works)."""
    csv: str = ""
    current_balance: Money | None = None
    type: str = ""


class BankImportResponse(CamelModel):
    """Summary of a completed bank statement import."""
    status: str = "ok"
    type: str
    months: list[str]
    count: int
    transactions: int
    opening_balance: Money
    closing_balance: Money


class StatusResponse(BaseModel):
    status: str = "ok"
