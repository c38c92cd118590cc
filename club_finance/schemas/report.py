"""
Pydantic schemas for the financial report endpoint.

The report has three parts: an income/expenditure statement for the
selected period, a balance sheet as at the end of the period, and a fixed
list of notes. Field names are camelCase on the wire.
"""

from pydantic import Field

from club_finance.currency import Money, ZERO
from club_finance.schemas.ledger import CamelModel


class ReportLineItem(CamelModel):
    label: str
    amount: Money


class ReportNote(CamelModel):
    title: str
    details: list[str]


class StatementSection(CamelModel):
    """Income and expenditure for the period, bucketed by category."""
    income: list[ReportLineItem] = Field(default_factory=list)
    expenditure: list[ReportLineItem] = Field(default_factory=list)
    total_income: Money = ZERO
    total_expenditure: Money = ZERO
    net_result: Money = ZERO


class BalanceSheetSection(CamelModel):
    """Ledger balances as at the end of the period."""
    assets: list[ReportLineItem] = Field(default_factory=list)
    liabilities: list[ReportLineItem] = Field(default_factory=list)
    total_assets: Money = ZERO
    total_liabilities: Money = ZERO
    equity: Money = ZERO
    equity_label: str = "Accumulated funds"


class FinancialReportResponse(CamelModel):
    period: str
    label: str
    range: str
    as_at: str
    statement: StatementSection
    balance_sheet: BalanceSheetSection
    notes: list[ReportNote]
