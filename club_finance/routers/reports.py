"""
Reports router — financial statement and balance sheet.

Endpoints:
  GET /reports/financial?period=ytd|fy-1|fy-2

The report is computed on every request from the stored ledgers; nothing
is cached or persisted.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from club_finance.dependencies import get_document_store, get_now
from club_finance.schemas.report import FinancialReportResponse
from club_finance.services import report_service
from club_finance.services.document_store import DocumentStore

router = APIRouter()


@router.get(
    "/financial",
    response_model=FinancialReportResponse,
    summary="Get the financial report for a period",
)
async def get_financial_report(
    period: str = Query("ytd", description="ytd, fy-1 or fy-2"),
    now: datetime = Depends(get_now),
    store: DocumentStore = Depends(get_document_store),
):
    """
    Build the financial report for a reporting period.

    - **ytd**: 1 July of the current financial year up to now
    - **fy-1**: the last complete financial year (1 July - 30 June)
    - **fy-2**: the financial year before that

    The response contains an income/expenditure statement for the period,
    a balance sheet as at the end of the period, and notes.
    """
    return await report_service.generate_report(store, period or "ytd", now)
