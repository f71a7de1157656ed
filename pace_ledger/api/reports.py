"""
Report API endpoints — read-only sums.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pace_ledger.models.base import get_db
from pace_ledger.services.report_service import ReportService
from pace_ledger.schemas.report import CategorySpending, TransactionStats

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/stats", response_model=TransactionStats)
def transaction_stats(
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
):
    """Income and expense totals over an optional date range."""
    return ReportService(db).transaction_stats(start, end)


@router.get("/spending-by-category", response_model=list[CategorySpending])
def spending_by_category(
    start: datetime,
    end: datetime,
    db: Session = Depends(get_db),
):
    """Expense totals per category, largest first."""
    return ReportService(db).spending_by_category(start, end)
