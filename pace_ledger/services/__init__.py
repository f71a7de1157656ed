"""Business logic services."""

from pace_ledger.services.ledger_store import LedgerStore
from pace_ledger.services.balance_engine import BalanceEngine
from pace_ledger.services.account_service import AccountService
from pace_ledger.services.category_service import CategoryService
from pace_ledger.services.report_service import ReportService

__all__ = [
    "LedgerStore",
    "BalanceEngine",
    "AccountService",
    "CategoryService",
    "ReportService",
]
