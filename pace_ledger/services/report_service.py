"""
Report service — read-side listings and simple sums.

Nothing here writes. Results reflect whatever the session's
transaction can see; freshness is the reader's concern.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from pace_ledger.models.enums import TransactionType
from pace_ledger.models.transaction import Transaction
from pace_ledger.schemas.report import CategorySpending, TransactionStats


def _newest_first(query):
    return query.order_by(
        Transaction.date.desc(),
        Transaction.created_at.desc(),
        Transaction.id.desc(),
    )


def _in_range(query, start: datetime | None, end: datetime | None):
    if start is not None:
        query = query.where(Transaction.date >= start)
    if end is not None:
        query = query.where(Transaction.date <= end)
    return query


class ReportService:

    def __init__(self, db: Session):
        self.db = db

    def _transactions(self, query) -> list[Transaction]:
        return list(self.db.execute(_newest_first(query)).scalars().all())

    def list_transactions(self) -> list[Transaction]:
        return self._transactions(select(Transaction))

    def recent_transactions(self, limit: int = 20) -> list[Transaction]:
        return self._transactions(select(Transaction).limit(limit))

    def transactions_in_range(
        self, start: datetime, end: datetime
    ) -> list[Transaction]:
        return self._transactions(_in_range(select(Transaction), start, end))

    def transactions_for_account(self, account_id: int) -> list[Transaction]:
        """Transactions where the account is the source or the destination."""
        return self._transactions(
            select(Transaction).where(
                or_(
                    Transaction.account_id == account_id,
                    Transaction.to_account_id == account_id,
                )
            )
        )

    def transactions_for_category(self, category_id: int) -> list[Transaction]:
        return self._transactions(
            select(Transaction).where(Transaction.category_id == category_id)
        )

    def _total(self, transaction_type, start, end) -> Decimal:
        query = select(func.coalesce(func.sum(Transaction.amount), 0)).where(
            Transaction.transaction_type == transaction_type
        )
        return Decimal(self.db.execute(_in_range(query, start, end)).scalar_one())

    def transaction_stats(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> TransactionStats:
        """
        Income and expense totals over an optional date range.
        Transfers only move money between accounts and are counted
        but not summed.
        """
        total_income = self._total(TransactionType.INCOME, start, end)
        total_expense = self._total(TransactionType.EXPENSE, start, end)
        count = self.db.execute(
            _in_range(select(func.count(Transaction.id)), start, end)
        ).scalar_one()

        return TransactionStats(
            total_income=total_income,
            total_expense=total_expense,
            net_balance=total_income - total_expense,
            transaction_count=count,
        )

    def spending_by_category(
        self, start: datetime, end: datetime
    ) -> list[CategorySpending]:
        """Expense totals per category, largest first."""
        total = func.sum(Transaction.amount).label("total")
        query = (
            select(Transaction.category_id, total)
            .where(
                Transaction.transaction_type == TransactionType.EXPENSE,
                Transaction.category_id.is_not(None),
            )
            .group_by(Transaction.category_id)
            .order_by(total.desc())
        )
        rows = self.db.execute(_in_range(query, start, end)).all()
        return [
            CategorySpending(category_id=row.category_id, total=row.total)
            for row in rows
        ]
