"""
Pydantic schemas for read-side summaries.
"""

from decimal import Decimal

from pydantic import BaseModel


class TransactionStats(BaseModel):
    total_income: Decimal
    total_expense: Decimal
    net_balance: Decimal
    transaction_count: int


class CategorySpending(BaseModel):
    category_id: int
    total: Decimal
