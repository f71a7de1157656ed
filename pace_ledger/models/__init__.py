"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from pace_ledger.models.base import Base
from pace_ledger.models.enums import (
    AccountType,
    TransactionType,
    CategoryType,
)
from pace_ledger.models.money import Money
from pace_ledger.models.account import Account
from pace_ledger.models.category import Category
from pace_ledger.models.transaction import Transaction

__all__ = [
    "Base",
    "AccountType",
    "TransactionType",
    "CategoryType",
    "Money",
    "Account",
    "Category",
    "Transaction",
]
