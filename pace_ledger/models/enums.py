"""
Shared enumerations for database models.

Enums are mapped to database enums so an invalid transaction
type or account type is caught at the database level, not just
in Python validation.
"""

import enum


class AccountType(str, enum.Enum):
    """Kind of money container. Metadata only; no effect on balances."""
    BANK_ACCOUNT = "bank_account"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    OTHER = "other"


class TransactionType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class CategoryType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"
