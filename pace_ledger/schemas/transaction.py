"""
Pydantic schemas for transaction operations.

Amount rules (positive, finite, at most four decimal places) are
enforced by the BalanceEngine rather than here, so direct callers of
the engine and HTTP callers get the same typed InvalidAmount error.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pace_ledger.models.enums import TransactionType


class TransactionCreate(BaseModel):
    transaction_type: TransactionType
    amount: Decimal
    date: datetime = Field(default_factory=datetime.utcnow)
    account_id: int
    to_account_id: int | None = None
    category_id: int | None = None
    note: str | None = Field(default=None, max_length=500)
    idempotency_key: str | None = Field(default=None, min_length=1, max_length=100)


class TransactionUpdate(BaseModel):
    """
    Partial update. Only fields the caller actually sent are applied:
    an explicit `"to_account_id": null` clears the destination, while
    leaving the key out keeps the stored value.
    """
    transaction_type: TransactionType | None = None
    amount: Decimal | None = None
    date: datetime | None = None
    account_id: int | None = None
    to_account_id: int | None = None
    category_id: int | None = None
    note: str | None = Field(default=None, max_length=500)


class TransactionResponse(BaseModel):
    id: int
    transaction_type: TransactionType
    amount: Decimal
    date: datetime
    account_id: int
    to_account_id: int | None
    category_id: int | None
    note: str | None
    idempotency_key: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TransactionCreated(BaseModel):
    id: int
