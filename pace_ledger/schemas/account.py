"""
Pydantic schemas for account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pace_ledger.config import get_settings
from pace_ledger.models.enums import AccountType


class AccountCreate(BaseModel):
    """Request to create a new account. The balance is seeded from initial_balance."""
    name: str = Field(min_length=1, max_length=100)
    account_type: AccountType = AccountType.BANK_ACCOUNT
    initial_balance: Decimal = Field(default=Decimal("0"), decimal_places=4)
    currency: str = Field(
        default_factory=lambda: get_settings().DEFAULT_CURRENCY,
        min_length=3,
        max_length=3,
    )
    include_in_total: bool = True
    color: str | None = Field(default=None, max_length=20)
    icon: str | None = Field(default=None, max_length=50)


class AccountUpdate(BaseModel):
    """
    Metadata changes only. Neither balance can be edited here:
    the running balance moves exclusively through transactions.
    """
    name: str | None = Field(default=None, min_length=1, max_length=100)
    account_type: AccountType | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    include_in_total: bool | None = None
    color: str | None = Field(default=None, max_length=20)
    icon: str | None = Field(default=None, max_length=50)


class AccountResponse(BaseModel):
    id: int
    name: str
    account_type: AccountType
    initial_balance: Decimal
    current_balance: Decimal
    currency: str
    include_in_total: bool
    color: str | None
    icon: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AccountBalanceResponse(BaseModel):
    account_id: int
    name: str
    balance: Decimal
    currency: str


class TotalBalanceResponse(BaseModel):
    total: Decimal
    account_count: int


class AccountDrift(BaseModel):
    """Cached balance disagrees with the balance recomputed from history."""
    account_id: int
    cached_balance: Decimal
    recomputed_balance: Decimal


class IntegrityReport(BaseModel):
    is_consistent: bool
    accounts_checked: int
    drifted: list[AccountDrift]
