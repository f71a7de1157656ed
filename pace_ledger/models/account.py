"""
Account model.

An account is a container of money: a bank account, a credit card,
a wallet of cash. It carries a cached running balance that only the
BalanceEngine moves after creation.

Invariant:
    current_balance == initial_balance
                       + sum of signed effects of every transaction
                         that references this account
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Boolean, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from pace_ledger.models.base import Base
from pace_ledger.models.enums import AccountType
from pace_ledger.models.money import Money


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_type: Mapped[AccountType] = mapped_column(
        SAEnum(
            AccountType,
            name="account_type_enum",
            create_constraint=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AccountType.BANK_ACCOUNT,
    )
    # Snapshot at creation, never updated afterwards
    initial_balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    # Moved only through LedgerStore.increment_account_balance
    current_balance: Mapped[Decimal] = mapped_column(
        Money, nullable=False, default=Decimal("0")
    )
    currency: Mapped[str] = mapped_column(
        String(3), nullable=False, default="USD"
    )
    include_in_total: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return (
            f"<Account {self.id} {self.name!r} "
            f"{self.current_balance} {self.currency}>"
        )
