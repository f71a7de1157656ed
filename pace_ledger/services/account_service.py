"""
Account service — manages accounts and answers balance questions.

Creating an account seeds its running balance from the initial
balance. After that the balance is owned by the BalanceEngine:
this service edits metadata only.

Because balances are cached rather than replayed on every read,
the service can also recompute a balance from the transaction
history and report any account whose cached value has drifted.
"""

from decimal import Decimal

import structlog
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from pace_ledger.errors import AccountInUse, AccountNotFound
from pace_ledger.models.account import Account
from pace_ledger.models.enums import AccountType, TransactionType
from pace_ledger.models.transaction import Transaction
from pace_ledger.schemas.account import (
    AccountCreate,
    AccountUpdate,
    AccountDrift,
    IntegrityReport,
)

logger = structlog.get_logger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, request: AccountCreate) -> Account:
        """Create an account whose running balance starts at initial_balance."""
        account = Account(
            name=request.name,
            account_type=request.account_type,
            initial_balance=request.initial_balance,
            current_balance=request.initial_balance,
            currency=request.currency,
            include_in_total=request.include_in_total,
            color=request.color,
            icon=request.icon,
        )
        self.db.add(account)
        self.db.flush()
        logger.info(
            "account_created",
            account_id=account.id,
            initial_balance=str(account.initial_balance),
        )
        return account

    def update_account(self, account_id: int, request: AccountUpdate) -> Account:
        account = self.get_account(account_id)
        for name, value in request.model_dump(exclude_unset=True).items():
            if value is None and name in ("name", "account_type", "currency", "include_in_total"):
                continue
            setattr(account, name, value)
        self.db.flush()
        return account

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFound(account_id)
        return account

    def list_accounts(self, account_type: AccountType | None = None) -> list[Account]:
        """All accounts, newest first, optionally of one type."""
        query = select(Account)
        if account_type is not None:
            query = query.where(Account.account_type == account_type)
        accounts = self.db.execute(
            query.order_by(Account.created_at.desc(), Account.id.desc())
        ).scalars().all()
        return list(accounts)

    def count_accounts(self) -> int:
        return self.db.execute(select(func.count(Account.id))).scalar_one()

    def delete_account(self, account_id: int) -> None:
        """
        Delete an account with no transactions.

        An account still referenced by transactions cannot go: its
        transfers would leave the other side's balance unexplained.
        """
        account = self.get_account(account_id)
        in_use = self.db.execute(
            select(func.count(Transaction.id)).where(
                or_(
                    Transaction.account_id == account_id,
                    Transaction.to_account_id == account_id,
                )
            )
        ).scalar_one()
        if in_use:
            raise AccountInUse(
                f"Account {account_id} has {in_use} transaction(s); "
                f"delete them first"
            )
        self.db.delete(account)
        self.db.flush()
        logger.info("account_deleted", account_id=account_id)

    def get_total_balance(self) -> Decimal:
        """Sum of running balances over accounts included in the total."""
        total = self.db.execute(
            select(func.coalesce(func.sum(Account.current_balance), 0))
            .where(Account.include_in_total.is_(True))
        ).scalar_one()
        return Decimal(total)

    def _sum_amounts(self, *conditions) -> Decimal:
        total = self.db.execute(
            select(func.coalesce(func.sum(Transaction.amount), 0))
            .where(*conditions)
        ).scalar_one()
        return Decimal(total)

    def recompute_balance(self, account_id: int) -> Decimal:
        """
        Rebuild an account's balance from its initial balance and
        every stored transaction, ignoring the cached value.
        """
        account = self.get_account(account_id)

        income = self._sum_amounts(
            Transaction.account_id == account_id,
            Transaction.transaction_type == TransactionType.INCOME,
        )
        expense = self._sum_amounts(
            Transaction.account_id == account_id,
            Transaction.transaction_type == TransactionType.EXPENSE,
        )
        transferred_out = self._sum_amounts(
            Transaction.account_id == account_id,
            Transaction.transaction_type == TransactionType.TRANSFER,
        )
        transferred_in = self._sum_amounts(
            Transaction.to_account_id == account_id,
            Transaction.transaction_type == TransactionType.TRANSFER,
        )

        return (
            account.initial_balance
            + income
            - expense
            - transferred_out
            + transferred_in
        )

    def check_integrity(self) -> IntegrityReport:
        """Compare every cached balance with its recomputed value."""
        drifted = []
        accounts = self.db.execute(
            select(Account).order_by(Account.id)
        ).scalars().all()

        for account in accounts:
            self.db.refresh(account)
            recomputed = self.recompute_balance(account.id)
            if recomputed != account.current_balance:
                logger.warning(
                    "balance_drift_detected",
                    account_id=account.id,
                    cached=str(account.current_balance),
                    recomputed=str(recomputed),
                )
                drifted.append(AccountDrift(
                    account_id=account.id,
                    cached_balance=account.current_balance,
                    recomputed_balance=recomputed,
                ))

        return IntegrityReport(
            is_consistent=not drifted,
            accounts_checked=len(accounts),
            drifted=drifted,
        )
