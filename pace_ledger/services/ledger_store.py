"""
Ledger store — the persistence boundary of the balance engine.

This is the only code that writes an account's current_balance
after the account is created. It enforces:
1. Balances change only through SQL-side increments
   (`current_balance = current_balance + :delta`), never by
   reading a value into Python and writing it back
2. An edited or deleted transaction row is locked and re-read
   first, then the accounts it touches are locked in ascending
   id order, so two opposite transfers cannot deadlock
3. Any database error rolls the session back and surfaces as
   StoreFailure — partial work is never left in the session

The store takes a session as a constructor argument. The caller
controls the transaction boundary and decides when to commit.
"""

from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Iterator

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pace_ledger.errors import (
    AccountNotFound,
    StoreFailure,
    TransactionNotFound,
)
from pace_ledger.models.account import Account
from pace_ledger.models.transaction import Transaction

logger = structlog.get_logger(__name__)


class LedgerStore:

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """
        Run a block of writes as one all-or-nothing unit.

        On success the writes are flushed into the open database
        transaction (the caller still commits). On any failure the
        session is rolled back so no half-applied balance survives.
        """
        try:
            yield
            self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("store_failure", error=str(e))
            raise StoreFailure(f"Ledger store failure: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    # --- Accounts ---

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFound(account_id)
        return account

    def lock_accounts(self, account_ids: Iterable[int]) -> list[Account]:
        """
        Lock the given accounts for the rest of the database transaction.

        Rows are locked in ascending id order. SQLite ignores
        FOR UPDATE; its single writer lock already serializes.
        """
        ids = sorted(set(account_ids))
        accounts = self.db.execute(
            select(Account)
            .where(Account.id.in_(ids))
            .order_by(Account.id)
            .with_for_update()
        ).scalars().all()

        found = {a.id for a in accounts}
        for account_id in ids:
            if account_id not in found:
                raise AccountNotFound(account_id)
        return list(accounts)

    def increment_account_balance(self, account_id: int, delta: Decimal) -> None:
        """Atomically add a signed delta to an account's running balance."""
        result = self.db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(
                current_balance=Account.current_balance + delta,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise AccountNotFound(account_id)

    # --- Transactions ---

    def insert_transaction(self, fields: dict) -> Transaction:
        txn = Transaction(**fields)
        self.db.add(txn)
        self.db.flush()
        return txn

    def get_transaction(self, transaction_id: int) -> Transaction:
        txn = self.db.get(Transaction, transaction_id)
        if not txn:
            raise TransactionNotFound(transaction_id)
        return txn

    def lock_transaction(self, transaction_id: int) -> Transaction:
        """
        Re-read a transaction from the database and lock its row.

        The identity map may hold a copy loaded before another session
        changed or deleted the row; populate_existing overwrites it
        with the committed state.
        """
        txn = self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not txn:
            raise TransactionNotFound(transaction_id)
        return txn

    def find_by_idempotency_key(self, idempotency_key: str) -> Transaction | None:
        return self.db.execute(
            select(Transaction).where(
                Transaction.idempotency_key == idempotency_key
            )
        ).scalar_one_or_none()

    def update_transaction_fields(self, transaction_id: int, fields: dict) -> None:
        txn = self.get_transaction(transaction_id)
        for name, value in fields.items():
            setattr(txn, name, value)
        self.db.flush()

    def delete_transaction_record(self, transaction_id: int) -> None:
        txn = self.get_transaction(transaction_id)
        self.db.delete(txn)
        self.db.flush()
