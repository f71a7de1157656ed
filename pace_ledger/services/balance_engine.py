"""
Balance engine — creates, edits and deletes transactions while
keeping every account's running balance correct.

Each operation:
1. Locks and re-reads the edited row (update, delete)
2. Validates the request completely (amount, accounts, transfer
   shape, category) before anything is written
3. Locks the affected accounts in ascending id order
4. Writes the transaction record
5. Reverses the old balance effect (update, delete) and applies
   the new one (create, update) as SQL-side increments

All steps run inside LedgerStore.unit_of_work(), so a failure
rolls everything back. The caller controls the commit.

Balance effect of a transaction:
    income    account_id    +amount
    expense   account_id    -amount
    transfer  account_id    -amount
              to_account_id +amount
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import structlog
from sqlalchemy.orm import Session

from pace_ledger.errors import (
    CategoryNotFound,
    InvalidAmount,
    InvalidTransfer,
)
from pace_ledger.models.account import Account
from pace_ledger.models.category import Category
from pace_ledger.models.enums import TransactionType
from pace_ledger.models.money import MINOR_UNITS, MONEY_SCALE, QUANTUM
from pace_ledger.schemas.transaction import TransactionCreate, TransactionUpdate
from pace_ledger.services.ledger_store import LedgerStore

logger = structlog.get_logger(__name__)

# Largest amount a single transaction may carry. Keeps minor units
# well inside a signed 64-bit column.
MAX_AMOUNT = Decimal("100000000000000")

# Fields whose stored value can never be null. An explicit null in
# a partial update is treated the same as leaving the field out.
NON_NULLABLE_FIELDS = ("transaction_type", "amount", "date", "account_id")


@dataclass(frozen=True)
class LedgerState:
    """The fields of a transaction that decide its balance effect."""
    transaction_type: TransactionType
    amount: Decimal
    account_id: int
    to_account_id: int | None = None


def balance_effect(state: LedgerState) -> list[tuple[int, Decimal]]:
    """Return the (account_id, signed delta) pairs a transaction applies."""
    if state.transaction_type == TransactionType.INCOME:
        return [(state.account_id, state.amount)]
    if state.transaction_type == TransactionType.EXPENSE:
        return [(state.account_id, -state.amount)]
    if state.transaction_type == TransactionType.TRANSFER:
        return [
            (state.account_id, -state.amount),
            (state.to_account_id, state.amount),
        ]
    raise ValueError(f"Unknown transaction type: {state.transaction_type}")


def reverse_effect(effect: list[tuple[int, Decimal]]) -> list[tuple[int, Decimal]]:
    return [(account_id, -delta) for account_id, delta in effect]


def normalize_amount(amount) -> Decimal:
    """
    Check that an amount is a finite positive number with at most
    MONEY_SCALE decimal places, and return it as a Decimal.
    """
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount(f"Amount {amount!r} is not a number")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(f"Amount {amount!r} is not a number")

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value}")
    if value <= 0:
        raise InvalidAmount(f"Amount must be positive, got {value}")
    if value > MAX_AMOUNT:
        raise InvalidAmount(f"Amount {value} exceeds maximum {MAX_AMOUNT}")
    if (value * MINOR_UNITS) % 1 != 0:
        raise InvalidAmount(
            f"Amount {value} has more than {MONEY_SCALE} decimal places"
        )
    return value.quantize(QUANTUM)


class BalanceEngine:

    def __init__(self, db: Session):
        self.db = db
        self.store = LedgerStore(db)

    # --- Validation ---

    def _validate(self, state: LedgerState) -> LedgerState:
        """
        Validate a complete transaction state. Returns the state with
        its amount normalized. Raises before anything is written.
        """
        amount = normalize_amount(state.amount)

        self.store.get_account(state.account_id)

        if state.transaction_type == TransactionType.TRANSFER:
            if state.to_account_id is None:
                raise InvalidTransfer("Transfer requires a destination account")
            if state.to_account_id == state.account_id:
                raise InvalidTransfer("Cannot transfer to the same account")
            self.store.get_account(state.to_account_id)
        elif state.to_account_id is not None:
            raise InvalidTransfer(
                f"Only transfers may have a destination account "
                f"(type: {state.transaction_type.value})"
            )

        return LedgerState(
            transaction_type=state.transaction_type,
            amount=amount,
            account_id=state.account_id,
            to_account_id=state.to_account_id,
        )

    def _validate_category(self, category_id: int | None) -> None:
        if category_id is not None and not self.db.get(Category, category_id):
            raise CategoryNotFound(category_id)

    def _apply(self, effect: list[tuple[int, Decimal]]) -> None:
        for account_id, delta in effect:
            self.store.increment_account_balance(account_id, delta)

    # --- Operations ---

    def create_transaction(self, request: TransactionCreate) -> int:
        """
        Record a transaction and apply its balance effect.

        Returns the new transaction id. A repeated idempotency_key
        returns the id of the transaction already recorded under
        that key without applying anything again. If another session
        commits the same key between the lookup and the insert, the
        unique index rejects this one with StoreFailure; retrying
        then returns the committed id.
        """
        with self.store.unit_of_work():
            if request.idempotency_key:
                existing = self.store.find_by_idempotency_key(request.idempotency_key)
                if existing:
                    logger.info(
                        "transaction_replayed",
                        transaction_id=existing.id,
                        idempotency_key=request.idempotency_key,
                    )
                    return existing.id

            state = self._validate(LedgerState(
                transaction_type=request.transaction_type,
                amount=request.amount,
                account_id=request.account_id,
                to_account_id=request.to_account_id,
            ))
            self._validate_category(request.category_id)

            effect = balance_effect(state)
            self.store.lock_accounts(account_id for account_id, _ in effect)
            txn = self.store.insert_transaction({
                "transaction_type": state.transaction_type,
                "amount": state.amount,
                "date": request.date,
                "account_id": state.account_id,
                "to_account_id": state.to_account_id,
                "category_id": request.category_id,
                "note": request.note,
                "idempotency_key": request.idempotency_key,
            })
            self._apply(effect)

        logger.info(
            "transaction_created",
            transaction_id=txn.id,
            transaction_type=state.transaction_type.value,
            amount=str(state.amount),
            effect=[(a, str(d)) for a, d in effect],
        )
        return txn.id

    def update_transaction(
        self, transaction_id: int, request: TransactionUpdate
    ) -> None:
        """
        Change a transaction in place.

        The stored effect is reversed and the merged state's effect
        applied. The row is locked and re-read first, so the reversal
        always matches what is committed. The merged state is validated
        before anything is written, so a rejected update leaves balances
        and the record untouched.
        """
        changes = request.model_dump(exclude_unset=True)
        for name in NON_NULLABLE_FIELDS:
            if name in changes and changes[name] is None:
                del changes[name]

        with self.store.unit_of_work():
            txn = self.store.lock_transaction(transaction_id)
            old_state = LedgerState(
                transaction_type=txn.transaction_type,
                amount=txn.amount,
                account_id=txn.account_id,
                to_account_id=txn.to_account_id,
            )

            new_type = changes.get("transaction_type", txn.transaction_type)
            if "to_account_id" in changes:
                to_account_id = changes["to_account_id"]
            elif new_type == TransactionType.TRANSFER:
                to_account_id = txn.to_account_id
            else:
                # Type moved away from transfer: the stored destination
                # no longer means anything.
                to_account_id = None

            new_state = self._validate(LedgerState(
                transaction_type=new_type,
                amount=changes.get("amount", txn.amount),
                account_id=changes.get("account_id", txn.account_id),
                to_account_id=to_account_id,
            ))
            if "category_id" in changes:
                self._validate_category(changes["category_id"])

            fields = {
                "transaction_type": new_state.transaction_type,
                "amount": new_state.amount,
                "account_id": new_state.account_id,
                "to_account_id": new_state.to_account_id,
            }
            for name in ("date", "category_id", "note"):
                if name in changes:
                    fields[name] = changes[name]

            old_effect = balance_effect(old_state)
            new_effect = balance_effect(new_state)

            self.store.lock_accounts(
                [a for a, _ in old_effect] + [a for a, _ in new_effect]
            )
            self._apply(reverse_effect(old_effect))
            self.store.update_transaction_fields(transaction_id, fields)
            self._apply(new_effect)

        logger.info(
            "transaction_updated",
            transaction_id=transaction_id,
            reversed=[(a, str(d)) for a, d in reverse_effect(old_effect)],
            applied=[(a, str(d)) for a, d in new_effect],
        )

    def delete_transaction(self, transaction_id: int) -> None:
        """
        Reverse a transaction's balance effect and remove its record.

        A transaction already deleted by another session raises
        TransactionNotFound instead of being reversed a second time.
        """
        with self.store.unit_of_work():
            txn = self.store.lock_transaction(transaction_id)
            reversal = reverse_effect(balance_effect(LedgerState(
                transaction_type=txn.transaction_type,
                amount=txn.amount,
                account_id=txn.account_id,
                to_account_id=txn.to_account_id,
            )))

            self.store.lock_accounts(account_id for account_id, _ in reversal)
            self._apply(reversal)
            self.store.delete_transaction_record(transaction_id)

        logger.info(
            "transaction_deleted",
            transaction_id=transaction_id,
            reversed=[(a, str(d)) for a, d in reversal],
        )

    def get_account(self, account_id: int) -> Account:
        """Return the account with its running balance re-read from the database."""
        account = self.store.get_account(account_id)
        self.db.refresh(account, ["current_balance"])
        return account

    def get_balance(self, account_id: int) -> Decimal:
        """Return the account's current running balance."""
        return self.get_account(account_id).current_balance

    def get_transaction(self, transaction_id: int):
        return self.store.get_transaction(transaction_id)
