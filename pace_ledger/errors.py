"""
Ledger error taxonomy.

Validation errors are raised before any balance is touched, so
catching one means nothing was written. StoreFailure means the
database rejected the work; the session has already been rolled
back and the caller may retry.

Each error carries the HTTP status the API layer answers with.
"""


class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""

    status_code: int = 400


class InvalidAmount(LedgerError):
    """Amount is non-positive, NaN, infinite, or too precise."""

    status_code = 400


class InvalidTransfer(LedgerError):
    """
    Transfer without a destination, transfer to the same account,
    or a non-transfer carrying a destination account.
    """

    status_code = 400


class AccountNotFound(LedgerError):
    status_code = 404

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class TransactionNotFound(LedgerError):
    status_code = 404

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction {transaction_id} not found")


class CategoryNotFound(LedgerError):
    status_code = 404

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category {category_id} not found")


class AccountInUse(LedgerError):
    """Account is still referenced by transactions."""

    status_code = 409


class InvalidCategory(LedgerError):
    """Category hierarchy change that would make no sense."""

    status_code = 400


class CategoryInUse(LedgerError):
    """Category still has subcategories or transactions."""

    status_code = 409


class StoreFailure(LedgerError):
    """The persistence layer failed. Nothing was applied; retryable."""

    status_code = 503
