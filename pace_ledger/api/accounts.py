"""
Account API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from pace_ledger.errors import LedgerError
from pace_ledger.models.base import get_db
from pace_ledger.models.enums import AccountType
from pace_ledger.services.account_service import AccountService
from pace_ledger.services.balance_engine import BalanceEngine
from pace_ledger.schemas.account import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    AccountBalanceResponse,
    TotalBalanceResponse,
    IntegrityReport,
)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Create an account. Its running balance starts at initial_balance."""
    service = AccountService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    account_type: AccountType | None = None,
    db: Session = Depends(get_db),
):
    """List accounts, newest first."""
    return AccountService(db).list_accounts(account_type)


@router.get("/total", response_model=TotalBalanceResponse)
def get_total_balance(db: Session = Depends(get_db)):
    """Sum of balances over accounts included in the total."""
    service = AccountService(db)
    return TotalBalanceResponse(
        total=service.get_total_balance(),
        account_count=service.count_accounts(),
    )


@router.get("/integrity", response_model=IntegrityReport)
def check_integrity(db: Session = Depends(get_db)):
    """
    Recompute every balance from transaction history and report
    accounts whose cached balance disagrees.
    """
    return AccountService(db).check_integrity()


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get account details."""
    service = AccountService(db)
    try:
        return service.get_account(account_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: int,
    request: AccountUpdate,
    db: Session = Depends(get_db),
):
    """Edit account metadata. Balances cannot be edited directly."""
    service = AccountService(db)
    try:
        account = service.update_account(account_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{account_id}", status_code=204)
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Delete an account that has no transactions."""
    service = AccountService(db)
    try:
        service.delete_account(account_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return Response(status_code=204)


@router.get("/{account_id}/balance", response_model=AccountBalanceResponse)
def get_account_balance(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get the account's current running balance."""
    engine = BalanceEngine(db)
    try:
        account = engine.get_account(account_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return AccountBalanceResponse(
        account_id=account.id,
        name=account.name,
        balance=account.current_balance,
        currency=account.currency,
    )
