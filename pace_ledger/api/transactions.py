"""
Transaction API endpoints.

The API layer is thin — it handles HTTP concerns (status codes,
commit/rollback) and delegates every balance rule to the
BalanceEngine.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from pace_ledger.errors import LedgerError
from pace_ledger.models.base import get_db
from pace_ledger.services.balance_engine import BalanceEngine
from pace_ledger.services.report_service import ReportService
from pace_ledger.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionCreated,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("", response_model=TransactionCreated, status_code=201)
def create_transaction(
    request: TransactionCreate,
    db: Session = Depends(get_db),
):
    """Record income, an expense, or a transfer and update balances."""
    engine = BalanceEngine(db)
    try:
        transaction_id = engine.create_transaction(request)
        db.commit()
        return TransactionCreated(id=transaction_id)
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    account_id: int | None = None,
    category_id: int | None = None,
    db: Session = Depends(get_db),
):
    """List transactions newest first, optionally for one account or category."""
    service = ReportService(db)
    if account_id is not None:
        return service.transactions_for_account(account_id)
    if category_id is not None:
        return service.transactions_for_category(category_id)
    return service.list_transactions()


@router.get("/recent", response_model=list[TransactionResponse])
def recent_transactions(
    limit: int = Query(20, ge=1, le=500),
    db: Session = Depends(get_db),
):
    return ReportService(db).recent_transactions(limit)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Get transaction details."""
    engine = BalanceEngine(db)
    try:
        return engine.get_transaction(transaction_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    request: TransactionUpdate,
    db: Session = Depends(get_db),
):
    """
    Edit a transaction. The old balance effect is reversed and the
    new one applied in the same database transaction.
    """
    engine = BalanceEngine(db)
    try:
        engine.update_transaction(transaction_id, request)
        db.commit()
        return engine.get_transaction(transaction_id)
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Delete a transaction and reverse its balance effect."""
    engine = BalanceEngine(db)
    try:
        engine.delete_transaction(transaction_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return Response(status_code=204)
