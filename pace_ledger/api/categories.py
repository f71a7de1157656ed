"""
Category API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from pace_ledger.errors import LedgerError
from pace_ledger.models.base import get_db
from pace_ledger.models.enums import CategoryType
from pace_ledger.services.category_service import CategoryService
from pace_ledger.schemas.category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    request: CategoryCreate,
    db: Session = Depends(get_db),
):
    service = CategoryService(db)
    try:
        category = service.create_category(request)
        db.commit()
        return category
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/seed")
def seed_categories(db: Session = Depends(get_db)):
    """Insert the default categories if none exist yet."""
    inserted = CategoryService(db).seed_default_categories()
    db.commit()
    return {"inserted": inserted}


@router.get("", response_model=list[CategoryResponse])
def list_categories(
    category_type: CategoryType | None = None,
    db: Session = Depends(get_db),
):
    return CategoryService(db).list_categories(category_type)


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
):
    service = CategoryService(db)
    try:
        return service.get_category(category_id)
    except LedgerError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    request: CategoryUpdate,
    db: Session = Depends(get_db),
):
    service = CategoryService(db)
    try:
        category = service.update_category(category_id, request)
        db.commit()
        return category
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{category_id}", status_code=204)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
):
    """Delete a category with no subcategories and no transactions."""
    service = CategoryService(db)
    try:
        service.delete_category(category_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return Response(status_code=204)
