"""
Pydantic schemas for category operations.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from pace_ledger.models.enums import CategoryType


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category_type: CategoryType
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=20)
    parent_id: int | None = None
    is_default: bool = False


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    icon: str | None = Field(default=None, max_length=50)
    color: str | None = Field(default=None, max_length=20)
    parent_id: int | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    category_type: CategoryType
    icon: str | None
    color: str | None
    parent_id: int | None
    is_default: bool
    created_at: datetime

    model_config = {"from_attributes": True}
