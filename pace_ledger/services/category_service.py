"""
Category service — labels for transactions.

Categories never touch balances. Deleting one is refused while it
still has subcategories or transactions pointing at it.
"""

import structlog
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from pace_ledger.errors import CategoryInUse, CategoryNotFound, InvalidCategory
from pace_ledger.models.category import Category
from pace_ledger.models.enums import CategoryType
from pace_ledger.models.transaction import Transaction
from pace_ledger.schemas.category import CategoryCreate, CategoryUpdate

logger = structlog.get_logger(__name__)


# (name, type, icon, color) seeded on first start
DEFAULT_CATEGORIES: list[tuple[str, CategoryType, str, str]] = [
    ("Salary", CategoryType.INCOME, "briefcase", "#10B981"),
    ("Freelance", CategoryType.INCOME, "laptop", "#059669"),
    ("Business", CategoryType.INCOME, "business", "#047857"),
    ("Investments", CategoryType.INCOME, "trending-up", "#065F46"),
    ("Gifts", CategoryType.INCOME, "gift", "#10B981"),
    ("Refunds", CategoryType.INCOME, "return-up-back", "#059669"),
    ("Other Income", CategoryType.INCOME, "add-circle", "#047857"),
    ("Food & Dining", CategoryType.EXPENSE, "restaurant", "#EF4444"),
    ("Groceries", CategoryType.EXPENSE, "cart", "#DC2626"),
    ("Transportation", CategoryType.EXPENSE, "car", "#F59E0B"),
    ("Shopping", CategoryType.EXPENSE, "bag-handle", "#8B5CF6"),
    ("Bills & Utilities", CategoryType.EXPENSE, "document-text", "#3B82F6"),
    ("Rent/Mortgage", CategoryType.EXPENSE, "home-sharp", "#2563EB"),
    ("Entertainment", CategoryType.EXPENSE, "film", "#EC4899"),
    ("Health & Fitness", CategoryType.EXPENSE, "fitness", "#14B8A6"),
    ("Education", CategoryType.EXPENSE, "school", "#F97316"),
    ("Personal Care", CategoryType.EXPENSE, "cut", "#A855F7"),
    ("Travel", CategoryType.EXPENSE, "airplane", "#06B6D4"),
    ("Other Expenses", CategoryType.EXPENSE, "ellipsis-horizontal-circle", "#64748B"),
]


class CategoryService:

    def __init__(self, db: Session):
        self.db = db

    def create_category(self, request: CategoryCreate) -> Category:
        if request.parent_id is not None:
            self.get_category(request.parent_id)

        category = Category(
            name=request.name,
            category_type=request.category_type,
            icon=request.icon,
            color=request.color,
            parent_id=request.parent_id,
            is_default=request.is_default,
        )
        self.db.add(category)
        self.db.flush()
        return category

    def get_category(self, category_id: int) -> Category:
        category = self.db.get(Category, category_id)
        if not category:
            raise CategoryNotFound(category_id)
        return category

    def list_categories(
        self, category_type: CategoryType | None = None
    ) -> list[Category]:
        query = select(Category)
        if category_type is not None:
            query = query.where(Category.category_type == category_type)
        categories = self.db.execute(
            query.order_by(Category.name)
        ).scalars().all()
        return list(categories)

    def count_categories(self) -> int:
        return self.db.execute(select(func.count(Category.id))).scalar_one()

    def update_category(
        self, category_id: int, request: CategoryUpdate
    ) -> Category:
        category = self.get_category(category_id)
        changes = request.model_dump(exclude_unset=True)

        if changes.get("parent_id") is not None:
            if changes["parent_id"] == category_id:
                raise InvalidCategory("A category cannot be its own parent")
            self.get_category(changes["parent_id"])

        for name, value in changes.items():
            if name == "name" and value is None:
                continue
            setattr(category, name, value)
        self.db.flush()
        return category

    def delete_category(self, category_id: int) -> None:
        category = self.get_category(category_id)

        subcategories = self.db.execute(
            select(func.count(Category.id)).where(
                Category.parent_id == category_id
            )
        ).scalar_one()
        if subcategories:
            raise CategoryInUse(
                "Cannot delete category with subcategories. "
                "Delete subcategories first."
            )

        transactions = self.db.execute(
            select(func.count(Transaction.id)).where(
                Transaction.category_id == category_id
            )
        ).scalar_one()
        if transactions:
            raise CategoryInUse("Cannot delete category that has transactions.")

        self.db.delete(category)
        self.db.flush()

    def seed_default_categories(self) -> int:
        """
        Insert the default categories if the table is empty.

        Returns the number of categories inserted (0 when already seeded).
        """
        if self.count_categories():
            return 0

        for name, category_type, icon, color in DEFAULT_CATEGORIES:
            self.db.add(Category(
                name=name,
                category_type=category_type,
                icon=icon,
                color=color,
                is_default=True,
            ))
        self.db.flush()
        logger.info("default_categories_seeded", count=len(DEFAULT_CATEGORIES))
        return len(DEFAULT_CATEGORIES)
