"""Category domain service."""

from typing import Optional, Union

from famledger.database.base import Database
from famledger.domain.entities import Category, CategoryType
from famledger.domain.errors import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    category_name_not_found,
)

DEFAULT_CATEGORIES = [
    ("Salary", CategoryType.INCOME),
    ("Business", CategoryType.INCOME),
    ("Investments", CategoryType.INCOME),
    ("Other Income", CategoryType.INCOME),
    ("Food & Dining", CategoryType.EXPENSE),
    ("Groceries", CategoryType.EXPENSE),
    ("Transportation", CategoryType.EXPENSE),
    ("Housing", CategoryType.EXPENSE),
    ("Bills & Utilities", CategoryType.EXPENSE),
    ("Shopping", CategoryType.EXPENSE),
    ("Entertainment", CategoryType.EXPENSE),
    ("Health & Fitness", CategoryType.EXPENSE),
    ("Education", CategoryType.EXPENSE),
    ("Travel", CategoryType.EXPENSE),
    ("Loan Repayment", CategoryType.EXPENSE),
    ("Other", CategoryType.EXPENSE),
]


def parse_category_type(value: Union[str, CategoryType]) -> CategoryType:
    if isinstance(value, CategoryType):
        return value
    try:
        return CategoryType(str(value).strip().lower())
    except ValueError as e:
        raise InvalidInputError(f"Unknown category type '{value}'. Expected income or expense") from e


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self, name: str, category_type: Union[str, CategoryType] = CategoryType.EXPENSE
    ) -> int:
        """Create a category.

        Returns:
            Category ID

        Raises:
            ConflictError: If a category with the name exists
        """
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Category name is required")
        category_type = parse_category_type(category_type)
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(name=name, category_type=category_type.value)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID, or None if not found."""
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by name, or None if not found."""
        return self.db.get_category_by_name(name)

    def require_category_by_name(self, name: str) -> Category:
        """Get category by name.

        Raises:
            NotFoundError: If no category has that name
        """
        category = self.db.get_category_by_name(name)
        if category is None:
            raise NotFoundError(category_name_not_found(name))
        return category

    def list_categories(
        self, category_type: Optional[Union[str, CategoryType]] = None
    ) -> list[Category]:
        """List categories, optionally only one type."""
        if category_type is not None:
            category_type = parse_category_type(category_type).value
        return self.db.list_categories(category_type=category_type)

    def init_defaults(self) -> int:
        """Create the default categories that don't exist yet.

        Returns:
            Number of categories created
        """
        created = 0
        for name, category_type in DEFAULT_CATEGORIES:
            if self.db.get_category_by_name(name) is None:
                self.db.create_category(name=name, category_type=category_type.value)
                created += 1
        return created
