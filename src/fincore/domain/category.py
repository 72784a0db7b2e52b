"""Category domain service."""

from typing import Optional

from fincore.database.base import Database
from fincore.domain.entities import Category as CategoryEntity, TransactionKind
from fincore.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        company_id: str,
        name: str,
        kind: TransactionKind,
        linked_account_id: Optional[str] = None,
    ) -> str:
        """Create a category.

        Args:
            company_id: Owning company
            name: Category name (unique per company)
            kind: INCOME or EXPENSE
            linked_account_id: Optional chart-of-accounts link

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a category with the same name exists
            NotFoundError: If the linked account doesn't exist
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if self.get_category_by_name(company_id, name) is not None:
            raise ConflictError(f"Category with name '{name}' already exists")
        if linked_account_id is not None and self.db.get_account(linked_account_id) is None:
            raise NotFoundError(account_not_found(linked_account_id))

        return self.db.create_category(
            company_id=company_id,
            name=name,
            kind=TransactionKind(kind),
            linked_account_id=linked_account_id,
        )

    def get_category(self, category_id: str) -> Optional[CategoryEntity]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_name(self, company_id: str, name: str) -> Optional[CategoryEntity]:
        """Get category by name (exact match after trimming).

        Args:
            company_id: Owning company
            name: Category name

        Returns:
            Category entity or None if not found
        """
        wanted = name.strip()
        for category in self.db.fetch_categories(company_id):
            if category.name.strip() == wanted:
                return category
        return None

    def list_categories(
        self, company_id: str, kind: Optional[TransactionKind] = None
    ) -> list[CategoryEntity]:
        """List categories of a company, optionally of one kind."""
        categories = self.db.fetch_categories(company_id)
        if kind is not None:
            categories = [c for c in categories if c.kind == kind]
        return categories

    def delete_category(self, category_id: str) -> None:
        """Delete a category.

        Transactions that reference it are kept; reports fall back to the
        category name stored on each transaction.

        Raises:
            NotFoundError: If category doesn't exist
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))
        self.db.delete_category(category_id)
