"""Category (chart of accounts) domain service."""

from typing import Any, Optional

from switchbooks.database.base import Database
from switchbooks.domain.entities import AccountType, Category
from switchbooks.domain.errors import (
    CircularDependencyError,
    ConflictError,
    DependencyError,
    NotFoundError,
    TypeMismatchError,
    ValidationError,
    category_delete_blocked,
    category_not_found,
    category_path_not_found,
    duplicate_category_name,
)

MAX_NAME_LENGTH = 255


class CategoryService:
    """Service for managing the chart of accounts of a company."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        company_id: int,
        name: str,
        account_type: "AccountType | str",
        parent_path: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> int:
        """Create a category.

        Args:
            company_id: Owning company ID
            name: Category name
            account_type: Account type (enum member or label, case-insensitive)
            parent_path: Optional parent category path (e.g., "Operating Expenses")
            parent_id: Optional parent category ID (takes precedence over parent_path)

        Returns:
            Category ID

        Raises:
            ValidationError: If the name or type is invalid
            NotFoundError: If the parent category doesn't exist
            TypeMismatchError: If the parent has a different account type
            ConflictError: If the name is already used at this level
        """
        name = self._clean_name(name)
        account_type = self._parse_type(account_type)

        parent: Optional[Category] = None
        if parent_id is not None:
            parent = self.require_category(parent_id)
        elif parent_path is not None:
            parent = self.db.get_category_by_path(company_id, parent_path)
            if parent is None:
                raise NotFoundError(category_path_not_found(parent_path))

        if parent is not None:
            if parent.company_id != company_id:
                raise NotFoundError(category_not_found(parent.id))
            if parent.account_type is not account_type:
                raise TypeMismatchError(
                    f"Parent category '{parent.name}' is {parent.account_type.value}, "
                    f"cannot add a {account_type.value} category under it"
                )

        parent_key = parent.id if parent is not None else None
        self._ensure_unique_name(company_id, name, account_type, parent_key)
        return self.db.create_category(
            company_id=company_id,
            name=name,
            account_type=account_type,
            parent_id=parent_key,
        )

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID.

        Args:
            category_id: Category ID

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category(category_id)

    def require_category(self, category_id: int) -> Category:
        """Get category by ID, raising NotFoundError when missing."""
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def get_category_by_path(self, company_id: int, path: str) -> Optional[Category]:
        """Get category by path.

        Args:
            company_id: Owning company ID
            path: Category path (e.g., "Operating Expenses > Rent")

        Returns:
            Category entity or None if not found
        """
        return self.db.get_category_by_path(company_id, path)

    def find_category(self, company_id: int, reference: str) -> Optional[Category]:
        """Find a category by path, then by case-insensitive name.

        Args:
            company_id: Owning company ID
            reference: "Parent > Child" path or a bare category name

        Returns:
            The matching category, or None. A bare name shared by several
            categories resolves to the oldest one.
        """
        category = self.db.get_category_by_path(company_id, reference)
        if category is not None:
            return category
        wanted = reference.strip().lower()
        for candidate in self.db.list_all_categories(company_id):
            if candidate.name.lower() == wanted:
                return candidate
        return None

    def list_categories(self, company_id: int, parent_id: Optional[int] = None) -> list[Category]:
        """List categories directly under a parent.

        Args:
            company_id: Owning company ID
            parent_id: Optional parent category ID (None lists top-level categories)

        Returns:
            List of category entities
        """
        return self.db.list_categories(company_id, parent_id=parent_id)

    def list_all_categories(self, company_id: int) -> list[Category]:
        return self.db.list_all_categories(company_id)

    def get_category_tree(self, company_id: int) -> list[dict[str, Any]]:
        """Get full category tree.

        Returns:
            List of root categories with nested children
        """
        return self.db.get_category_tree(company_id)

    def format_category_path(self, category_id: int) -> str:
        """Get full path for a category.

        Args:
            category_id: Category ID

        Returns:
            Full category path (e.g., "Operating Expenses > Rent")
        """
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        seen = {cat.id}
        current_parent_id = cat.parent_id

        while current_parent_id is not None and current_parent_id not in seen:
            parent = self.get_category(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            seen.add(parent.id)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))

    def rename_category(self, category_id: int, name: str) -> None:
        """Rename a category.

        Raises:
            NotFoundError: If the category doesn't exist
            ConflictError: If a sibling of the same type already has the name
        """
        self.update_category(category_id, name=name)

    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        account_type: "AccountType | str | None" = None,
    ) -> None:
        """Update category name and/or account type.

        Changing the type is only allowed for a category with no parent and
        no children, so that parent and child types keep matching.

        Args:
            category_id: Category ID
            name: Optional new name
            account_type: Optional new account type

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If the new name or type is invalid
            TypeMismatchError: If the type change would break the hierarchy
            ConflictError: If the new name is already used at this level
        """
        category = self.require_category(category_id)
        new_name = self._clean_name(name) if name is not None else category.name
        new_type = (
            self._parse_type(account_type) if account_type is not None else category.account_type
        )

        if new_type is not category.account_type:
            children = self.db.list_categories(category.company_id, parent_id=category.id)
            if category.parent_id is not None or children:
                raise TypeMismatchError(
                    f"Cannot change type of '{category.name}' to {new_type.value}: "
                    "it has a parent or child categories"
                )

        self._ensure_unique_name(
            category.company_id, new_name, new_type, category.parent_id, exclude_id=category.id
        )
        self.db.update_category(
            category_id,
            name=new_name if name is not None else None,
            account_type=new_type if account_type is not None else None,
        )

    def move_category(self, category_id: int, new_parent_id: Optional[int]) -> None:
        """Move a category under a new parent, or to the top level.

        Args:
            category_id: Category ID to move
            new_parent_id: New parent category ID, or None for top level

        Raises:
            NotFoundError: If the category or new parent doesn't exist
            TypeMismatchError: If the new parent has a different account type
            CircularDependencyError: If the new parent is the category or a descendant
            ConflictError: If a sibling at the destination already has the name
        """
        category = self.require_category(category_id)
        if new_parent_id is not None:
            parent = self.require_category(new_parent_id)
            if parent.company_id != category.company_id:
                raise NotFoundError(category_not_found(new_parent_id))
            if parent.account_type is not category.account_type:
                raise TypeMismatchError(
                    f"Cannot move {category.account_type.value} category '{category.name}' "
                    f"under {parent.account_type.value} category '{parent.name}'"
                )
            if self.is_descendant_or_self(category.company_id, new_parent_id, category.id):
                raise CircularDependencyError(
                    f"Cannot move '{category.name}' under itself or one of its descendants"
                )

        self._ensure_unique_name(
            category.company_id,
            category.name,
            category.account_type,
            new_parent_id,
            exclude_id=category.id,
        )
        self.db.set_category_parent(category_id, new_parent_id)

    def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Args:
            category_id: Category ID to delete

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If it has children, journal lines or bank transactions
        """
        self.require_category(category_id)
        counts = self.db.get_category_dependent_counts(category_id)
        if any(counts.values()):
            raise DependencyError(
                category_delete_blocked(
                    category_id,
                    counts["children"],
                    counts["journal_lines"],
                    counts["bank_transactions"],
                )
            )
        self.db.delete_category(category_id)

    def is_descendant_or_self(self, company_id: int, candidate_id: int, ancestor_id: int) -> bool:
        """Check whether candidate_id is ancestor_id or lies below it.

        Walks the parent chain from candidate_id with a visited set, so a
        corrupted hierarchy cannot loop forever.
        """
        parents = {c.id: c.parent_id for c in self.db.list_all_categories(company_id)}
        visited: set[int] = set()
        current: Optional[int] = candidate_id
        while current is not None and current not in visited:
            if current == ancestor_id:
                return True
            visited.add(current)
            current = parents.get(current)
        return False

    def _ensure_unique_name(
        self,
        company_id: int,
        name: str,
        account_type: AccountType,
        parent_id: Optional[int],
        exclude_id: Optional[int] = None,
    ) -> None:
        wanted = name.lower()
        for cat in self.db.list_all_categories(company_id):
            if cat.id == exclude_id:
                continue
            if (
                cat.account_type is account_type
                and cat.parent_id == parent_id
                and cat.name.lower() == wanted
            ):
                raise ConflictError(duplicate_category_name(name, account_type.value))

    @staticmethod
    def _clean_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Category name must be {MAX_NAME_LENGTH} characters or less"
            )
        return name

    @staticmethod
    def _parse_type(account_type: "AccountType | str") -> AccountType:
        try:
            return AccountType.parse(account_type)
        except ValueError as e:
            raise ValidationError(str(e)) from e
