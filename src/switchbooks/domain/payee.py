"""Payee domain service."""

from typing import Optional

from switchbooks.database.base import Database
from switchbooks.domain.entities import Payee
from switchbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_payee_name,
    payee_not_found,
)

MAX_NAME_LENGTH = 255


class PayeeService:
    """Service for managing payees."""

    def __init__(self, db: Database):
        """Initialize payee service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_payee(self, company_id: int, name: str) -> int:
        """Create a payee.

        Args:
            company_id: Owning company ID
            name: Payee name

        Returns:
            Payee ID

        Raises:
            ValidationError: If the name is blank or too long
            ConflictError: If the company already has a payee with that name
        """
        name = self._clean_name(name)
        self._ensure_unique_name(company_id, name)
        return self.db.create_payee(company_id=company_id, name=name)

    def get_payee(self, payee_id: int) -> Optional[Payee]:
        return self.db.get_payee(payee_id)

    def require_payee(self, payee_id: int) -> Payee:
        """Get payee by ID, raising NotFoundError when missing."""
        payee = self.db.get_payee(payee_id)
        if payee is None:
            raise NotFoundError(payee_not_found(payee_id))
        return payee

    def find_payee(self, company_id: int, name: str) -> Optional[Payee]:
        """Find a payee by case-insensitive name."""
        wanted = name.strip().lower()
        for payee in self.db.list_payees(company_id):
            if payee.name.lower() == wanted:
                return payee
        return None

    def list_payees(self, company_id: int) -> list[Payee]:
        """List payees.

        Args:
            company_id: Owning company ID

        Returns:
            List of payee entities ordered by name
        """
        return self.db.list_payees(company_id)

    def rename_payee(self, payee_id: int, name: str) -> None:
        """Rename a payee.

        Args:
            payee_id: Payee ID to rename
            name: New payee name

        Raises:
            NotFoundError: If the payee doesn't exist
            ConflictError: If another payee already has that name
        """
        payee = self.require_payee(payee_id)
        name = self._clean_name(name)
        self._ensure_unique_name(payee.company_id, name, exclude_id=payee_id)
        self.db.update_payee_name(payee_id, name)

    def delete_payee(self, payee_id: int) -> None:
        """Delete a payee. Transactions that referenced it lose their payee.

        Raises:
            NotFoundError: If the payee doesn't exist
        """
        self.require_payee(payee_id)
        self.db.delete_payee(payee_id)

    def _ensure_unique_name(
        self, company_id: int, name: str, exclude_id: Optional[int] = None
    ) -> None:
        existing = self.find_payee(company_id, name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(duplicate_payee_name(name))

    @staticmethod
    def _clean_name(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Payee name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Payee name must be {MAX_NAME_LENGTH} characters or less")
        return name
