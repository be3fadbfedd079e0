"""Company domain service."""

from typing import Optional

from switchbooks.database.base import Database
from switchbooks.domain.entities import Company
from switchbooks.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    company_not_found,
)


class CompanyService:
    """Service for managing companies (tenants)."""

    def __init__(self, db: Database):
        """Initialize company service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_company(self, name: str) -> int:
        """Create a new company.

        Args:
            name: Company name

        Returns:
            Company ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a company with that name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Company name is required")
        if self.db.get_company_by_name(name) is not None:
            raise ConflictError(f"Company '{name}' already exists")
        return self.db.create_company(name)

    def get_company(self, company_id: int) -> Optional[Company]:
        return self.db.get_company(company_id)

    def list_companies(self) -> list[Company]:
        return self.db.list_companies()

    def resolve_company(self, identifier: str) -> Company:
        """Resolve a company by ID or by name.

        Args:
            identifier: Numeric company ID or company name

        Returns:
            Company entity

        Raises:
            NotFoundError: If no company matches
        """
        identifier = identifier.strip()
        if identifier.isdigit():
            company = self.db.get_company(int(identifier))
            if company is not None:
                return company
        company = self.db.get_company_by_name(identifier)
        if company is None:
            if identifier.isdigit():
                raise NotFoundError(company_not_found(int(identifier)))
            raise NotFoundError(f"Company '{identifier}' not found")
        return company
