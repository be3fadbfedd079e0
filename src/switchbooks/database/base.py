"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from switchbooks.domain.entities import (
    AccountType,
    AutomationRule,
    AutomationType,
    Category,
    Company,
    ConditionType,
    JournalLine,
    JournalLineDraft,
    ManualJournalLine,
    Payee,
    Transaction,
    TransactionStatus,
)


class Database(ABC):
    """Abstract database interface for switchbooks."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company operations
    @abstractmethod
    def create_company(self, name: str) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def get_company_by_name(self, name: str) -> Optional[Company]:
        """Get company by exact name."""
        pass

    @abstractmethod
    def list_companies(self) -> list[Company]:
        """List all companies."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        company_id: int,
        name: str,
        account_type: AccountType,
        parent_id: Optional[int] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_path(self, company_id: int, path: str) -> Optional[Category]:
        """Get category by path (e.g., 'Operating Expenses > Software')."""
        pass

    @abstractmethod
    def list_categories(self, company_id: int, parent_id: Optional[int] = None) -> list[Category]:
        """List categories directly under a parent (roots when parent_id is None)."""
        pass

    @abstractmethod
    def list_all_categories(self, company_id: int) -> list[Category]:
        """List every category of a company, regardless of depth."""
        pass

    @abstractmethod
    def get_category_tree(self, company_id: int) -> list[dict[str, Any]]:
        """Get full category tree with hierarchy.

        Returns a list of dictionaries with category data and nested 'children' lists.
        This structure is used for hierarchical display and is kept as dict for convenience.
        """
        pass

    @abstractmethod
    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        account_type: Optional[AccountType] = None,
    ) -> None:
        """Update category name and/or type."""
        pass

    @abstractmethod
    def set_category_parent(self, category_id: int, parent_id: Optional[int]) -> None:
        """Re-parent a category (None moves it to the top level)."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category and clear pre-selections that reference it."""
        pass

    @abstractmethod
    def get_category_dependent_counts(self, category_id: int) -> dict[str, int]:
        """Count data that blocks deleting a category.

        Returns a dict with 'children', 'journal_lines' and 'bank_transactions'.
        """
        pass

    # Payee operations
    @abstractmethod
    def create_payee(self, company_id: int, name: str) -> int:
        """Create a payee. Returns payee ID."""
        pass

    @abstractmethod
    def get_payee(self, payee_id: int) -> Optional[Payee]:
        """Get payee by ID."""
        pass

    @abstractmethod
    def list_payees(self, company_id: int) -> list[Payee]:
        """List payees of a company ordered by name."""
        pass

    @abstractmethod
    def update_payee_name(self, payee_id: int, name: str) -> None:
        """Rename a payee."""
        pass

    @abstractmethod
    def delete_payee(self, payee_id: int) -> None:
        """Delete a payee and clear transaction and manual journal references to it."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        company_id: int,
        bank_account_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        payee_id: Optional[int] = None,
    ) -> int:
        """Create an imported transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        company_id: int,
        status: Optional[TransactionStatus] = None,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters."""
        pass

    @abstractmethod
    def update_transaction_selection(
        self, transaction_id: int, category_id: Optional[int], payee_id: Optional[int]
    ) -> None:
        """Store the category/payee pre-selection of an imported transaction."""
        pass

    # Journal operations
    @abstractmethod
    def post_transaction(
        self,
        transaction_id: int,
        category_id: Optional[int],
        payee_id: Optional[int],
        lines: list[JournalLineDraft],
    ) -> list[int]:
        """Write journal lines and mark the transaction posted, atomically.

        Returns the IDs of the created journal lines.
        """
        pass

    @abstractmethod
    def unpost_transaction(self, transaction_id: int) -> int:
        """Remove journal lines and mark the transaction imported, atomically.

        Returns the number of journal lines removed.
        """
        pass

    @abstractmethod
    def get_journal_lines(self, transaction_id: int) -> list[JournalLine]:
        """Get the journal lines of one transaction."""
        pass

    @abstractmethod
    def list_journal_lines(self, company_id: int) -> list[JournalLine]:
        """List every journal line of a company."""
        pass

    # Manual journal operations
    @abstractmethod
    def create_manual_journal_lines(
        self,
        company_id: int,
        reference: str,
        date: date,
        lines: list[JournalLineDraft],
        description: Optional[str] = None,
        payee_id: Optional[int] = None,
    ) -> list[int]:
        """Write the lines of one manual journal entry, atomically.

        Returns the IDs of the created lines.
        """
        pass

    @abstractmethod
    def list_manual_journal_lines(
        self, company_id: int, reference: Optional[str] = None
    ) -> list[ManualJournalLine]:
        """List manual journal lines, optionally for one reference."""
        pass

    @abstractmethod
    def delete_manual_journal_lines(self, company_id: int, reference: str) -> int:
        """Delete the lines of one manual journal entry. Returns the number removed."""
        pass

    # Automation rule operations
    @abstractmethod
    def create_automation_rule(
        self,
        company_id: int,
        name: str,
        automation_type: AutomationType,
        condition_type: ConditionType,
        condition_value: str,
        action_value: str,
        auto_add: bool = False,
        enabled: bool = True,
    ) -> int:
        """Create an automation rule. Returns rule ID."""
        pass

    @abstractmethod
    def get_automation_rule(self, rule_id: int) -> Optional[AutomationRule]:
        """Get automation rule by ID."""
        pass

    @abstractmethod
    def list_automation_rules(
        self, company_id: int, automation_type: Optional[AutomationType] = None
    ) -> list[AutomationRule]:
        """List automation rules in evaluation order."""
        pass

    @abstractmethod
    def set_automation_rule_enabled(self, rule_id: int, enabled: bool) -> None:
        """Enable or disable an automation rule."""
        pass

    @abstractmethod
    def delete_automation_rule(self, rule_id: int) -> None:
        """Delete an automation rule."""
        pass
