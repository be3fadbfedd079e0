"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal

from switchbooks.database.base import Database
from switchbooks.domain.entities import (
    BANK_ACCOUNT_TYPES,
    Category,
    Transaction,
    TransactionStatus,
)
from switchbooks.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
    payee_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for managing imported bank transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_transaction(
        self,
        company_id: int,
        bank_account_id: int,
        date: date,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> int:
        """Record an imported bank transaction.

        Args:
            company_id: Owning company ID
            bank_account_id: Category ID of the bank or card account
            date: Transaction date
            amount: Signed amount as imported (negative is money out)
            description: Optional bank description

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If the bank account doesn't exist in this company
            ValidationError: If the account is not a bank-like account or the amount is zero
        """
        self.require_bank_account(company_id, bank_account_id)
        if amount == 0:
            raise ValidationError("Transaction amount must not be zero")
        return self.db.create_transaction(
            company_id=company_id,
            bank_account_id=bank_account_id,
            date=date,
            amount=amount,
            description=description,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> Transaction:
        """Get transaction by ID, raising NotFoundError when missing."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def list_transactions(
        self,
        company_id: int,
        status: Optional[TransactionStatus] = None,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with filters.

        Args:
            company_id: Owning company ID
            status: Optional status filter (imported or posted)
            bank_account_id: Optional bank account filter
            start_date: Optional start date filter
            end_date: Optional end date filter

        Returns:
            List of transaction entities ordered by date
        """
        return self.db.list_transactions(
            company_id,
            status=status,
            bank_account_id=bank_account_id,
            start_date=start_date,
            end_date=end_date,
        )

    def set_selection(
        self,
        transaction_id: int,
        category_id: Optional[int],
        payee_id: Optional[int],
    ) -> None:
        """Pre-select the category and payee of an imported transaction.

        Raises:
            NotFoundError: If the transaction, category or payee doesn't exist
            ValidationError: If the transaction is already posted
        """
        txn = self.require_transaction(transaction_id)
        if txn.is_posted:
            raise ValidationError(
                f"Transaction {transaction_id} is already posted; undo it before changing it"
            )
        if category_id is not None:
            category = self.db.get_category(category_id)
            if category is None or category.company_id != txn.company_id:
                raise NotFoundError(category_not_found(category_id))
        if payee_id is not None:
            payee = self.db.get_payee(payee_id)
            if payee is None or payee.company_id != txn.company_id:
                raise NotFoundError(payee_not_found(payee_id))
        self.db.update_transaction_selection(transaction_id, category_id, payee_id)

    def require_bank_account(self, company_id: int, bank_account_id: int) -> Category:
        """Get a bank or card account of a company.

        Raises:
            NotFoundError: If the account doesn't exist in this company
            ValidationError: If the account type cannot hold bank transactions
        """
        account = self.db.get_category(bank_account_id)
        if account is None or account.company_id != company_id:
            raise NotFoundError(category_not_found(bank_account_id))
        if account.account_type not in BANK_ACCOUNT_TYPES:
            raise ValidationError(
                f"Category '{account.name}' is {account.account_type.value}; "
                "transactions can only be imported into Asset, Liability, "
                "Bank Account or Credit Card accounts"
            )
        return account
