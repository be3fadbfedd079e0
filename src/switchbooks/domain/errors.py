"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class CircularDependencyError(ValidationError):
    """Category move would make a category its own ancestor."""


class TypeMismatchError(ValidationError):
    """Parent and child categories have different account types."""


class UnbalancedEntryError(DomainError):
    """Journal lines of one transaction do not balance."""


class ErrorCode:
    """Error taxonomy shared by the operation validator and executor."""

    MISSING_COMPANY = "missing_company"
    INVALID_OPERATION = "invalid_operation"
    VALIDATION_FAILED = "validation_failed"
    CATEGORY_NOT_FOUND = "category_not_found"
    PAYEE_NOT_FOUND = "payee_not_found"
    DUPLICATE_NAME = "duplicate_name"
    DUPLICATE_PAYEE = "duplicate_payee"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    TYPE_MISMATCH = "type_mismatch"
    HAS_DEPENDENTS = "has_dependents"
    CREATION_FAILED = "creation_failed"
    UPDATE_FAILED = "update_failed"
    DELETION_FAILED = "deletion_failed"
    MOVE_FAILED = "move_failed"
    UNEXPECTED_ERROR = "unexpected_error"


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_path_not_found(path: str) -> str:
    """Return message for missing category by path."""
    return f"Category '{path}' not found"


def payee_not_found(payee_id: int) -> str:
    """Return message for missing payee by ID."""
    return f"Payee {payee_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def manual_entry_not_found(reference: str) -> str:
    """Return message for a missing manual journal entry."""
    return f"Manual journal entry '{reference}' not found"


def duplicate_category_name(name: str, account_type: str) -> str:
    """Return message for a category name already used in its scope."""
    return f"Category '{name}' already exists in {account_type} at this level"


def duplicate_payee_name(name: str) -> str:
    """Return message for a payee name already used in the company."""
    return f"Payee '{name}' already exists"


def category_delete_blocked(
    category_id: int, child_count: int, line_count: int, transaction_count: int
) -> str:
    """Return message when a category still has dependent data."""
    parts = []
    if child_count > 0:
        parts.append(f"{child_count} child categor{'ies' if child_count != 1 else 'y'}")
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} bank transaction{'s' if transaction_count != 1 else ''}"
        )
    return (
        f"Cannot delete category {category_id}: it has {', '.join(parts)}. "
        "Please move or delete them first."
    )
