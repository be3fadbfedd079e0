"""Pre-flight validation of structured operations.

Every check runs against a ``Snapshot`` of the company's categories and
payees. Nothing here touches the database; the executor fetches a fresh
snapshot before each call.
"""

import re
from typing import Optional, assert_never

from switchbooks.domain.entities import AccountType, Category, Payee
from switchbooks.domain.errors import ErrorCode
from switchbooks.operations.similarity import find_similar
from switchbooks.operations.types import (
    CreateCategory,
    CreatePayee,
    DeleteCategory,
    DeletePayee,
    MoveCategory,
    Operation,
    Snapshot,
    UpdateCategory,
    UpdatePayee,
    ValidationResult,
)

MAX_BATCH_SIZE = 10
MAX_NAME_LENGTH = 255

_PROBLEMATIC_CHARACTERS = re.compile(r'[<>"/\\|?*\x00-\x1f]')


def has_problematic_characters(name: str) -> bool:
    """Characters that tend to break exports and reports."""
    return bool(_PROBLEMATIC_CHARACTERS.search(name))


def validate_operation(operation: Operation, snapshot: Snapshot) -> ValidationResult:
    """Validate one operation against a snapshot.

    Args:
        operation: Parsed operation
        snapshot: Current categories and payees of the company

    Returns:
        ValidationResult; never raises for bad input
    """
    result = ValidationResult()
    if isinstance(operation, CreateCategory):
        _validate_create_category(operation, snapshot, result)
    elif isinstance(operation, UpdateCategory):
        _validate_update_category(operation, snapshot, result)
    elif isinstance(operation, DeleteCategory):
        _validate_delete_category(operation, snapshot, result)
    elif isinstance(operation, MoveCategory):
        _validate_move_category(operation, snapshot, result)
    elif isinstance(operation, CreatePayee):
        _validate_create_payee(operation, snapshot, result)
    elif isinstance(operation, UpdatePayee):
        _validate_update_payee(operation, snapshot, result)
    elif isinstance(operation, DeletePayee):
        _validate_delete_payee(operation, snapshot, result)
    else:
        assert_never(operation)
    return result


def validate_batch(operations: list[Operation], snapshot: Snapshot) -> ValidationResult:
    """Validate a batch: size limits, each operation, and repeated create names.

    Every operation is checked against the same snapshot, so an operation
    cannot rely on something an earlier one in the batch creates, except
    where that only produces a warning (an unknown ``parent_name``).
    """
    result = ValidationResult()
    if not operations:
        result.add_error(
            "No operations provided",
            ErrorCode.VALIDATION_FAILED,
            "Provide at least one operation to execute",
        )
        return result
    if len(operations) > MAX_BATCH_SIZE:
        result.add_error(
            f"Too many operations in batch (maximum {MAX_BATCH_SIZE})",
            ErrorCode.VALIDATION_FAILED,
            "Split into smaller batches or execute operations individually",
        )
        return result

    created: set[tuple[str, ...]] = set()
    for index, operation in enumerate(operations, start=1):
        label = f"Operation {index} ({operation.action})"
        single = validate_operation(operation, snapshot)
        for message, reason in zip(single.errors, single.reasons):
            result.add_error(f"{label}: {message}", reason)
        result.warnings.extend(f"{label}: {w}" for w in single.warnings)
        result.suggestions.extend(f"Operation {index}: {s}" for s in single.suggestions)

        key = _create_key(operation)
        if key is None:
            continue
        if key in created:
            reason = (
                ErrorCode.DUPLICATE_PAYEE
                if isinstance(operation, CreatePayee)
                else ErrorCode.DUPLICATE_NAME
            )
            result.add_error(
                f"{label}: Duplicate name \"{(operation.name or '').strip()}\" within batch",
                reason,
                f"Operation {index}: Remove the repeated create or use a different name",
            )
        created.add(key)
    return result


def _create_key(operation: Operation) -> Optional[tuple[str, ...]]:
    if isinstance(operation, CreateCategory) and operation.name:
        account_type = (operation.account_type or "").strip().lower()
        return ("category", account_type, operation.name.strip().lower())
    if isinstance(operation, CreatePayee) and operation.name:
        return ("payee", operation.name.strip().lower())
    return None


# Categories


def _clean_name(
    name: Optional[str], result: ValidationResult, entity: str = "Category"
) -> Optional[str]:
    if name is None:
        result.add_error(
            f"{entity} name is required",
            ErrorCode.VALIDATION_FAILED,
            f"Please provide a {entity.lower()} name",
        )
        return None
    trimmed = name.strip()
    if not trimmed:
        result.add_error(
            f"{entity} name cannot be empty",
            ErrorCode.VALIDATION_FAILED,
            f"Please provide a non-empty {entity.lower()} name",
        )
        return None
    return trimmed


def _check_name_texture(name: str, result: ValidationResult, entity: str = "Category") -> None:
    if has_problematic_characters(name):
        result.add_warning(
            f"{entity} name contains potentially problematic characters",
            "Consider using only letters, numbers, spaces, and common punctuation",
        )
    if len(name) > MAX_NAME_LENGTH:
        result.add_error(
            f"{entity} name is too long (maximum {MAX_NAME_LENGTH} characters)",
            ErrorCode.VALIDATION_FAILED,
            f"Please shorten the {entity.lower()} name",
        )


def _parse_type(value: Optional[str], result: ValidationResult) -> Optional[AccountType]:
    valid = f"Valid types: {', '.join(AccountType.values())}"
    if value is None or not value.strip():
        result.add_error("Category type is required", ErrorCode.VALIDATION_FAILED, valid)
        return None
    try:
        return AccountType.parse(value)
    except ValueError:
        result.add_error(
            f'Invalid category type: "{value.strip()}"', ErrorCode.VALIDATION_FAILED, valid
        )
        return None


def _scope(
    snapshot: Snapshot,
    account_type: AccountType,
    parent_id: Optional[int],
    exclude_id: Optional[int] = None,
) -> list[Category]:
    return [
        cat
        for cat in snapshot.categories
        if cat.account_type is account_type and cat.parent_id == parent_id and cat.id != exclude_id
    ]


def _check_category_duplicates(
    name: str,
    scope: list[Category],
    account_type: AccountType,
    result: ValidationResult,
    check_similar: bool = True,
) -> bool:
    """Add a duplicate error or near-duplicate warnings. Returns False on an exact duplicate."""
    wanted = name.lower()
    for cat in scope:
        if cat.name.lower() == wanted:
            result.add_error(
                f'Category "{name}" already exists in {account_type.value}',
                ErrorCode.DUPLICATE_NAME,
                f'Use a different name like "{name} - New" or update the existing category',
            )
            return False
    if check_similar:
        similar = find_similar(name, scope, key=lambda c: c.name)
        if similar:
            result.add_warning(
                "Similar categories found: " + ", ".join(f'"{c.name}"' for c in similar),
                "Consider if you meant to reference an existing category",
            )
            result.suggestions.extend(f'Existing category: "{c.name}"' for c in similar)
    return True


def _resolve_category(
    category_id: Optional[int],
    category_name: Optional[str],
    snapshot: Snapshot,
    result: ValidationResult,
) -> Optional[Category]:
    if category_id is not None:
        category = snapshot.category(category_id)
        if category is None:
            result.add_error(
                f"Category {category_id} not found",
                ErrorCode.CATEGORY_NOT_FOUND,
                "Check that the category exists and try again",
            )
        return category
    if category_name is not None and category_name.strip():
        category = snapshot.category_named(category_name)
        if category is None:
            result.add_error(
                f'Category "{category_name.strip()}" not found',
                ErrorCode.CATEGORY_NOT_FOUND,
                "Check the category name spelling",
            )
            similar = find_similar(category_name, snapshot.categories, key=lambda c: c.name)
            result.suggestions.extend(f'Did you mean "{c.name}"?' for c in similar)
        return category
    result.add_error(
        "Category ID or name is required",
        ErrorCode.VALIDATION_FAILED,
        "Specify either categoryId or categoryName",
    )
    return None


def would_create_cycle(category_id: int, new_parent_id: int, snapshot: Snapshot) -> bool:
    """Whether new_parent_id is category_id itself or one of its descendants."""
    parents = {cat.id: cat.parent_id for cat in snapshot.categories}
    visited: set[int] = set()
    current: Optional[int] = new_parent_id
    # Each step visits a new node, so the walk ends within len(parents) + 1 steps
    while current is not None and current not in visited:
        if current == category_id:
            return True
        visited.add(current)
        current = parents.get(current)
    return False


def _validate_create_category(
    op: CreateCategory, snapshot: Snapshot, result: ValidationResult
) -> None:
    name = _clean_name(op.name, result)
    if name is None:
        return
    account_type = _parse_type(op.account_type, result)
    if account_type is None:
        return

    parent: Optional[Category] = None
    if op.parent_id is not None:
        parent = snapshot.category(op.parent_id)
        if parent is None:
            result.add_error(
                "Specified parent category does not exist",
                ErrorCode.CATEGORY_NOT_FOUND,
                "Create the parent category first or select a different parent",
            )
            return
    elif op.parent_name is not None and op.parent_name.strip():
        parent = snapshot.category_named(op.parent_name, account_type)
        if parent is not None:
            result.suggestions.append(f'Found parent category: "{parent.name}"')
        else:
            result.add_warning(
                f'Parent category "{op.parent_name.strip()}" not found',
                f'Create parent category "{op.parent_name.strip()}" first, '
                "or leave as top-level category",
            )

    if parent is not None and parent.account_type is not account_type:
        result.add_error(
            f'Parent category type "{parent.account_type.value}" does not match '
            f'child type "{account_type.value}"',
            ErrorCode.TYPE_MISMATCH,
            "Parent and child categories must have the same type",
        )
        return

    scope = _scope(snapshot, account_type, parent.id if parent is not None else None)
    if not _check_category_duplicates(name, scope, account_type, result):
        return
    _check_name_texture(name, result)


def _validate_update_category(
    op: UpdateCategory, snapshot: Snapshot, result: ValidationResult
) -> None:
    category = _resolve_category(op.category_id, op.category_name, snapshot, result)
    if category is None:
        return
    if op.name is None and op.account_type is None:
        result.add_error(
            "Nothing to update",
            ErrorCode.VALIDATION_FAILED,
            "Provide a new name, a new type, or both",
        )
        return

    new_type = category.account_type
    if op.account_type is not None:
        parsed = _parse_type(op.account_type, result)
        if parsed is None:
            return
        new_type = parsed
        if new_type is not category.account_type and (
            category.parent_id is not None or snapshot.children(category.id)
        ):
            result.add_error(
                f'Cannot change type of "{category.name}" to {new_type.value}: '
                "it has a parent or child categories",
                ErrorCode.TYPE_MISMATCH,
                "Move the category to the top level and move its children out first",
            )
            return

    new_name = category.name
    if op.name is not None:
        cleaned = _clean_name(op.name, result)
        if cleaned is None:
            return
        new_name = cleaned

    scope = _scope(snapshot, new_type, category.parent_id, exclude_id=category.id)
    if not _check_category_duplicates(
        new_name, scope, new_type, result, check_similar=op.name is not None
    ):
        return
    if op.name is not None:
        _check_name_texture(new_name, result)


def _validate_delete_category(
    op: DeleteCategory, snapshot: Snapshot, result: ValidationResult
) -> None:
    category = _resolve_category(op.category_id, op.category_name, snapshot, result)
    if category is None:
        return
    children = snapshot.children(category.id)
    if children:
        result.add_error(
            f'Cannot delete category "{category.name}" because it has '
            f"{len(children)} child categor{'ies' if len(children) != 1 else 'y'}",
            ErrorCode.HAS_DEPENDENTS,
            "Delete or move child categories first",
        )
        result.suggestions.append(
            "Child categories: " + ", ".join(f'"{c.name}"' for c in children)
        )
        return
    result.add_warning(
        f'Deleting category "{category.name}" will affect any transactions using this category',
        "Consider moving its transactions to another category first",
    )


def _validate_move_category(
    op: MoveCategory, snapshot: Snapshot, result: ValidationResult
) -> None:
    category = _resolve_category(op.category_id, op.category_name, snapshot, result)
    if category is None:
        return

    new_parent: Optional[Category] = None
    if op.new_parent_id is not None:
        new_parent = snapshot.category(op.new_parent_id)
        if new_parent is None:
            result.add_error(
                "New parent category does not exist",
                ErrorCode.CATEGORY_NOT_FOUND,
                "Create the parent category first or select a different parent",
            )
            return
    elif op.new_parent_name is not None and op.new_parent_name.strip():
        new_parent = snapshot.category_named(op.new_parent_name, category.account_type)
        if new_parent is None:
            result.add_error(
                f'Parent category "{op.new_parent_name.strip()}" not found',
                ErrorCode.CATEGORY_NOT_FOUND,
                "Check the parent category name or create it first",
            )
            return

    if new_parent is not None:
        if new_parent.account_type is not category.account_type:
            result.add_error(
                f'Cannot move "{category.name}" ({category.account_type.value}) under '
                f'"{new_parent.name}" ({new_parent.account_type.value})',
                ErrorCode.TYPE_MISMATCH,
                "Parent and child categories must have the same type",
            )
            return
        if would_create_cycle(category.id, new_parent.id, snapshot):
            result.add_error(
                "Cannot move category: this would create a circular dependency",
                ErrorCode.CIRCULAR_DEPENDENCY,
                "Choose a different parent that is not a descendant of the category being moved",
            )
            return

    new_parent_id = new_parent.id if new_parent is not None else None
    wanted = category.name.lower()
    for sibling in _scope(snapshot, category.account_type, new_parent_id, exclude_id=category.id):
        if sibling.name.lower() == wanted:
            where = f'under "{new_parent.name}"' if new_parent is not None else "at the top level"
            result.add_error(
                f'Category "{category.name}" already exists {where}',
                ErrorCode.DUPLICATE_NAME,
                "Rename one of the categories or choose a different parent",
            )
            return


# Payees


def _resolve_payee(
    payee_id: Optional[int],
    payee_name: Optional[str],
    snapshot: Snapshot,
    result: ValidationResult,
) -> Optional[Payee]:
    if payee_id is not None:
        payee = snapshot.payee(payee_id)
        if payee is None:
            result.add_error(
                f"Payee {payee_id} not found",
                ErrorCode.PAYEE_NOT_FOUND,
                "Check that the payee exists and try again",
            )
        return payee
    if payee_name is not None and payee_name.strip():
        payee = snapshot.payee_named(payee_name)
        if payee is None:
            result.add_error(
                f'Payee "{payee_name.strip()}" not found',
                ErrorCode.PAYEE_NOT_FOUND,
                "Check the payee name spelling",
            )
            similar = find_similar(payee_name, snapshot.payees, key=lambda p: p.name)
            result.suggestions.extend(f'Did you mean "{p.name}"?' for p in similar)
        return payee
    result.add_error(
        "Payee ID or name is required",
        ErrorCode.VALIDATION_FAILED,
        "Specify either payeeId or payeeName",
    )
    return None


def _check_payee_name(
    name: str, snapshot: Snapshot, result: ValidationResult, exclude_id: Optional[int] = None
) -> None:
    others = [p for p in snapshot.payees if p.id != exclude_id]
    wanted = name.lower()
    for payee in others:
        if payee.name.lower() == wanted:
            result.add_error(
                f'Payee "{name}" already exists',
                ErrorCode.DUPLICATE_PAYEE,
                f'Use the existing payee "{payee.name}" or choose a different name',
            )
            return
    similar = find_similar(name, others, key=lambda p: p.name)
    if similar:
        result.add_warning(
            "Found similar payees: " + ", ".join(p.name for p in similar),
            "Consider if you meant to reference an existing payee",
        )
    _check_name_texture(name, result, entity="Payee")


def _validate_create_payee(op: CreatePayee, snapshot: Snapshot, result: ValidationResult) -> None:
    name = _clean_name(op.name, result, entity="Payee")
    if name is not None:
        _check_payee_name(name, snapshot, result)


def _validate_update_payee(op: UpdatePayee, snapshot: Snapshot, result: ValidationResult) -> None:
    name = _clean_name(op.name, result, entity="Payee")
    if name is None:
        return
    payee = _resolve_payee(op.payee_id, op.payee_name, snapshot, result)
    if payee is None:
        return
    _check_payee_name(name, snapshot, result, exclude_id=payee.id)


def _validate_delete_payee(op: DeletePayee, snapshot: Snapshot, result: ValidationResult) -> None:
    payee = _resolve_payee(op.payee_id, op.payee_name, snapshot, result)
    if payee is None:
        return
    result.add_warning(
        f'This will permanently delete the payee "{payee.name}"',
        "Transactions that used this payee will keep their amounts but lose the payee",
    )
