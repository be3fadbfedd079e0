"""Execution of validated operations against the category and payee stores."""

from typing import Any, Optional, assert_never

from sqlalchemy.exc import SQLAlchemyError

from switchbooks.config.logging import get_logger
from switchbooks.database.base import Database
from switchbooks.domain.category import CategoryService
from switchbooks.domain.entities import AccountType, Category, Payee
from switchbooks.domain.errors import (
    CircularDependencyError,
    ConflictError,
    DependencyError,
    DomainError,
    ErrorCode,
    NotFoundError,
    TypeMismatchError,
    category_not_found,
    category_path_not_found,
    payee_not_found,
)
from switchbooks.domain.payee import PayeeService
from switchbooks.operations.types import (
    CATEGORY_OPERATIONS,
    PAYEE_OPERATIONS,
    BatchResult,
    CreateCategory,
    CreatePayee,
    DeleteCategory,
    DeletePayee,
    MoveCategory,
    Operation,
    OperationParseError,
    OperationResult,
    Snapshot,
    UpdateCategory,
    UpdatePayee,
    parse_batch,
    parse_operation,
)
from switchbooks.operations.validator import validate_batch, validate_operation

logger = get_logger(__name__)

_OPERATION_CLASSES = CATEGORY_OPERATIONS + PAYEE_OPERATIONS

RETRY_SUGGESTIONS = {
    ErrorCode.CREATION_FAILED: [
        "Check that the name is unique within its type and parent scope",
        "Try again; the data may have changed since the operation was proposed",
    ],
    ErrorCode.UPDATE_FAILED: [
        "Check that the target still exists and the new values are valid",
        "Try again; the data may have changed since the operation was proposed",
    ],
    ErrorCode.DELETION_FAILED: [
        "Check that the target still exists and nothing depends on it",
        "Try again; the data may have changed since the operation was proposed",
    ],
    ErrorCode.MOVE_FAILED: [
        "Check that both the category and the new parent still exist",
        "Try again; the data may have changed since the operation was proposed",
    ],
}

TAXONOMY_SUGGESTIONS = {
    ErrorCode.CATEGORY_NOT_FOUND: "Check that the category exists and try again",
    ErrorCode.PAYEE_NOT_FOUND: "Check that the payee exists and try again",
    ErrorCode.DUPLICATE_NAME: "Use a different name or update the existing category",
    ErrorCode.DUPLICATE_PAYEE: "Use the existing payee or choose a different name",
    ErrorCode.CIRCULAR_DEPENDENCY: "Choose a parent that is not a descendant of the category",
    ErrorCode.TYPE_MISMATCH: "Parent and child categories must have the same type",
    ErrorCode.HAS_DEPENDENTS: "Move or delete the dependent data first",
}


def _failure_code(operation: Operation) -> str:
    if isinstance(operation, (CreateCategory, CreatePayee)):
        return ErrorCode.CREATION_FAILED
    if isinstance(operation, (UpdateCategory, UpdatePayee)):
        return ErrorCode.UPDATE_FAILED
    if isinstance(operation, (DeleteCategory, DeletePayee)):
        return ErrorCode.DELETION_FAILED
    return ErrorCode.MOVE_FAILED


def _translate(error: DomainError, operation: Operation) -> str:
    """Map a store-level domain error onto the validator's error codes."""
    is_payee = isinstance(operation, PAYEE_OPERATIONS)
    if isinstance(error, CircularDependencyError):
        return ErrorCode.CIRCULAR_DEPENDENCY
    if isinstance(error, TypeMismatchError):
        return ErrorCode.TYPE_MISMATCH
    if isinstance(error, NotFoundError):
        return ErrorCode.PAYEE_NOT_FOUND if is_payee else ErrorCode.CATEGORY_NOT_FOUND
    if isinstance(error, ConflictError):
        return ErrorCode.DUPLICATE_PAYEE if is_payee else ErrorCode.DUPLICATE_NAME
    if isinstance(error, DependencyError):
        return ErrorCode.HAS_DEPENDENTS
    return _failure_code(operation)


class OperationExecutor:
    """Validates and applies assistant operations for one company.

    Every call fetches a fresh snapshot before validating. Batches stop at
    the first failed operation; operations before it stay applied.
    """

    def __init__(self, db: Database, company_id: Optional[int]):
        """Initialize operation executor.

        Args:
            db: Database instance
            company_id: Company the operations apply to (None when there is no tenant context)
        """
        self.db = db
        self.company_id = company_id
        self.categories = CategoryService(db)
        self.payees = PayeeService(db)

    def snapshot(self) -> Snapshot:
        """Fetch the company's current categories and payees."""
        assert self.company_id is not None
        return Snapshot(
            categories=tuple(self.db.list_all_categories(self.company_id)),
            payees=tuple(self.db.list_payees(self.company_id)),
        )

    def has_company(self) -> bool:
        return self.company_id is not None and self.db.get_company(self.company_id) is not None

    def validate(self, operation: "Operation | dict[str, Any]") -> OperationResult:
        """Validate without executing.

        Returns:
            OperationResult whose data holds the full validation result
        """
        try:
            if not self.has_company():
                return self._missing_company()
            op = self._coerce(operation)
            validation = validate_operation(op, self.snapshot())
        except OperationParseError as e:
            return self._invalid(str(e))
        except (DomainError, SQLAlchemyError) as e:
            return self._store_failure("Validation", e)
        except Exception as e:
            logger.exception("validation_unexpected_error")
            return self._store_failure("Validation", e)
        return OperationResult(
            success=validation.is_valid,
            message="Operation is valid" if validation.is_valid else ". ".join(validation.errors),
            data=validation.to_dict(),
            error=None if validation.is_valid else ErrorCode.VALIDATION_FAILED,
            reason=validation.reason,
            suggestions=list(validation.suggestions),
        )

    def validate_batch(self, operations: Any) -> OperationResult:
        """Validate a batch without executing it."""
        try:
            if not self.has_company():
                return self._missing_company()
            ops = self._coerce_batch(operations)
            validation = validate_batch(ops, self.snapshot())
        except OperationParseError as e:
            return self._invalid(str(e))
        except (DomainError, SQLAlchemyError) as e:
            return self._store_failure("Batch validation", e)
        except Exception as e:
            logger.exception("batch_validation_unexpected_error")
            return self._store_failure("Batch validation", e)
        return OperationResult(
            success=validation.is_valid,
            message=(
                f"Batch of {len(ops)} operations is valid"
                if validation.is_valid
                else ". ".join(validation.errors)
            ),
            data=validation.to_dict(),
            error=None if validation.is_valid else ErrorCode.VALIDATION_FAILED,
            reason=validation.reason,
            suggestions=list(validation.suggestions),
        )

    def execute(self, operation: "Operation | dict[str, Any]") -> OperationResult:
        """Validate one operation against fresh data and apply it.

        Args:
            operation: Parsed operation or a raw ``{"action", "params"}`` payload

        Returns:
            OperationResult; failures are reported, never raised
        """
        try:
            if not self.has_company():
                return self._missing_company()
            op = self._coerce(operation)
        except OperationParseError as e:
            return self._invalid(str(e))
        except SQLAlchemyError as e:
            return self._store_failure("Operation", e)

        try:
            snapshot = self.snapshot()
            validation = validate_operation(op, snapshot)
            if not validation.is_valid:
                logger.info(
                    "operation_rejected",
                    action=op.action,
                    reason=validation.reason,
                    errors=validation.errors,
                )
                return OperationResult(
                    success=False,
                    message=". ".join(validation.errors),
                    error=ErrorCode.VALIDATION_FAILED,
                    reason=validation.reason,
                    suggestions=list(validation.suggestions)
                    or ["Correct the operation and try again"],
                )
            result = self._apply(op, snapshot)
            result.suggestions = list(validation.suggestions)
        except (DomainError, SQLAlchemyError) as e:
            code = _translate(e, op) if isinstance(e, DomainError) else _failure_code(op)
            logger.warning("operation_failed", action=op.action, error=code, detail=str(e))
            suggestions = list(RETRY_SUGGESTIONS.get(code, []))
            if code in TAXONOMY_SUGGESTIONS:
                suggestions.append(TAXONOMY_SUGGESTIONS[code])
            return OperationResult(
                success=False,
                message=f"Failed to {op.action.replace('_', ' ')}: {e}",
                error=code,
                suggestions=suggestions,
            )
        except Exception as e:
            logger.exception("operation_unexpected_error", action=op.action)
            return OperationResult(
                success=False,
                message=f"Unexpected error during {op.action}: {e}",
                error=ErrorCode.UNEXPECTED_ERROR,
                suggestions=["Please try again", "If the problem persists, report it"],
            )

        logger.info("operation_executed", action=op.action, success=True)
        return result

    def execute_batch(
        self, operations: "list[Operation] | list[dict[str, Any]] | dict[str, Any]"
    ) -> BatchResult:
        """Validate a whole batch, then apply it in order until the first failure.

        Args:
            operations: Parsed operations, a list of payloads, or a
                ``{"action": "batch_execute", "operations": [...]}`` payload

        Returns:
            BatchResult with per-operation results, ``completed_operations``
            and, on failure, the 0-based ``failed_at`` index
        """
        try:
            if not self.has_company():
                missing = self._missing_company()
                return BatchResult(
                    success=False,
                    message=missing.message,
                    suggestions=missing.suggestions,
                )
            ops = self._coerce_batch(operations)
            validation = validate_batch(ops, self.snapshot())
        except OperationParseError as e:
            return BatchResult(
                success=False,
                message=f"Invalid batch: {e}",
                suggestions=["Check the batch payload format and try again"],
            )
        except (DomainError, SQLAlchemyError) as e:
            failure = self._store_failure("Batch execution", e)
            return BatchResult(
                success=False, message=failure.message, suggestions=failure.suggestions
            )
        except Exception as e:
            logger.exception("batch_unexpected_error")
            failure = self._store_failure("Batch execution", e)
            return BatchResult(
                success=False, message=failure.message, suggestions=failure.suggestions
            )

        if not validation.is_valid:
            logger.info("batch_rejected", operations=len(ops), errors=validation.errors)
            return BatchResult(
                success=False,
                message=f"Batch validation failed: {'. '.join(validation.errors)}",
                suggestions=list(validation.suggestions) or ["Correct the batch and try again"],
            )

        results: list[OperationResult] = []
        for index, op in enumerate(ops):
            result = self.execute(op)
            results.append(result)
            if not result.success:
                logger.warning(
                    "batch_stopped",
                    failed_at=index,
                    completed=index,
                    error=result.error,
                )
                return BatchResult(
                    success=False,
                    message=f"Batch failed at operation {index + 1}: {result.message}",
                    results=results,
                    completed_operations=index,
                    failed_at=index,
                    suggestions=[
                        f"Operations 1-{index} were applied and were not rolled back"
                        if index
                        else "No operations were applied",
                    ],
                )

        logger.info("batch_executed", operations=len(ops))
        return BatchResult(
            success=True,
            message=f"Successfully completed {len(ops)} operations",
            results=results,
            completed_operations=len(ops),
        )

    # Dispatch

    def _apply(self, op: Operation, snapshot: Snapshot) -> OperationResult:
        assert self.company_id is not None
        if isinstance(op, CreateCategory):
            account_type = AccountType.parse(op.account_type or "")
            parent = self._create_parent(op, account_type, snapshot)
            name = (op.name or "").strip()
            category_id = self.categories.create_category(
                self.company_id,
                name,
                account_type,
                parent_id=parent.id if parent is not None else None,
            )
            return OperationResult(
                success=True,
                message=f'Successfully created category "{name}" in {account_type.value}',
                data=self._category_data(category_id),
            )
        if isinstance(op, UpdateCategory):
            target = self._target_category(op.category_id, op.category_name, snapshot)
            new_name = op.name.strip() if op.name is not None else None
            self.categories.update_category(
                target.id,
                name=new_name,
                account_type=op.account_type,
            )
            if new_name and new_name != target.name:
                message = f'Successfully updated category "{target.name}" to "{new_name}"'
            else:
                message = f'Successfully updated category "{target.name}"'
            return OperationResult(
                success=True,
                message=message,
                data={**self._category_data(target.id), "previousName": target.name},
            )
        if isinstance(op, DeleteCategory):
            target = self._target_category(op.category_id, op.category_name, snapshot)
            self.categories.delete_category(target.id)
            return OperationResult(
                success=True,
                message=f'Successfully deleted category "{target.name}"',
                data={"id": target.id, "name": target.name},
            )
        if isinstance(op, MoveCategory):
            target = self._target_category(op.category_id, op.category_name, snapshot)
            new_parent = self._move_parent(op, target, snapshot)
            self.categories.move_category(
                target.id, new_parent.id if new_parent is not None else None
            )
            where = f'under "{new_parent.name}"' if new_parent is not None else "to top level"
            return OperationResult(
                success=True,
                message=f'Successfully moved category "{target.name}" {where}',
                data=self._category_data(target.id),
            )
        if isinstance(op, CreatePayee):
            name = (op.name or "").strip()
            payee_id = self.payees.create_payee(self.company_id, name)
            return OperationResult(
                success=True,
                message=f'Successfully created payee "{name}"',
                data={"id": payee_id, "name": name},
            )
        if isinstance(op, UpdatePayee):
            payee = self._target_payee(op.payee_id, op.payee_name, snapshot)
            name = (op.name or "").strip()
            self.payees.rename_payee(payee.id, name)
            return OperationResult(
                success=True,
                message=f'Successfully renamed payee "{payee.name}" to "{name}"',
                data={"id": payee.id, "name": name, "previousName": payee.name},
            )
        if isinstance(op, DeletePayee):
            payee = self._target_payee(op.payee_id, op.payee_name, snapshot)
            self.payees.delete_payee(payee.id)
            return OperationResult(
                success=True,
                message=f'Successfully deleted payee "{payee.name}"',
                data={"id": payee.id, "name": payee.name},
            )
        assert_never(op)

    def _coerce(self, operation: "Operation | dict[str, Any]") -> Operation:
        if isinstance(operation, _OPERATION_CLASSES):
            return operation
        return parse_operation(operation)

    def _coerce_batch(self, operations: Any) -> list[Operation]:
        if isinstance(operations, list) and all(
            isinstance(op, _OPERATION_CLASSES) for op in operations
        ):
            return list(operations)
        return parse_batch(operations)

    def _target_category(
        self, category_id: Optional[int], category_name: Optional[str], snapshot: Snapshot
    ) -> Category:
        if category_id is not None:
            target = snapshot.category(category_id)
            if target is None:
                raise NotFoundError(category_not_found(category_id))
            return target
        target = snapshot.category_named(category_name or "")
        if target is None:
            raise NotFoundError(category_path_not_found(category_name or ""))
        return target

    def _target_payee(
        self, payee_id: Optional[int], payee_name: Optional[str], snapshot: Snapshot
    ) -> Payee:
        if payee_id is not None:
            target = snapshot.payee(payee_id)
            if target is None:
                raise NotFoundError(payee_not_found(payee_id))
            return target
        target = snapshot.payee_named(payee_name or "")
        if target is None:
            raise NotFoundError(f"Payee '{payee_name}' not found")
        return target

    @staticmethod
    def _create_parent(
        op: CreateCategory, account_type: AccountType, snapshot: Snapshot
    ) -> Optional[Category]:
        if op.parent_id is not None:
            return snapshot.category(op.parent_id)
        if op.parent_name:
            # An unknown parent name was only a warning: create at the top level
            return snapshot.category_named(op.parent_name, account_type)
        return None

    @staticmethod
    def _move_parent(op: MoveCategory, target: Category, snapshot: Snapshot) -> Optional[Category]:
        if op.new_parent_id is not None:
            return snapshot.category(op.new_parent_id)
        if op.new_parent_name:
            return snapshot.category_named(op.new_parent_name, target.account_type)
        return None

    def _category_data(self, category_id: int) -> dict[str, Any]:
        category = self.categories.require_category(category_id)
        return {
            "id": category.id,
            "name": category.name,
            "type": category.account_type.value,
            "parentId": category.parent_id,
            "path": self.categories.format_category_path(category.id),
        }

    @staticmethod
    def _missing_company() -> OperationResult:
        return OperationResult(
            success=False,
            message="No company context available",
            error=ErrorCode.MISSING_COMPANY,
            suggestions=["Select a company with --company or SWITCHBOOKS_COMPANY"],
        )

    @staticmethod
    def _store_failure(stage: str, error: Exception) -> OperationResult:
        """Result for a failure while loading the data an operation is checked against."""
        logger.warning("store_read_failed", stage=stage, detail=str(error))
        return OperationResult(
            success=False,
            message=f"{stage} failed: {error}",
            error=ErrorCode.UNEXPECTED_ERROR,
            suggestions=[
                "Please try again; no changes were made",
                "If the problem persists, report it",
            ],
        )

    @staticmethod
    def _invalid(message: str) -> OperationResult:
        return OperationResult(
            success=False,
            message=message,
            error=ErrorCode.INVALID_OPERATION,
            suggestions=[
                "Supported operations: create_category, update_category, delete_category, "
                "move_category, create_payee, update_payee, delete_payee"
            ],
        )
