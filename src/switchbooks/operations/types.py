"""Structured operations proposed by the assistant, and their results.

Operations arrive as JSON-like payloads::

    {"action": "create_category", "params": {"name": "Rent", "type": "Expense"}}
    {"action": "batch_execute", "operations": [...]}

``parse_operation`` and ``parse_batch`` turn them into the closed set of
frozen dataclasses below. Field values are kept as given (untrimmed) so the
validator can report on them.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Mapping, Optional, Union

from switchbooks.domain.entities import Category, Payee
from switchbooks.domain.errors import ValidationError

BATCH_ACTION = "batch_execute"


class OperationParseError(ValidationError):
    """Payload is not a well-formed operation."""


@dataclass(frozen=True)
class CreateCategory:
    action: ClassVar[str] = "create_category"

    name: Optional[str] = None
    account_type: Optional[str] = None
    parent_id: Optional[int] = None
    parent_name: Optional[str] = None


@dataclass(frozen=True)
class UpdateCategory:
    action: ClassVar[str] = "update_category"

    category_id: Optional[int] = None
    category_name: Optional[str] = None
    name: Optional[str] = None
    account_type: Optional[str] = None


@dataclass(frozen=True)
class DeleteCategory:
    action: ClassVar[str] = "delete_category"

    category_id: Optional[int] = None
    category_name: Optional[str] = None


@dataclass(frozen=True)
class MoveCategory:
    action: ClassVar[str] = "move_category"

    category_id: Optional[int] = None
    category_name: Optional[str] = None
    new_parent_id: Optional[int] = None
    new_parent_name: Optional[str] = None


@dataclass(frozen=True)
class CreatePayee:
    action: ClassVar[str] = "create_payee"

    name: Optional[str] = None


@dataclass(frozen=True)
class UpdatePayee:
    action: ClassVar[str] = "update_payee"

    payee_id: Optional[int] = None
    payee_name: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class DeletePayee:
    action: ClassVar[str] = "delete_payee"

    payee_id: Optional[int] = None
    payee_name: Optional[str] = None


Operation = Union[
    CreateCategory,
    UpdateCategory,
    DeleteCategory,
    MoveCategory,
    CreatePayee,
    UpdatePayee,
    DeletePayee,
]

CATEGORY_OPERATIONS = (CreateCategory, UpdateCategory, DeleteCategory, MoveCategory)
PAYEE_OPERATIONS = (CreatePayee, UpdatePayee, DeletePayee)
OPERATION_TYPES: dict[str, type] = {
    op.action: op for op in CATEGORY_OPERATIONS + PAYEE_OPERATIONS
}

# payload param name -> (dataclass field, kind)
_PARAMS: dict[str, tuple[str, str]] = {
    "name": ("name", "str"),
    "type": ("account_type", "str"),
    "parent_id": ("parent_id", "id"),
    "parent_name": ("parent_name", "str"),
    "categoryId": ("category_id", "id"),
    "categoryName": ("category_name", "str"),
    "newParentId": ("new_parent_id", "id"),
    "newParentName": ("new_parent_name", "str"),
    "payeeId": ("payee_id", "id"),
    "payeeName": ("payee_name", "str"),
}


def _parse_id(param: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise OperationParseError(f"Parameter '{param}' must be an integer ID")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise OperationParseError(f"Parameter '{param}' must be an integer ID, got {value!r}")


def _parse_str(param: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise OperationParseError(f"Parameter '{param}' must be a string, got {value!r}")
    return value


def parse_operation(payload: Any) -> Operation:
    """Build an operation from a payload dict.

    Unknown params are ignored; params that don't apply to the action are
    ignored as well.

    Raises:
        OperationParseError: If the payload is not a dict, the action is
            unknown, or a param has the wrong type
    """
    if not isinstance(payload, Mapping):
        raise OperationParseError("Operation must be an object with 'action' and 'params'")
    action = payload.get("action")
    op_type = OPERATION_TYPES.get(action) if isinstance(action, str) else None
    if op_type is None:
        raise OperationParseError(
            f"Unknown operation: {action!r}. Supported operations: {', '.join(OPERATION_TYPES)}"
        )
    params = payload.get("params") or {}
    if not isinstance(params, Mapping):
        raise OperationParseError(f"'params' of {action} must be an object")

    allowed = {f.name for f in fields(op_type)}
    kwargs = {}
    for param, value in params.items():
        target = _PARAMS.get(param)
        if target is None or target[0] not in allowed:
            continue
        attr, kind = target
        kwargs[attr] = _parse_id(param, value) if kind == "id" else _parse_str(param, value)
    return op_type(**kwargs)


def parse_batch(payload: Any) -> list[Operation]:
    """Build the operations of a batch payload (or a bare list of operations).

    Raises:
        OperationParseError: If the payload or any operation is malformed
    """
    if isinstance(payload, Mapping):
        if payload.get("action") != BATCH_ACTION:
            raise OperationParseError(f"Batch payload must have action '{BATCH_ACTION}'")
        payload = payload.get("operations")
    if not isinstance(payload, list):
        raise OperationParseError("Batch 'operations' must be a list")

    operations = []
    for index, item in enumerate(payload):
        try:
            operations.append(parse_operation(item))
        except OperationParseError as e:
            raise OperationParseError(f"Operation {index + 1}: {e}") from e
    return operations


def is_batch_payload(payload: Any) -> bool:
    """Whether a decoded payload describes a batch rather than one operation."""
    return isinstance(payload, list) or (
        isinstance(payload, Mapping) and payload.get("action") == BATCH_ACTION
    )


@dataclass(frozen=True)
class Snapshot:
    """Categories and payees of one company, fetched right before validation."""

    categories: tuple[Category, ...] = ()
    payees: tuple[Payee, ...] = ()

    def category(self, category_id: Optional[int]) -> Optional[Category]:
        for cat in self.categories:
            if cat.id == category_id:
                return cat
        return None

    def category_named(self, name: str, account_type: Any = None) -> Optional[Category]:
        """First category with this name (case-insensitive), optionally of one type."""
        wanted = name.strip().lower()
        for cat in self.categories:
            if cat.name.lower() != wanted:
                continue
            if account_type is None or cat.account_type is account_type:
                return cat
        return None

    def children(self, category_id: int) -> list[Category]:
        return [cat for cat in self.categories if cat.parent_id == category_id]

    def payee(self, payee_id: Optional[int]) -> Optional[Payee]:
        for payee in self.payees:
            if payee.id == payee_id:
                return payee
        return None

    def payee_named(self, name: str) -> Optional[Payee]:
        wanted = name.strip().lower()
        for payee in self.payees:
            if payee.name.lower() == wanted:
                return payee
        return None


@dataclass
class ValidationResult:
    """Outcome of validating an operation.

    ``errors`` block execution, ``warnings`` don't. ``reasons`` holds one
    error code per error, in the same order.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def reason(self) -> Optional[str]:
        return self.reasons[0] if self.reasons else None

    def add_error(self, message: str, reason: str, suggestion: Optional[str] = None) -> None:
        self.errors.append(message)
        self.reasons.append(reason)
        if suggestion:
            self.suggestions.append(suggestion)

    def add_warning(self, message: str, suggestion: Optional[str] = None) -> None:
        self.warnings.append(message)
        if suggestion:
            self.suggestions.append(suggestion)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
            "reasons": list(self.reasons),
        }


@dataclass
class OperationResult:
    """Outcome of executing one operation."""

    success: bool
    message: str
    data: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    reason: Optional[str] = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.reason is not None:
            result["reason"] = self.reason
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        return result


@dataclass
class BatchResult:
    """Outcome of executing a batch, with partial-completion accounting."""

    success: bool
    message: str
    results: list[OperationResult] = field(default_factory=list)
    completed_operations: int = 0
    failed_at: Optional[int] = None
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "results": [r.to_dict() for r in self.results],
            "completedOperations": self.completed_operations,
        }
        if self.failed_at is not None:
            result["failedAt"] = self.failed_at
        if self.suggestions:
            result["suggestions"] = list(self.suggestions)
        return result
