"""Structured operations proposed by the assistant: parsing, validation, execution."""

from switchbooks.operations.executor import OperationExecutor
from switchbooks.operations.types import (
    BatchResult,
    OperationResult,
    Snapshot,
    ValidationResult,
    parse_batch,
    parse_operation,
)
from switchbooks.operations.validator import validate_batch, validate_operation

__all__ = [
    "BatchResult",
    "OperationExecutor",
    "OperationResult",
    "Snapshot",
    "ValidationResult",
    "parse_batch",
    "parse_operation",
    "validate_batch",
    "validate_operation",
]
