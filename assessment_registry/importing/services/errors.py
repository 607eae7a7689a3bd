"""Domain exceptions for import and activation services."""

from __future__ import annotations

from ..constants import ImportIssueCode


class ImportServiceError(Exception):
    """Typed error used by import services to provide issue code and context."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        row_number: int | None = None,
        field_path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.row_number = row_number
        self.field_path = field_path


class MalformedInputError(ImportServiceError):
    """Raised when tabular text cannot be tokenized."""

    def __init__(self, message: str, *, row_number: int | None = None) -> None:
        super().__init__(ImportIssueCode.MALFORMED_INPUT, message, row_number=row_number)


class SchemaViolationError(ImportServiceError):
    """Raised when rows fail the declared field constraints of their import type."""


class ReferenceViolationError(ImportServiceError):
    """Raised when a referenced id does not and will not exist."""


class BatchWriteFailure(ImportServiceError):
    """Raised when the store rejects a batch of records."""

    def __init__(self, batch_index: int, message: str) -> None:
        super().__init__(
            ImportIssueCode.BATCH_WRITE_FAILURE,
            f"Batch {batch_index} failed: {message}",
        )
        self.batch_index = batch_index


class GateViolationError(ImportServiceError):
    """Raised when an activation gate blocks a status write."""

    def __init__(self, message: str, reasons: list[str]) -> None:
        super().__init__(ImportIssueCode.GATE_VIOLATION, message)
        self.reasons = list(reasons)


class InvalidStatusError(ImportServiceError):
    """Raised when a status value is not part of the entity's lifecycle."""

    def __init__(self, message: str, *, field_path: str | None = None) -> None:
        super().__init__(ImportIssueCode.INVALID_STATUS, message, field_path=field_path)
