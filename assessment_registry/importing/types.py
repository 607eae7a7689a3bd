"""Typed contracts shared across importing services."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any, TypedDict

from .constants import ImportIssueSeverity, ImportIssueStage

ProgressCallback = Callable[[int, int, str], None]
ImportRecord = dict[str, str]


class ChangeLogEntry(TypedDict):
    timestamp: str
    author: str
    description: str


@dataclass(frozen=True)
class ValidationIssue:
    row_number: int
    field_path: str
    value: str
    code: str
    message: str
    severity: str = ImportIssueSeverity.ERROR
    stage: str = ImportIssueStage.VALIDATE

    @property
    def is_error(self) -> bool:
        return self.severity == ImportIssueSeverity.ERROR

    def display(self) -> str:
        if self.row_number:
            return f"Row {self.row_number}: {self.field_path}: {self.message}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class RowValidationResult:
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    valid_rows: int
    total_rows: int

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def invalid_row_numbers(self) -> set[int]:
        return {issue.row_number for issue in self.errors if issue.row_number}


@dataclass(frozen=True)
class ReferenceAnalysis:
    existing_ids: list[str] = field(default_factory=list)
    new_ids: list[str] = field(default_factory=list)
    missing_references: dict[str, list[str]] = field(default_factory=dict)

    @property
    def to_create(self) -> int:
        return len(self.new_ids)

    @property
    def to_update(self) -> int:
        return len(self.existing_ids)


@dataclass(frozen=True)
class ReferenceValidationResult:
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue]
    analysis: ReferenceAnalysis

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class ImportResult:
    success: bool = True
    rows_processed: int = 0
    rows_created: int = 0
    rows_updated: int = 0
    rows_failed: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.success = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PipelineResult:
    import_type: str
    total_rows: int = 0
    schema: RowValidationResult | None = None
    references: ReferenceValidationResult | None = None
    result: ImportResult | None = None
    history_id: str | None = None
    errors: list[ValidationIssue] = field(default_factory=list)
    dry_run: bool = False

    @property
    def blocking_issues(self) -> list[ValidationIssue]:
        issues = list(self.errors)
        if self.schema is not None:
            issues.extend(self.schema.errors)
        if self.references is not None:
            issues.extend(self.references.errors)
        return issues

    @property
    def warnings(self) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if self.schema is not None:
            issues.extend(self.schema.warnings)
        if self.references is not None:
            issues.extend(self.references.warnings)
        return issues

    @property
    def committed(self) -> bool:
        return self.result is not None

    @property
    def ok(self) -> bool:
        if self.blocking_issues:
            return False
        if self.result is None:
            return self.dry_run
        return self.result.success
