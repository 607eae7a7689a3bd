"""Row-level and dataset-level validation of parsed import records."""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from typing import Any

from ..constants import FIRST_DATA_ROW, ImportIssueCode, ImportIssueSeverity, ImportIssueStage
from ..types import ImportRecord, RowValidationResult, ValidationIssue
from .schema_registry import ImportSchema, get_schema

logger = logging.getLogger(__name__)

_FORM_SUFFIX = re.compile(r"\.form\d+$")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _row_error(
    *,
    row_number: int,
    code: str,
    message: str,
    field_path: str = "",
    value: Any = "",
    stage: str = ImportIssueStage.VALIDATE,
) -> ValidationIssue:
    return ValidationIssue(
        row_number=row_number,
        field_path=field_path,
        value=_text(value),
        code=code,
        message=message,
        severity=ImportIssueSeverity.ERROR,
        stage=stage,
    )


def _row_warning(
    *,
    row_number: int,
    code: str,
    message: str,
    field_path: str = "",
    value: Any = "",
    stage: str = ImportIssueStage.VALIDATE,
) -> ValidationIssue:
    return ValidationIssue(
        row_number=row_number,
        field_path=field_path,
        value=_text(value),
        code=code,
        message=message,
        severity=ImportIssueSeverity.WARNING,
        stage=stage,
    )


def validate_columns(import_type: Any, headers: list[str]) -> list[ValidationIssue]:
    """Report required columns absent from the header row."""
    schema = get_schema(import_type)
    present = set(headers)
    missing = [column for column in schema.required_columns if column not in present]
    if not missing:
        return []
    return [
        _row_error(
            row_number=1,
            code=ImportIssueCode.MISSING_REQUIRED_COLUMN,
            field_path=",".join(missing),
            message=f"Missing required columns: {', '.join(missing)}",
        )
    ]


def _validate_record(
    schema: ImportSchema, record: ImportRecord, row_number: int
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for rule in schema.rules:
        value = record.get(rule.column)
        for message in rule.check(value):
            issues.append(
                _row_error(
                    row_number=row_number,
                    code=ImportIssueCode.SCHEMA_VIOLATION,
                    field_path=rule.column,
                    value=value,
                    message=message,
                )
            )
    for cross_rule in schema.cross_field_rules:
        for message in cross_rule.check(record):
            issues.append(
                _row_error(
                    row_number=row_number,
                    code=ImportIssueCode.SCHEMA_VIOLATION,
                    field_path=cross_rule.columns[0],
                    message=message,
                )
            )
    return issues


def _duplicate_key_errors(
    schema: ImportSchema, records: list[ImportRecord]
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for key_fields in schema.unique_together:
        groups: dict[str, list[int]] = defaultdict(list)
        for offset, record in enumerate(records):
            values = [_text(record.get(name)) for name in key_fields]
            if all(values):
                groups["|".join(values)].append(offset + FIRST_DATA_ROW)
        for matching_key, row_numbers in groups.items():
            if len(row_numbers) < 2:
                continue
            for row_number in row_numbers:
                issues.append(
                    _row_error(
                        row_number=row_number,
                        code=ImportIssueCode.DUPLICATE_MATCHING_KEY,
                        field_path=",".join(key_fields),
                        value=matching_key,
                        message=f"Duplicate matching key '{matching_key}' in batch.",
                    )
                )
    return issues


def _lineage_warnings(
    schema: ImportSchema, record: ImportRecord, row_number: int
) -> list[ValidationIssue]:
    if schema.import_type == "forms":
        form_id = _text(record.get("form_id"))
        assessment_id = _text(record.get("assessment_id"))
        if form_id and assessment_id and (
            not form_id.startswith(f"{assessment_id}.") or not _FORM_SUFFIX.search(form_id)
        ):
            return [
                _row_warning(
                    row_number=row_number,
                    code=ImportIssueCode.LINEAGE_MISMATCH,
                    field_path="form_id",
                    value=form_id,
                    message=(
                        f"Form ID '{form_id}' does not follow "
                        f"'{assessment_id}.<GRADE>.formNN'"
                    ),
                )
            ]
    elif schema.import_type == "items":
        item_id = _text(record.get("item_id"))
        form_id = _text(record.get("form_id"))
        if item_id and form_id and not item_id.startswith(f"{form_id}."):
            return [
                _row_warning(
                    row_number=row_number,
                    code=ImportIssueCode.LINEAGE_MISMATCH,
                    field_path="item_id",
                    value=item_id,
                    message=f"Item ID '{item_id}' is not prefixed by its form ID '{form_id}'",
                )
            ]
    elif schema.import_type == "scoring":
        if _text(record.get("metric_type")) == "raw" and _text(record.get("formula")):
            return [
                _row_warning(
                    row_number=row_number,
                    code=ImportIssueCode.IGNORED_VALUE,
                    field_path="formula",
                    value=record.get("formula"),
                    message="Formula is ignored on raw metrics",
                )
            ]
    return []


def _duplicate_stimulus_warnings(records: list[ImportRecord]) -> list[ValidationIssue]:
    seen: dict[str, int] = {}
    issues: list[ValidationIssue] = []
    for offset, record in enumerate(records):
        stimulus = _text(record.get("stimulus") or record.get("text")).strip()
        if not stimulus:
            continue
        row_number = offset + FIRST_DATA_ROW
        first_row = seen.setdefault(stimulus.lower(), row_number)
        if first_row != row_number:
            issues.append(
                _row_warning(
                    row_number=row_number,
                    code=ImportIssueCode.DUPLICATE_STIMULUS,
                    field_path="stimulus",
                    value=stimulus,
                    message=f"Duplicate stimulus '{stimulus}' (first seen on row {first_row})",
                )
            )
    return issues


def validate_rows(import_type: Any, records: list[ImportRecord]) -> RowValidationResult:
    """
    Apply the import type's schema to every record.

    Each record is checked on its own, then the batch is checked for duplicate
    natural keys. Row numbers count the header as row 1.
    """
    schema = get_schema(import_type)
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    for offset, record in enumerate(records):
        row_number = offset + FIRST_DATA_ROW
        errors.extend(_validate_record(schema, record, row_number))
        warnings.extend(_lineage_warnings(schema, record, row_number))

    errors.extend(_duplicate_key_errors(schema, records))
    if schema.import_type == "items":
        warnings.extend(_duplicate_stimulus_warnings(records))

    errors.sort(key=lambda issue: issue.row_number)
    warnings.sort(key=lambda issue: issue.row_number)
    invalid_rows = {issue.row_number for issue in errors}
    result = RowValidationResult(
        errors=errors,
        warnings=warnings,
        valid_rows=len(records) - len(invalid_rows),
        total_rows=len(records),
    )
    logger.debug(
        "Validated %s %s rows: %s errors, %s warnings",
        result.total_rows,
        schema.import_type,
        len(errors),
        len(warnings),
    )
    return result
