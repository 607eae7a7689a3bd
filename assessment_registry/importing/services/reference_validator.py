"""Cross-entity reference checks run before any import writes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ...store import EntityStore, get_default_store
from ..constants import (
    FIRST_DATA_ROW,
    ImportIssueCode,
    ImportIssueSeverity,
    ImportIssueStage,
    ImportType,
)
from ..types import ImportRecord, ReferenceAnalysis, ReferenceValidationResult, ValidationIssue
from .schema_registry import get_schema

logger = logging.getLogger(__name__)

# Reference columns whose targets must exist before the rows are written.
# Every other reference column tolerates forward creation and only warns.
FATAL_REFERENCES: dict[str, frozenset[str]] = {
    ImportType.ITEMS: frozenset({"form_id"}),
    ImportType.SPEC_VERSION: frozenset({"spec_version_id", "assessment_id"}),
}

_TABLE_LABELS = {
    "assessments": "Assessment",
    "spec_versions": "Spec version",
    "content_banks": "Content Bank",
    "forms": "Form",
}


def _missing_message(table: str, missing_id: str) -> str:
    label = _TABLE_LABELS.get(table, table)
    if table == "forms":
        return f'{label} "{missing_id}" does not exist. Create it first or include in forms import.'
    return f'{label} "{missing_id}" does not exist.'


def _issue(
    severity: str,
    *,
    row_number: int,
    field_path: str,
    value: str,
    code: str,
    message: str,
) -> ValidationIssue:
    return ValidationIssue(
        row_number=row_number,
        field_path=field_path,
        value=value,
        code=code,
        message=message,
        severity=severity,
        stage=ImportIssueStage.REFERENCE,
    )


def _first_rows(records: list[ImportRecord], column: str) -> dict[str, int]:
    """Map each distinct non-empty value of ``column`` to the first row using it."""
    first_rows: dict[str, int] = {}
    for offset, record in enumerate(records):
        value = str(record.get(column) or "").strip()
        if value and value not in first_rows:
            first_rows[value] = offset + FIRST_DATA_ROW
    return first_rows


def _pending(pending_ids: Mapping[str, Iterable[str]] | None, table: str) -> set[str]:
    if not pending_ids:
        return set()
    return {str(value) for value in pending_ids.get(table, ())}


def is_fatal_reference(import_type: str, column: str, *, strict: bool = False) -> bool:
    return strict or column in FATAL_REFERENCES.get(import_type, frozenset())


def validate_references(
    import_type: Any,
    records: list[ImportRecord],
    *,
    context_assessment_id: str | None = None,
    pending_ids: Mapping[str, Iterable[str]] | None = None,
    store: EntityStore | None = None,
    strict: bool = False,
) -> ReferenceValidationResult:
    """
    Check reference columns, assessment context and create/update split.

    ``pending_ids`` maps a table name to ids created by a companion import in
    the same submission; they count as existing. Missing references are errors
    for items and spec version rows (or for every type when ``strict``) and
    warnings otherwise. A context mismatch is always an error.
    """
    schema = get_schema(import_type)
    store = store or get_default_store()
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    missing_references: dict[str, list[str]] = {}

    for column, table in schema.reference_fields.items():
        first_rows = _first_rows(records, column)
        if not first_rows:
            continue
        known = store.existing_ids(table, first_rows) | _pending(pending_ids, table)
        missing = [value for value in first_rows if value not in known]
        if not missing:
            continue
        missing_references[column] = missing
        fatal = is_fatal_reference(schema.import_type, column, strict=strict)
        target = errors if fatal else warnings
        for missing_id in missing:
            target.append(
                _issue(
                    ImportIssueSeverity.ERROR if fatal else ImportIssueSeverity.WARNING,
                    row_number=first_rows[missing_id],
                    field_path=column,
                    value=missing_id,
                    code=ImportIssueCode.REFERENCE_NOT_FOUND,
                    message=_missing_message(table, missing_id),
                )
            )

    if context_assessment_id and schema.context_field:
        for offset, record in enumerate(records):
            value = str(record.get(schema.context_field) or "").strip()
            if value and value != context_assessment_id:
                errors.append(
                    _issue(
                        ImportIssueSeverity.ERROR,
                        row_number=offset + FIRST_DATA_ROW,
                        field_path=schema.context_field,
                        value=value,
                        code=ImportIssueCode.CONTEXT_MISMATCH,
                        message=(
                            f"Assessment ID \"{value}\" doesn't match current context "
                            f"\"{context_assessment_id}\""
                        ),
                    )
                )

    ids = list(_first_rows(records, schema.id_field))
    existing = store.existing_ids(schema.table, ids) if ids else set()
    analysis = ReferenceAnalysis(
        existing_ids=[value for value in ids if value in existing],
        new_ids=[value for value in ids if value not in existing],
        missing_references=missing_references,
    )
    if analysis.to_update:
        warnings.append(
            _issue(
                ImportIssueSeverity.WARNING,
                row_number=0,
                field_path=schema.id_field,
                value="",
                code=ImportIssueCode.RECORDS_WILL_UPDATE,
                message=f"{analysis.to_update} records will be UPDATED (existing IDs found)",
            )
        )

    errors.sort(key=lambda issue: issue.row_number)
    logger.debug(
        "Reference check for %s: %s errors, %s warnings, %s new, %s existing",
        schema.import_type,
        len(errors),
        len(warnings),
        analysis.to_create,
        analysis.to_update,
    )
    return ReferenceValidationResult(errors=errors, warnings=warnings, analysis=analysis)
