"""End-to-end import: parse, validate, check references, write, record history."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ...config_proxy import get_setting
from ...store import EntityStore, StoreError, get_default_store
from ..constants import DEFAULT_MAX_ROWS, ImportIssueCode, ImportIssueStage
from ..types import PipelineResult, ProgressCallback, RowValidationResult, ValidationIssue
from .audit_log import log_import_event
from .csv_parser import decode_upload, parse_csv, rows_to_records
from .errors import (
    ImportServiceError,
    MalformedInputError,
    ReferenceViolationError,
    SchemaViolationError,
)
from .history import record_import
from .import_processor import process_import
from .reference_validator import validate_references
from .row_validator import validate_columns, validate_rows
from .schema_registry import normalize_import_type

logger = logging.getLogger(__name__)


def _pipeline_error(exc: ImportServiceError, stage: str) -> ValidationIssue:
    return ValidationIssue(
        row_number=0,
        field_path=exc.field_path or "",
        value="",
        code=exc.code,
        message=exc.message,
        stage=stage,
    )


def raise_for_blocking_issues(pipeline: PipelineResult) -> None:
    """Raise the typed error matching the first stage that blocked ``pipeline``."""
    issues = pipeline.blocking_issues
    if not issues:
        return
    message = "\n".join(issue.display() for issue in issues)
    first = issues[0]
    if first.code == ImportIssueCode.MALFORMED_INPUT:
        raise MalformedInputError(message)
    if first.stage == ImportIssueStage.REFERENCE:
        raise ReferenceViolationError(first.code, message, row_number=first.row_number or None)
    if first.stage == ImportIssueStage.VALIDATE:
        raise SchemaViolationError(first.code, message, row_number=first.row_number or None)
    raise ImportServiceError(first.code, message)


def run_import(
    import_type: Any,
    text: Any,
    *,
    change_note: str = "",
    context_assessment_id: str | None = None,
    pending_ids: Mapping[str, Iterable[str]] | None = None,
    strict: bool = False,
    dry_run: bool = False,
    file_name: str | None = None,
    actor: str | None = None,
    store: EntityStore | None = None,
    on_progress: ProgressCallback | None = None,
    batch_size: int | None = None,
) -> PipelineResult:
    """
    Run one import submission.

    Nothing is written when parsing, schema or reference checks report
    errors, or when ``dry_run`` is set. After a write the submission is
    appended to the import history.
    """
    try:
        import_type = normalize_import_type(import_type)
    except ImportServiceError as exc:
        return PipelineResult(
            import_type=str(import_type),
            errors=[_pipeline_error(exc, ImportIssueStage.PARSE)],
            dry_run=dry_run,
        )

    pipeline = PipelineResult(import_type=import_type, dry_run=dry_run)
    store = store or get_default_store()

    try:
        grid = parse_csv(decode_upload(text))
    except ImportServiceError as exc:
        pipeline.errors.append(_pipeline_error(exc, ImportIssueStage.PARSE))
        return pipeline

    headers, records = rows_to_records(grid)
    pipeline.total_rows = len(records)
    if not records:
        pipeline.errors.append(
            ValidationIssue(
                row_number=0,
                field_path="",
                value="",
                code=ImportIssueCode.EMPTY_INPUT,
                message="No data rows found",
                stage=ImportIssueStage.PARSE,
            )
        )
        return pipeline

    max_rows = get_setting("import_settings.max_rows", DEFAULT_MAX_ROWS)
    if len(records) > max_rows:
        pipeline.errors.append(
            ValidationIssue(
                row_number=0,
                field_path="",
                value=str(len(records)),
                code=ImportIssueCode.ROW_LIMIT_EXCEEDED,
                message=f"File exceeds row limit of {max_rows}.",
                stage=ImportIssueStage.PARSE,
            )
        )
        return pipeline

    column_issues = validate_columns(import_type, headers)
    if column_issues:
        pipeline.schema = RowValidationResult(
            errors=column_issues, warnings=[], valid_rows=0, total_rows=len(records)
        )
        return pipeline

    pipeline.schema = validate_rows(import_type, records)
    if pipeline.schema.valid:
        try:
            pipeline.references = validate_references(
                import_type,
                records,
                context_assessment_id=context_assessment_id,
                pending_ids=pending_ids,
                store=store,
                strict=strict,
            )
        except StoreError as exc:
            logger.warning("Reference lookup failed for %s import: %s", import_type, exc)
            pipeline.errors.append(
                ValidationIssue(
                    row_number=0,
                    field_path="",
                    value=exc.table or "",
                    code=ImportIssueCode.REFERENCE_LOOKUP_FAILED,
                    message=f"Could not check references: {exc.message}",
                    stage=ImportIssueStage.REFERENCE,
                )
            )
            return pipeline

    log_import_event(
        "validate",
        user_id=actor,
        details={
            "import_type": import_type,
            "assessment_id": context_assessment_id,
            "file_name": file_name,
        },
        kpis={
            "total_rows": pipeline.total_rows,
            "blocking_issues": len(pipeline.blocking_issues),
            "warnings": len(pipeline.warnings),
        },
    )
    if pipeline.blocking_issues or dry_run:
        return pipeline

    pipeline.result = process_import(
        import_type,
        records,
        change_note,
        on_progress,
        store=store,
        actor=actor,
        batch_size=batch_size,
    )

    try:
        history = record_import(
            pipeline.result,
            import_type=import_type,
            assessment_id=context_assessment_id,
            change_note=change_note,
            file_name=file_name,
            actor=actor,
            store=store,
        )
    except StoreError as exc:
        logger.warning("Could not record import history for %s: %s", import_type, exc)
    else:
        pipeline.history_id = str(history["import_id"])
    return pipeline
