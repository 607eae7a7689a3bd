"""Service layer for the import and validation pipeline."""

from .audit_log import log_import_event
from .change_log import append_to_change_log, create_change_log_entry, format_import_summary
from .csv_parser import decode_upload, parse_csv, rows_to_records, serialize_csv
from .errors import (
    BatchWriteFailure,
    GateViolationError,
    ImportServiceError,
    InvalidStatusError,
    MalformedInputError,
    ReferenceViolationError,
    SchemaViolationError,
)
from .history import list_import_history, record_import
from .import_processor import get_processor, process_import
from .payloads import build_content_payload, coerce_value
from .pipeline import raise_for_blocking_issues, run_import
from .reference_validator import validate_references
from .row_validator import validate_columns, validate_rows
from .schema_registry import get_required_columns, get_schema
from .templates import get_template_content, get_template_description

__all__ = [
    "log_import_event",
    "append_to_change_log",
    "create_change_log_entry",
    "format_import_summary",
    "decode_upload",
    "parse_csv",
    "rows_to_records",
    "serialize_csv",
    "BatchWriteFailure",
    "GateViolationError",
    "ImportServiceError",
    "InvalidStatusError",
    "MalformedInputError",
    "ReferenceViolationError",
    "SchemaViolationError",
    "list_import_history",
    "record_import",
    "get_processor",
    "process_import",
    "build_content_payload",
    "coerce_value",
    "raise_for_blocking_issues",
    "run_import",
    "validate_references",
    "validate_columns",
    "validate_rows",
    "get_required_columns",
    "get_schema",
    "get_template_content",
    "get_template_description",
]
