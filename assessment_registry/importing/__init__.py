"""Tabular import pipeline for assessment content entities."""

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_ROWS,
    IMPORT_ISSUE_CODES,
    ImportIssueCode,
    ImportIssueSeverity,
    ImportIssueStage,
    ImportType,
)

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_MAX_ROWS",
    "IMPORT_ISSUE_CODES",
    "ImportIssueCode",
    "ImportIssueSeverity",
    "ImportIssueStage",
    "ImportType",
]
