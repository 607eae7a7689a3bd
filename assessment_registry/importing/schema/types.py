"""GraphQL type definitions for the import domain."""

from __future__ import annotations

from typing import Any

import graphene

from ..types import ValidationIssue


def _read_value(source: Any, key: str) -> Any:
    if isinstance(source, dict):
        return source.get(key)
    return getattr(source, key, None)


class ImportTypeEnum(graphene.Enum):
    ITEMS = "items"
    FORMS = "forms"
    BANKS = "banks"
    SPEC_VERSION = "specVersion"
    SCORING = "scoring"


class ImportIssueSeverityEnum(graphene.Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"


class ImportIssueType(graphene.ObjectType):
    row_number = graphene.Int()
    field_path = graphene.String()
    value = graphene.String()
    code = graphene.String(required=True)
    severity = graphene.Field(ImportIssueSeverityEnum, required=True)
    message = graphene.String(required=True)
    stage = graphene.String(required=True)

    def resolve_severity(self, info):
        value = _read_value(self, "severity")
        return getattr(value, "value", value)

    @staticmethod
    def from_issue(issue: ValidationIssue) -> dict[str, Any]:
        return {
            "row_number": issue.row_number or None,
            "field_path": issue.field_path or None,
            "value": issue.value,
            "code": issue.code,
            "severity": str(issue.severity),
            "message": issue.message,
            "stage": str(issue.stage),
        }


class ReferenceAnalysisType(graphene.ObjectType):
    existing_ids = graphene.List(graphene.NonNull(graphene.String), required=True)
    new_ids = graphene.List(graphene.NonNull(graphene.String), required=True)
    to_create = graphene.Int(required=True)
    to_update = graphene.Int(required=True)
    missing_references = graphene.JSONString()


class ImportResultType(graphene.ObjectType):
    success = graphene.Boolean(required=True)
    rows_processed = graphene.Int(required=True)
    rows_created = graphene.Int(required=True)
    rows_updated = graphene.Int(required=True)
    rows_failed = graphene.Int(required=True)
    errors = graphene.List(graphene.NonNull(graphene.String), required=True)
    warnings = graphene.List(graphene.NonNull(graphene.String), required=True)


class ImportTemplateType(graphene.ObjectType):
    import_type = graphene.Field(ImportTypeEnum, required=True)
    file_name = graphene.String(required=True)
    content = graphene.String(required=True)
    description = graphene.String(required=True)
    required_columns = graphene.List(graphene.NonNull(graphene.String), required=True)
    optional_columns = graphene.List(graphene.NonNull(graphene.String), required=True)


class ImportHistoryType(graphene.ObjectType):
    import_id = graphene.ID(required=True)
    assessment_id = graphene.String()
    import_type = graphene.Field(ImportTypeEnum, required=True)
    rows_processed = graphene.Int(required=True)
    rows_created = graphene.Int(required=True)
    rows_updated = graphene.Int(required=True)
    rows_failed = graphene.Int(required=True)
    change_note = graphene.String()
    file_name = graphene.String()
    imported_at = graphene.DateTime(required=True)
    imported_by = graphene.String(required=True)

    def resolve_import_id(self, info):
        return str(_read_value(self, "import_id"))


class ValidateImportPayloadType(graphene.ObjectType):
    ok = graphene.Boolean(required=True)
    total_rows = graphene.Int(required=True)
    valid_rows = graphene.Int(required=True)
    issues = graphene.List(graphene.NonNull(ImportIssueType), required=True)
    warnings = graphene.List(graphene.NonNull(ImportIssueType), required=True)
    analysis = graphene.Field(ReferenceAnalysisType)


class RunImportPayloadType(graphene.ObjectType):
    ok = graphene.Boolean(required=True)
    total_rows = graphene.Int(required=True)
    issues = graphene.List(graphene.NonNull(ImportIssueType), required=True)
    warnings = graphene.List(graphene.NonNull(ImportIssueType), required=True)
    result = graphene.Field(ImportResultType)
    history_id = graphene.ID()
