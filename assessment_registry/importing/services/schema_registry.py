"""Declarative column rules for each supported import type."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..constants import (
    VALID_GENRES,
    VALID_GRADE_TAGS,
    VALID_ITEM_TYPES,
    VALID_SKILL_TAGS,
    ImportIssueCode,
    ImportType,
)
from .errors import ImportServiceError

_INTEGER = re.compile(r"^\d+$")


@dataclass(frozen=True)
class FieldRule:
    """Constraint applied to a single column value."""

    column: str
    required: bool = False
    integer: bool = False
    minimum: int | None = None
    choices: tuple[str, ...] | None = None
    pattern: str | None = None
    message: str | None = None

    def check(self, value: Any) -> list[str]:
        text = "" if value is None else str(value)
        if not text:
            if self.required:
                return [self.message or f"{self.column} is required"]
            return []
        if self.integer:
            if not _INTEGER.match(text):
                return ["Must be a number"]
            if self.minimum is not None and int(text) < self.minimum:
                return [f"Must be at least {self.minimum}"]
        if self.choices is not None and text not in self.choices:
            return [self.message or f"Invalid value '{text}'. Expected one of: {', '.join(self.choices)}"]
        if self.pattern is not None and not re.match(self.pattern, text):
            return [self.message or f"Value '{text}' does not match {self.pattern}"]
        return []


@dataclass(frozen=True)
class AtLeastOneOf:
    """Cross-field rule satisfied when any of ``columns`` is non-empty."""

    columns: tuple[str, ...]
    message: str

    def check(self, record: dict[str, Any]) -> list[str]:
        if any(str(record.get(column) or "") for column in self.columns):
            return []
        return [self.message]


@dataclass(frozen=True)
class ImportSchema:
    import_type: str
    table: str
    id_field: str
    required_columns: tuple[str, ...]
    optional_columns: tuple[str, ...] = ()
    rules: tuple[FieldRule, ...] = ()
    cross_field_rules: tuple[AtLeastOneOf, ...] = ()
    reference_fields: dict[str, str] = field(default_factory=dict)
    context_field: str | None = None
    unique_together: tuple[tuple[str, ...], ...] = ()

    @property
    def columns(self) -> tuple[str, ...]:
        return self.required_columns + self.optional_columns


def _required(*columns: str) -> tuple[FieldRule, ...]:
    return tuple(FieldRule(column, required=True) for column in columns)


ITEMS_SCHEMA = ImportSchema(
    import_type=ImportType.ITEMS,
    table="items",
    id_field="item_id",
    required_columns=("item_id", "form_id", "item_type", "sequence_number"),
    optional_columns=(
        "stimulus",
        "text",
        "choices",
        "correct_answer",
        "scoring_tags",
        "sentence_id",
        "skill_tag",
        "genre",
        "word_count",
        "sentence_count",
    ),
    rules=_required("item_id", "form_id")
    + (
        FieldRule("item_type", required=True, choices=VALID_ITEM_TYPES),
        FieldRule("sequence_number", required=True, integer=True, minimum=1),
        FieldRule("word_count", integer=True),
        FieldRule("sentence_count", integer=True),
        FieldRule("skill_tag", choices=VALID_SKILL_TAGS),
        FieldRule("genre", choices=VALID_GENRES),
    ),
    cross_field_rules=(
        AtLeastOneOf(("stimulus", "text"), "Either stimulus or text is required"),
    ),
    reference_fields={"form_id": "forms"},
    unique_together=(("item_id",), ("form_id", "sequence_number")),
)

FORMS_SCHEMA = ImportSchema(
    import_type=ImportType.FORMS,
    table="forms",
    id_field="form_id",
    required_columns=(
        "form_id",
        "assessment_id",
        "content_bank_id",
        "grade_or_level_tag",
        "form_number",
    ),
    optional_columns=("status", "equivalence_set_id"),
    rules=_required("form_id", "assessment_id", "content_bank_id")
    + (
        FieldRule(
            "grade_or_level_tag",
            required=True,
            choices=VALID_GRADE_TAGS,
            message="Invalid grade tag",
        ),
        FieldRule("form_number", required=True, integer=True),
        FieldRule("status", choices=("draft", "active", "retired")),
    ),
    reference_fields={"assessment_id": "assessments", "content_bank_id": "content_banks"},
    context_field="assessment_id",
    unique_together=(("form_id",),),
)

BANKS_SCHEMA = ImportSchema(
    import_type=ImportType.BANKS,
    table="content_banks",
    id_field="content_bank_id",
    required_columns=("content_bank_id", "linked_assessment_id", "name"),
    optional_columns=(
        "target_bank_size",
        "equivalence_set_required",
        "differentiation_keys",
        "status",
    ),
    rules=_required("content_bank_id", "linked_assessment_id", "name")
    + (
        FieldRule("target_bank_size", integer=True),
        FieldRule("equivalence_set_required", choices=("true", "false", "TRUE", "FALSE", "True", "False")),
        FieldRule("status", choices=("empty", "in-progress", "ready")),
    ),
    reference_fields={"linked_assessment_id": "assessments"},
    context_field="linked_assessment_id",
    unique_together=(("content_bank_id",),),
)

SPEC_VERSION_SCHEMA = ImportSchema(
    import_type=ImportType.SPEC_VERSION,
    table="spec_versions",
    id_field="spec_version_id",
    required_columns=("spec_version_id", "assessment_id", "section", "field", "value"),
    rules=_required("spec_version_id", "assessment_id", "field")
    + (
        FieldRule(
            "section",
            required=True,
            pattern=r"^section_[a-j]$",
            message="Section must be section_a through section_j",
        ),
    ),
    reference_fields={"spec_version_id": "spec_versions", "assessment_id": "assessments"},
    context_field="assessment_id",
    unique_together=(("spec_version_id", "section", "field"),),
)

SCORING_SCHEMA = ImportSchema(
    import_type=ImportType.SCORING,
    table="scoring_outputs",
    id_field="scoring_model_id",
    required_columns=(
        "scoring_model_id",
        "assessment_id",
        "metric_type",
        "metric_id",
        "metric_name",
    ),
    optional_columns=("metric_data_type", "formula"),
    rules=_required("scoring_model_id", "assessment_id", "metric_id", "metric_name")
    + (FieldRule("metric_type", required=True, choices=("raw", "derived")),),
    reference_fields={"assessment_id": "assessments"},
    context_field="assessment_id",
    unique_together=(("scoring_model_id", "metric_id"),),
)

SCHEMAS: dict[str, ImportSchema] = {
    schema.import_type: schema
    for schema in (
        ITEMS_SCHEMA,
        FORMS_SCHEMA,
        BANKS_SCHEMA,
        SPEC_VERSION_SCHEMA,
        SCORING_SCHEMA,
    )
}


def normalize_import_type(import_type: Any) -> str:
    value = getattr(import_type, "value", import_type)
    if value not in SCHEMAS:
        raise ImportServiceError(
            ImportIssueCode.UNKNOWN_IMPORT_TYPE,
            f"Unknown import type '{value}'. Expected one of: {', '.join(SCHEMAS)}",
        )
    return str(value)


def get_schema(import_type: Any) -> ImportSchema:
    return SCHEMAS[normalize_import_type(import_type)]


def get_required_columns(import_type: Any) -> list[str]:
    return list(get_schema(import_type).required_columns)
