"""Import mutation root definitions."""

from __future__ import annotations

from typing import Any

import graphene

from ..services import run_import
from ..types import PipelineResult
from .types import ImportIssueType, ImportTypeEnum, RunImportPayloadType, ValidateImportPayloadType


def _input_get(value: Any, key: str, default: Any = None) -> Any:
    if isinstance(value, dict):
        return value.get(key, default)
    return getattr(value, key, default)


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def request_actor(info) -> str | None:
    user = getattr(info.context, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user.get_username() or None


def _issues_payload(pipeline: PipelineResult) -> dict[str, Any]:
    return {
        "total_rows": pipeline.total_rows,
        "issues": [ImportIssueType.from_issue(issue) for issue in pipeline.blocking_issues],
        "warnings": [ImportIssueType.from_issue(issue) for issue in pipeline.warnings],
    }


def _run(input, *, dry_run: bool, actor: str | None) -> PipelineResult:
    return run_import(
        _enum_value(_input_get(input, "import_type")),
        _input_get(input, "csv_text") or "",
        change_note=_input_get(input, "change_note") or "",
        context_assessment_id=_input_get(input, "assessment_id"),
        pending_ids=_input_get(input, "pending_ids") or None,
        strict=bool(_input_get(input, "strict", False)),
        dry_run=dry_run,
        file_name=_input_get(input, "file_name"),
        actor=actor,
    )


class ValidateImportInput(graphene.InputObjectType):
    import_type = ImportTypeEnum(required=True)
    csv_text = graphene.String(required=True)
    assessment_id = graphene.String()
    pending_ids = graphene.JSONString()
    strict = graphene.Boolean(default_value=False)
    file_name = graphene.String()


class RunImportInput(ValidateImportInput):
    change_note = graphene.String()
    dry_run = graphene.Boolean(default_value=False)


class ValidateImportMutation(graphene.Mutation):
    class Arguments:
        input = ValidateImportInput(required=True)

    Output = ValidateImportPayloadType

    def mutate(self, info, input):
        pipeline = _run(input, dry_run=True, actor=request_actor(info))
        analysis = None
        if pipeline.references is not None:
            references = pipeline.references.analysis
            analysis = {
                "existing_ids": references.existing_ids,
                "new_ids": references.new_ids,
                "to_create": references.to_create,
                "to_update": references.to_update,
                "missing_references": references.missing_references,
            }
        schema = pipeline.schema
        return {
            "ok": pipeline.ok,
            "valid_rows": schema.valid_rows if schema is not None else 0,
            "analysis": analysis,
            **_issues_payload(pipeline),
        }


class RunImportMutation(graphene.Mutation):
    class Arguments:
        input = RunImportInput(required=True)

    Output = RunImportPayloadType

    def mutate(self, info, input):
        pipeline = _run(
            input,
            dry_run=bool(_input_get(input, "dry_run", False)),
            actor=request_actor(info),
        )
        return {
            "ok": pipeline.ok,
            "result": pipeline.result.to_dict() if pipeline.result is not None else None,
            "history_id": pipeline.history_id,
            **_issues_payload(pipeline),
        }


class ImportMutations(graphene.ObjectType):
    validate_import = ValidateImportMutation.Field()
    run_import = RunImportMutation.Field()
