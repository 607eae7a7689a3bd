"""GraphQL queries and mutations for activation gates and status changes."""

from __future__ import annotations

from typing import Any

import graphene

from ..importing.schema.mutations import request_actor
from ..importing.services.errors import ImportServiceError
from ..store import RecordNotFoundError
from .gates import CHAIN_STEP_LABELS, GateResult
from .services import (
    evaluate_assessment_gate,
    evaluate_form_gate,
    evaluate_spec_version_gate,
    update_assessment,
    update_form,
    update_spec_version,
)


def _input_get(value: Any, key: str, default: Any = None) -> Any:
    if isinstance(value, dict):
        return value.get(key, default)
    return getattr(value, key, default)


class GateResultType(graphene.ObjectType):
    allowed = graphene.Boolean(required=True)
    reasons = graphene.List(graphene.NonNull(graphene.String), required=True)
    warnings = graphene.List(graphene.NonNull(graphene.String), required=True)


class ChainStatusType(graphene.ObjectType):
    has_spec_version = graphene.Boolean(required=True)
    has_bank = graphene.Boolean(required=True)
    has_forms = graphene.Boolean(required=True)
    has_items = graphene.Boolean(required=True)
    has_scoring = graphene.Boolean(required=True)
    completed_steps = graphene.Int(required=True)
    total_steps = graphene.Int(required=True)
    percent = graphene.Int(required=True)
    is_complete = graphene.Boolean(required=True)
    missing_steps = graphene.List(graphene.NonNull(graphene.String), required=True)
    missing_step_labels = graphene.List(graphene.NonNull(graphene.String), required=True)

    def resolve_missing_step_labels(self, info):
        return [CHAIN_STEP_LABELS[step] for step in self.missing_steps]


class AssessmentActivationType(graphene.ObjectType):
    assessment_id = graphene.String(required=True)
    gate = graphene.Field(GateResultType, required=True)
    chain = graphene.Field(ChainStatusType, required=True)


class StatusChangePayloadType(graphene.ObjectType):
    ok = graphene.Boolean(required=True)
    id = graphene.String(required=True)
    status = graphene.String()
    message = graphene.String()
    code = graphene.String()
    reasons = graphene.List(graphene.NonNull(graphene.String), required=True)


def _gate_payload(result: GateResult) -> dict[str, Any]:
    return result.to_dict()


def _status_change(record_id: str, status_field: str, apply) -> dict[str, Any]:
    try:
        record = apply()
    except (ImportServiceError, RecordNotFoundError) as exc:
        return {
            "ok": False,
            "id": record_id,
            "status": None,
            "message": exc.message,
            "code": exc.code,
            "reasons": list(getattr(exc, "reasons", [])),
        }
    return {
        "ok": True,
        "id": record_id,
        "status": record.get(status_field),
        "message": None,
        "code": None,
        "reasons": [],
    }


class ActivationQuery(graphene.ObjectType):
    activation_gate = graphene.Field(
        AssessmentActivationType,
        assessment_id=graphene.String(required=True),
    )
    spec_version_gate = graphene.Field(
        GateResultType,
        spec_version_id=graphene.String(required=True),
    )
    form_gate = graphene.Field(GateResultType, form_id=graphene.String(required=True))

    def resolve_activation_gate(self, info, assessment_id: str):
        try:
            gate, chain = evaluate_assessment_gate(assessment_id)
        except RecordNotFoundError:
            return None
        return {"assessment_id": assessment_id, "gate": _gate_payload(gate), "chain": chain}

    def resolve_spec_version_gate(self, info, spec_version_id: str):
        try:
            return _gate_payload(evaluate_spec_version_gate(spec_version_id))
        except RecordNotFoundError:
            return None

    def resolve_form_gate(self, info, form_id: str):
        try:
            return _gate_payload(evaluate_form_gate(form_id))
        except RecordNotFoundError:
            return None


class UpdateAssessmentStatusInput(graphene.InputObjectType):
    assessment_id = graphene.String(required=True)
    status = graphene.String(required=True)
    current_spec_version_id = graphene.String()


class UpdateSpecVersionStatusInput(graphene.InputObjectType):
    spec_version_id = graphene.String(required=True)
    validation_status = graphene.String(required=True)
    completeness_percent = graphene.Int()


class UpdateFormStatusInput(graphene.InputObjectType):
    form_id = graphene.String(required=True)
    status = graphene.String(required=True)


class UpdateAssessmentStatusMutation(graphene.Mutation):
    class Arguments:
        input = UpdateAssessmentStatusInput(required=True)

    Output = StatusChangePayloadType

    def mutate(self, info, input):
        assessment_id = _input_get(input, "assessment_id")
        updates = {"status": _input_get(input, "status")}
        if _input_get(input, "current_spec_version_id"):
            updates["current_spec_version_id"] = _input_get(input, "current_spec_version_id")
        return _status_change(
            assessment_id,
            "status",
            lambda: update_assessment(assessment_id, updates, actor=request_actor(info)),
        )


class UpdateSpecVersionStatusMutation(graphene.Mutation):
    class Arguments:
        input = UpdateSpecVersionStatusInput(required=True)

    Output = StatusChangePayloadType

    def mutate(self, info, input):
        spec_version_id = _input_get(input, "spec_version_id")
        updates = {"validation_status": _input_get(input, "validation_status")}
        if _input_get(input, "completeness_percent") is not None:
            updates["completeness_percent"] = _input_get(input, "completeness_percent")
        return _status_change(
            spec_version_id,
            "validation_status",
            lambda: update_spec_version(spec_version_id, updates, actor=request_actor(info)),
        )


class UpdateFormStatusMutation(graphene.Mutation):
    class Arguments:
        input = UpdateFormStatusInput(required=True)

    Output = StatusChangePayloadType

    def mutate(self, info, input):
        form_id = _input_get(input, "form_id")
        updates = {"status": _input_get(input, "status")}
        return _status_change(
            form_id,
            "status",
            lambda: update_form(form_id, updates, actor=request_actor(info)),
        )


class ActivationMutations(graphene.ObjectType):
    update_assessment_status = UpdateAssessmentStatusMutation.Field()
    update_spec_version_status = UpdateSpecVersionStatusMutation.Field()
    update_form_status = UpdateFormStatusMutation.Field()
