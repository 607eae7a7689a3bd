"""Status writes guarded by the activation gates."""

from __future__ import annotations

import logging
from typing import Any

from django.db import models

from ..config_proxy import get_setting
from ..importing.services.audit_log import log_import_event
from ..importing.services.errors import GateViolationError, InvalidStatusError
from ..models import AssessmentStatus, FormStatus, ValidationStatus
from ..store import EntityStore, RecordNotFoundError, get_default_store
from .gates import (
    ChainStatus,
    GateResult,
    calculate_chain_status,
    can_activate_assessment,
    can_activate_form,
    can_activate_spec_version,
    format_gate_error,
)

logger = logging.getLogger(__name__)

GATED_SPEC_FIELDS = frozenset({"validation_status", "completeness_percent"})


def _fetch(store: EntityStore, table: str, record_id: str) -> dict[str, Any]:
    record = store.fetch_by_id(table, record_id)
    if record is None:
        raise RecordNotFoundError(table, record_id)
    return record


def _check_choice(
    updates: dict[str, Any], field_name: str, choices: type[models.TextChoices], entity: str
) -> None:
    if field_name not in updates:
        return
    value = updates[field_name]
    if value not in choices.values:
        raise InvalidStatusError(
            f"Invalid {field_name} '{value}' for {entity}. "
            f"Expected one of: {', '.join(choices.values)}",
            field_path=field_name,
        )


def _enforce(
    result: GateResult, *, entity: str, record_id: str, actor: str | None
) -> None:
    if result.allowed:
        return
    message = format_gate_error(result)
    logger.info("Rejected activation of %s %s: %s", entity, record_id, "; ".join(result.reasons))
    log_import_event(
        "gate_rejected",
        user_id=actor,
        details={"entity": entity, "id": record_id, "reasons": list(result.reasons)},
        level=logging.WARNING,
    )
    raise GateViolationError(message, result.reasons)


def _log_change(
    entity: str,
    record_id: str,
    field_name: str,
    before: dict[str, Any],
    updates: dict[str, Any],
    actor: str | None,
) -> None:
    if field_name not in updates:
        return
    log_import_event(
        "status_changed",
        user_id=actor,
        details={
            "entity": entity,
            "id": record_id,
            "field": field_name,
            "from": before.get(field_name),
            "to": updates[field_name],
        },
    )


def load_assessment_graph(
    store: EntityStore, assessment: dict[str, Any]
) -> dict[str, list[dict[str, Any]]]:
    """Fetch the records an assessment's gate and chain status depend on."""
    assessment_id = assessment["assessment_id"]
    spec_versions = store.list_by_filter("spec_versions", assessment_id=assessment_id)
    current_id = assessment.get("current_spec_version_id")
    if current_id and all(spec["spec_version_id"] != current_id for spec in spec_versions):
        linked = store.fetch_by_id("spec_versions", current_id)
        if linked is not None:
            spec_versions.append(linked)
    forms = store.list_by_filter("forms", assessment_id=assessment_id)
    form_ids = [form["form_id"] for form in forms]
    return {
        "spec_versions": spec_versions,
        "assessment_banks": store.list_by_filter("assessment_banks", assessment_id=assessment_id),
        "scoring_outputs": store.list_by_filter("scoring_outputs", assessment_id=assessment_id),
        "forms": forms,
        "items": store.list_by_filter("items", form_id__in=form_ids) if form_ids else [],
    }


def evaluate_spec_version_gate(
    spec_version_id: str, *, store: EntityStore | None = None
) -> GateResult:
    store = store or get_default_store()
    return can_activate_spec_version(_fetch(store, "spec_versions", spec_version_id))


def evaluate_assessment_gate(
    assessment_id: str, *, store: EntityStore | None = None
) -> tuple[GateResult, ChainStatus]:
    store = store or get_default_store()
    assessment = _fetch(store, "assessments", assessment_id)
    graph = load_assessment_graph(store, assessment)
    gate = can_activate_assessment(
        assessment,
        graph["spec_versions"],
        graph["assessment_banks"],
        graph["scoring_outputs"],
    )
    chain = calculate_chain_status(
        assessment,
        graph["spec_versions"],
        graph["assessment_banks"],
        graph["forms"],
        graph["items"],
        graph["scoring_outputs"],
    )
    return gate, chain


def evaluate_form_gate(form_id: str, *, store: EntityStore | None = None) -> GateResult:
    store = store or get_default_store()
    form = _fetch(store, "forms", form_id)
    return can_activate_form(
        form,
        store.list_by_filter("items", form_id=form_id),
        item_count_rules=get_setting("activation_settings.form_item_count_rules"),
    )


def update_spec_version(
    spec_version_id: str,
    updates: dict[str, Any],
    *,
    store: EntityStore | None = None,
    actor: str | None = None,
) -> dict[str, Any]:
    """
    Apply ``updates`` to a spec version.

    Any update touching ``validation_status`` or ``completeness_percent``
    that leaves the record ``valid`` re-fetches it and runs the spec version
    gate over the merged state first; a failing gate raises
    ``GateViolationError`` and nothing is written.
    """
    store = store or get_default_store()
    _check_choice(updates, "validation_status", ValidationStatus, "spec version")
    current = _fetch(store, "spec_versions", spec_version_id)
    merged = {**current, **updates}
    if merged.get("validation_status") == ValidationStatus.VALID and (
        GATED_SPEC_FIELDS & updates.keys()
    ):
        _enforce(
            can_activate_spec_version(merged),
            entity="spec_version",
            record_id=spec_version_id,
            actor=actor,
        )
    record = store.update("spec_versions", spec_version_id, updates)
    _log_change("spec_version", spec_version_id, "validation_status", current, updates, actor)
    return record


def update_assessment(
    assessment_id: str,
    updates: dict[str, Any],
    *,
    store: EntityStore | None = None,
    actor: str | None = None,
) -> dict[str, Any]:
    """Apply ``updates`` to an assessment, gating the move to ``active``."""
    store = store or get_default_store()
    _check_choice(updates, "status", AssessmentStatus, "assessment")
    current = _fetch(store, "assessments", assessment_id)
    if updates.get("status") == AssessmentStatus.ACTIVE:
        merged = {**current, **updates}
        graph = load_assessment_graph(store, merged)
        _enforce(
            can_activate_assessment(
                merged,
                graph["spec_versions"],
                graph["assessment_banks"],
                graph["scoring_outputs"],
            ),
            entity="assessment",
            record_id=assessment_id,
            actor=actor,
        )
    record = store.update("assessments", assessment_id, updates)
    _log_change("assessment", assessment_id, "status", current, updates, actor)
    return record


def update_form(
    form_id: str,
    updates: dict[str, Any],
    *,
    store: EntityStore | None = None,
    actor: str | None = None,
) -> dict[str, Any]:
    """Apply ``updates`` to a form, gating the move to ``active``."""
    store = store or get_default_store()
    _check_choice(updates, "status", FormStatus, "form")
    current = _fetch(store, "forms", form_id)
    if updates.get("status") == FormStatus.ACTIVE:
        merged = {**current, **updates}
        _enforce(
            can_activate_form(
                merged,
                store.list_by_filter("items", form_id=form_id),
                item_count_rules=get_setting("activation_settings.form_item_count_rules"),
            ),
            entity="form",
            record_id=form_id,
            actor=actor,
        )
    record = store.update("forms", form_id, updates)
    _log_change("form", form_id, "status", current, updates, actor)
    return record
