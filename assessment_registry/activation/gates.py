"""
Activation gates.

Pure predicates deciding whether a spec version may be marked valid, or an
assessment or form may be set active. Every function takes already-fetched
snapshots (model instances or plain mappings) and performs no I/O, so the
caller is responsible for handing in fresh state.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

CHAIN_STEPS = ("SPEC", "BANK", "FORMS", "ITEMS", "SCORING")

CHAIN_STEP_LABELS = {
    "SPEC": "Spec Version",
    "BANK": "Content Bank",
    "FORMS": "Forms",
    "ITEMS": "Items",
    "SCORING": "Scoring Model",
}


@dataclass(frozen=True)
class GateResult:
    reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def allowed(self) -> bool:
        return not self.reasons

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ChainStatus:
    has_spec_version: bool
    has_bank: bool
    has_forms: bool
    has_items: bool
    has_scoring: bool
    missing_steps: list[str]

    total_steps = len(CHAIN_STEPS)

    @property
    def completed_steps(self) -> int:
        return self.total_steps - len(self.missing_steps)

    @property
    def percent(self) -> int:
        return round(self.completed_steps / self.total_steps * 100)

    @property
    def is_complete(self) -> bool:
        return not self.missing_steps


def _value(snapshot: Any, name: str, default: Any = None) -> Any:
    if isinstance(snapshot, Mapping):
        return snapshot.get(name, default)
    return getattr(snapshot, name, default)


def _for_assessment(rows: Iterable[Any], assessment_id: str) -> list[Any]:
    return [row for row in rows if _value(row, "assessment_id") == assessment_id]


def can_activate_spec_version(spec: Any) -> GateResult:
    reasons = []
    status = _value(spec, "validation_status")
    if status != "valid":
        reasons.append(
            f"Spec version validation_status must be 'valid' (currently: '{status or 'incomplete'}')"
        )
    completeness = _value(spec, "completeness_percent")
    if completeness != 100:
        reasons.append(
            f"Spec version completeness_percent must be 100 (currently: {completeness or 0}%)"
        )
    return GateResult(reasons=reasons)


def can_activate_assessment(
    assessment: Any,
    spec_versions: Iterable[Any],
    assessment_banks: Iterable[Any],
    scoring_outputs: Iterable[Any],
) -> GateResult:
    """
    Check that an assessment has everything it needs to go active.

    All clauses are evaluated so the result lists every blocker at once.
    """
    reasons = []
    assessment_id = _value(assessment, "assessment_id")
    current_id = _value(assessment, "current_spec_version_id")

    if not current_id:
        reasons.append("Assessment must have a current_spec_version_id set")
    else:
        linked = next(
            (
                spec
                for spec in spec_versions
                if _value(spec, "spec_version_id") == current_id
            ),
            None,
        )
        if linked is None:
            reasons.append(f"Linked spec version '{current_id}' not found")
        else:
            spec_gate = can_activate_spec_version(linked)
            if not spec_gate.allowed:
                reasons.append(
                    f"Linked spec version is not valid: {'; '.join(spec_gate.reasons)}"
                )

    if not _for_assessment(assessment_banks, assessment_id):
        reasons.append("Assessment must have at least one linked content bank")

    if not _for_assessment(scoring_outputs, assessment_id):
        reasons.append("Assessment must have a scoring output defined")

    return GateResult(reasons=reasons)


def can_activate_form(
    form: Any,
    items: Iterable[Any],
    *,
    item_count_rules: Mapping[str, Mapping[str, int]] | None = None,
) -> GateResult:
    reasons: list[str] = []
    warnings: list[str] = []
    form_id = _value(form, "form_id")
    form_items = [item for item in items if _value(item, "form_id") == form_id]
    item_count = len(form_items)

    rule = (item_count_rules or {}).get(_value(form, "assessment_id"))
    if rule:
        if item_count < rule["min"]:
            reasons.append(f"Form requires at least {rule['min']} items (has {item_count})")
        if item_count > rule["max"]:
            reasons.append(f"Form allows at most {rule['max']} items (has {item_count})")

    if not form_items:
        reasons.append("Form has no items")
        return GateResult(reasons=reasons, warnings=warnings)

    sequences = sorted(_value(item, "sequence_number") for item in form_items)
    if len(set(sequences)) != len(sequences):
        reasons.append("Duplicate sequence numbers detected")
    if sequences != list(range(1, len(sequences) + 1)):
        warnings.append("Sequence numbers have gaps (expected 1, 2, 3, ...)")

    payloads = [_value(item, "content_payload") or {} for item in form_items]
    stimuli = [payload.get("stimulus") for payload in payloads if payload.get("stimulus")]
    if len(set(stimuli)) != len(stimuli):
        warnings.append("Duplicate stimuli found in form")

    empty = [payload for payload in payloads if not payload.get("stimulus") and not payload.get("text")]
    if empty:
        reasons.append(f"{len(empty)} items have no stimulus content")

    return GateResult(reasons=reasons, warnings=warnings)


def calculate_chain_status(
    assessment: Any,
    spec_versions: Iterable[Any],
    assessment_banks: Iterable[Any],
    forms: Iterable[Any],
    items: Iterable[Any],
    scoring_outputs: Iterable[Any],
) -> ChainStatus:
    """Bank-aware completion of the spec, bank, forms, items and scoring chain."""
    assessment_id = _value(assessment, "assessment_id")
    current_id = _value(assessment, "current_spec_version_id")

    has_spec_version = bool(current_id) and any(
        _value(spec, "spec_version_id") == current_id for spec in spec_versions
    )
    linked_bank_ids = {
        _value(link, "content_bank_id")
        for link in _for_assessment(assessment_banks, assessment_id)
    }
    eligible_form_ids = {
        _value(form, "form_id")
        for form in _for_assessment(forms, assessment_id)
        if _value(form, "content_bank_id") in linked_bank_ids
    }
    has_items = any(_value(item, "form_id") in eligible_form_ids for item in items)
    has_scoring = bool(_for_assessment(scoring_outputs, assessment_id))

    flags = {
        "SPEC": has_spec_version,
        "BANK": bool(linked_bank_ids),
        "FORMS": bool(eligible_form_ids),
        "ITEMS": has_items,
        "SCORING": has_scoring,
    }
    return ChainStatus(
        has_spec_version=has_spec_version,
        has_bank=flags["BANK"],
        has_forms=flags["FORMS"],
        has_items=has_items,
        has_scoring=has_scoring,
        missing_steps=[step for step in CHAIN_STEPS if not flags[step]],
    )


def format_gate_error(result: GateResult) -> str:
    if result.allowed:
        return ""
    return "Cannot activate:\n• " + "\n• ".join(result.reasons)
