import pytest

from assessment_registry.activation.gates import (
    GateResult,
    calculate_chain_status,
    can_activate_assessment,
    can_activate_form,
    can_activate_spec_version,
    format_gate_error,
)
from assessment_registry.models import Assessment, AssessmentBank, ScoringOutput, SpecVersion

pytestmark = pytest.mark.unit

ASSESSMENT_ID = "FL-ORF"


def _spec(status="valid", percent=100, spec_id="FL-ORF.v1"):
    return {
        "spec_version_id": spec_id,
        "assessment_id": ASSESSMENT_ID,
        "validation_status": status,
        "completeness_percent": percent,
    }


def _assessment(current="FL-ORF.v1"):
    return {"assessment_id": ASSESSMENT_ID, "current_spec_version_id": current}


BANK_LINK = {"assessment_id": ASSESSMENT_ID, "content_bank_id": "FL-ORF.bank1"}
SCORING = {"scoring_model_id": "FL-ORF.scoring01", "assessment_id": ASSESSMENT_ID}


@pytest.mark.parametrize("status", ["valid", "incomplete", "needs-review"])
@pytest.mark.parametrize("percent", [0, 50, 99, 100])
def test_spec_gate_allows_only_valid_and_complete(status, percent):
    result = can_activate_spec_version(_spec(status, percent))

    assert result.allowed == (status == "valid" and percent == 100)
    assert len(result.reasons) == (status != "valid") + (percent != 100)


def test_spec_gate_messages():
    result = can_activate_spec_version(_spec("incomplete", 80))

    assert result.reasons == [
        "Spec version validation_status must be 'valid' (currently: 'incomplete')",
        "Spec version completeness_percent must be 100 (currently: 80%)",
    ]


def test_assessment_gate_allows_complete_chain():
    result = can_activate_assessment(_assessment(), [_spec()], [BANK_LINK], [SCORING])
    assert result.allowed
    assert result.reasons == []


def test_missing_scoring_output_gives_exactly_one_reason():
    result = can_activate_assessment(_assessment(), [_spec()], [BANK_LINK], [])

    assert result.reasons == ["Assessment must have a scoring output defined"]


def test_assessment_gate_collects_every_reason():
    result = can_activate_assessment(_assessment(current=None), [], [], [])

    assert result.reasons == [
        "Assessment must have a current_spec_version_id set",
        "Assessment must have at least one linked content bank",
        "Assessment must have a scoring output defined",
    ]


def test_assessment_gate_requires_linked_spec_to_resolve():
    result = can_activate_assessment(_assessment(current="FL-ORF.v7"), [_spec()], [BANK_LINK], [SCORING])
    assert result.reasons == ["Linked spec version 'FL-ORF.v7' not found"]


def test_assessment_gate_nests_spec_reasons():
    result = can_activate_assessment(
        _assessment(), [_spec("incomplete", 40)], [BANK_LINK], [SCORING]
    )

    assert result.reasons == [
        "Linked spec version is not valid: "
        "Spec version validation_status must be 'valid' (currently: 'incomplete'); "
        "Spec version completeness_percent must be 100 (currently: 40%)"
    ]


def test_assessment_gate_ignores_links_of_other_assessments():
    other_link = {"assessment_id": "PA-RHYM", "content_bank_id": "PA-RHYM.bank1"}
    other_scoring = {"scoring_model_id": "PA-RHYM.scoring01", "assessment_id": "PA-RHYM"}

    result = can_activate_assessment(_assessment(), [_spec()], [other_link], [other_scoring])

    assert len(result.reasons) == 2


def test_gates_accept_model_instances():
    assessment = Assessment(assessment_id=ASSESSMENT_ID, current_spec_version_id="FL-ORF.v1")
    spec = SpecVersion(
        spec_version_id="FL-ORF.v1",
        assessment_id=ASSESSMENT_ID,
        validation_status="valid",
        completeness_percent=100,
    )
    link = AssessmentBank(assessment_id=ASSESSMENT_ID, content_bank_id="FL-ORF.bank1")
    scoring = ScoringOutput(scoring_model_id="FL-ORF.scoring01", assessment_id=ASSESSMENT_ID)

    assert can_activate_spec_version(spec).allowed
    assert can_activate_assessment(assessment, [spec], [link], [scoring]).allowed


def _items(form_id, count, **payload):
    return [
        {
            "item_id": f"{form_id}.i{number}",
            "form_id": form_id,
            "sequence_number": number,
            "content_payload": {"stimulus": f"word {number}", **payload},
        }
        for number in range(1, count + 1)
    ]


def test_form_without_items_is_blocked():
    result = can_activate_form({"form_id": "F", "assessment_id": "X"}, [])
    assert result.reasons == ["Form has no items"]


def test_form_item_count_rules_apply_per_assessment():
    form = {"form_id": "PA-RHYM.G1.form01", "assessment_id": "PA-RHYM"}
    rules = {"PA-RHYM": {"min": 20, "max": 20}}

    short = can_activate_form(form, _items(form["form_id"], 5), item_count_rules=rules)
    exact = can_activate_form(form, _items(form["form_id"], 20), item_count_rules=rules)

    assert short.reasons == ["Form requires at least 20 items (has 5)"]
    assert exact.allowed


def test_form_duplicate_sequences_and_empty_content_block():
    items = _items("F", 3)
    items[2]["sequence_number"] = 2
    items[1]["content_payload"] = {}

    result = can_activate_form({"form_id": "F", "assessment_id": "X"}, items)

    assert "Duplicate sequence numbers detected" in result.reasons
    assert "1 items have no stimulus content" in result.reasons


def test_form_gaps_and_duplicate_stimuli_only_warn():
    items = _items("F", 2)
    items[1]["sequence_number"] = 5
    items[1]["content_payload"] = {"stimulus": "word 1"}

    result = can_activate_form({"form_id": "F", "assessment_id": "X"}, items)

    assert result.allowed
    assert result.warnings == [
        "Sequence numbers have gaps (expected 1, 2, 3, ...)",
        "Duplicate stimuli found in form",
    ]


def test_chain_status_counts_only_forms_in_linked_banks():
    forms = [
        {"form_id": "FL-ORF.G2.form01", "assessment_id": ASSESSMENT_ID, "content_bank_id": "FL-ORF.bank1"},
        {"form_id": "FL-ORF.G3.form01", "assessment_id": ASSESSMENT_ID, "content_bank_id": "orphan"},
    ]
    items = _items("FL-ORF.G3.form01", 1)

    chain = calculate_chain_status(_assessment(), [_spec()], [BANK_LINK], forms, items, [])

    assert chain.has_spec_version and chain.has_bank and chain.has_forms
    assert not chain.has_items
    assert chain.missing_steps == ["ITEMS", "SCORING"]
    assert chain.completed_steps == 3
    assert chain.percent == 60
    assert not chain.is_complete


def test_chain_status_complete():
    forms = [{"form_id": "FL-ORF.G2.form01", "assessment_id": ASSESSMENT_ID, "content_bank_id": "FL-ORF.bank1"}]
    chain = calculate_chain_status(
        _assessment(), [_spec()], [BANK_LINK], forms, _items("FL-ORF.G2.form01", 1), [SCORING]
    )

    assert chain.is_complete
    assert chain.percent == 100


def test_format_gate_error():
    assert format_gate_error(GateResult()) == ""
    assert format_gate_error(GateResult(reasons=["a", "b"])) == "Cannot activate:\n• a\n• b"
