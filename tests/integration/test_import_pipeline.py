import pytest

from assessment_registry.importing.constants import ImportIssueCode, ImportIssueStage
from assessment_registry.importing.models import ImportHistory
from assessment_registry.importing.services import (
    MalformedInputError,
    ReferenceViolationError,
    SchemaViolationError,
    list_import_history,
    raise_for_blocking_issues,
    run_import,
)
from assessment_registry.models import (
    Assessment,
    ContentBank,
    Form,
    Item,
    ScoringOutput,
    SpecVersion,
)
from assessment_registry.store import StoreError
from assessment_registry.testing import InMemoryEntityStore, override_registry_settings

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

BANKS_CSV = (
    "content_bank_id,linked_assessment_id,name,target_bank_size,differentiation_keys\n"
    "RC-MAIN.bank1,RC-MAIN,Main Bank,40,grade|form\n"
)

FORMS_CSV = (
    "form_id,assessment_id,content_bank_id,grade_or_level_tag,form_number\n"
    "RC-MAIN.G2.form01,RC-MAIN,RC-MAIN.bank1,G2,1\n"
    "RC-MAIN.G3.form01,RC-MAIN,RC-MAIN.bank1,G3,1\n"
)

ITEMS_CSV = (
    "Item ID,Form ID,Item Type,Sequence Number,Stimulus,Choices,Correct Answer\n"
    'RC-MAIN.G2.form01.q1,RC-MAIN.G2.form01,mcq_item,1,"What color, exactly?",Blue|Red|Green,Red\n'
    "RC-MAIN.G2.form01.q2,RC-MAIN.G2.form01,mcq_item,2,Who ran?,Max|Sam,Sam\n"
)


@pytest.fixture
def assessment():
    return Assessment.objects.create(assessment_id="RC-MAIN", component_code="RC", name="Reading")


def test_full_content_chain_imports(assessment):
    banks = run_import("banks", BANKS_CSV, change_note="banks", context_assessment_id="RC-MAIN")
    forms = run_import("forms", FORMS_CSV, change_note="forms", context_assessment_id="RC-MAIN")
    items = run_import("items", ITEMS_CSV.encode("utf-8"), change_note="items", file_name="items.csv")

    assert banks.ok and forms.ok and items.ok
    assert items.result.rows_created == 2
    assert ContentBank.objects.get().differentiation_keys == ["grade", "form"]
    assert Form.objects.count() == 2
    question = Item.objects.get(pk="RC-MAIN.G2.form01.q1")
    assert question.content_payload["stimulus"] == "What color, exactly?"
    assert question.content_payload["correct_option_id"] == "B"
    assert ImportHistory.objects.count() == 3


def test_items_for_unknown_form_block_the_write(assessment):
    pipeline = run_import("items", ITEMS_CSV)

    assert not pipeline.ok
    assert pipeline.result is None
    assert [issue.code for issue in pipeline.blocking_issues] == [ImportIssueCode.REFERENCE_NOT_FOUND]
    assert Item.objects.count() == 0
    assert ImportHistory.objects.count() == 0
    with pytest.raises(ReferenceViolationError):
        raise_for_blocking_issues(pipeline)


def test_items_may_reference_forms_pending_in_same_submission(assessment):
    pipeline = run_import(
        "items",
        ITEMS_CSV,
        pending_ids={"forms": ["RC-MAIN.G2.form01"]},
        dry_run=True,
    )

    assert pipeline.ok
    assert pipeline.result is None


def test_dry_run_writes_nothing(assessment):
    pipeline = run_import("forms", FORMS_CSV, dry_run=True)

    assert pipeline.ok
    assert pipeline.references.analysis.to_create == 2
    assert Form.objects.count() == 0


def test_context_mismatch_blocks_import(assessment):
    pipeline = run_import("forms", FORMS_CSV, context_assessment_id="PA-OONS")

    assert {issue.code for issue in pipeline.blocking_issues} == {ImportIssueCode.CONTEXT_MISMATCH}
    assert Form.objects.count() == 0


def test_malformed_text_is_reported_not_raised():
    pipeline = run_import("forms", 'form_id,assessment_id\n"open,RC-MAIN\n')

    assert pipeline.blocking_issues[0].code == ImportIssueCode.MALFORMED_INPUT
    with pytest.raises(MalformedInputError):
        raise_for_blocking_issues(pipeline)


def test_missing_columns_stop_before_row_validation():
    pipeline = run_import("forms", "form_id,assessment_id\nx,y\n")

    assert [issue.code for issue in pipeline.blocking_issues] == [ImportIssueCode.MISSING_REQUIRED_COLUMN]
    with pytest.raises(SchemaViolationError):
        raise_for_blocking_issues(pipeline)


def test_empty_and_unknown_inputs():
    assert run_import("forms", "form_id\n").blocking_issues[0].code == ImportIssueCode.EMPTY_INPUT
    assert run_import("students", "a\n1").blocking_issues[0].code == ImportIssueCode.UNKNOWN_IMPORT_TYPE


def test_row_limit_from_settings():
    with override_registry_settings(import_settings={"max_rows": 1}):
        pipeline = run_import("forms", FORMS_CSV)

    assert pipeline.blocking_issues[0].code == ImportIssueCode.ROW_LIMIT_EXCEEDED


def test_spec_version_import_merges_sections_and_logs_once(assessment):
    SpecVersion.objects.create(
        spec_version_id="RC-MAIN.v1",
        assessment=assessment,
        section_a={"version": "1.0"},
    )
    csv_text = (
        "spec_version_id,assessment_id,section,field,value\n"
        "RC-MAIN.v1,RC-MAIN,section_a,assessment_name,Reading\n"
        "RC-MAIN.v1,RC-MAIN,section_e,total_items,50\n"
    )

    pipeline = run_import("specVersion", csv_text, change_note="Q3", actor="ana")

    spec = SpecVersion.objects.get()
    assert pipeline.result.rows_updated == 2
    assert spec.section_a == {"version": "1.0", "assessment_name": "Reading"}
    assert spec.section_e == {"total_items": 50}
    assert [entry["description"] for entry in spec.change_log] == [
        "[SPECVERSION Import] 0 created, 2 updated: Q3"
    ]
    assert spec.change_log[0]["author"] == "ana"


def test_scoring_import_and_history(assessment):
    csv_text = (
        "scoring_model_id,assessment_id,metric_type,metric_id,metric_name,formula\n"
        "RC-MAIN.scoring01,RC-MAIN,raw,items_correct,Items Correct,\n"
        "RC-MAIN.scoring01,RC-MAIN,derived,accuracy,Accuracy,items_correct/items_total\n"
    )

    first = run_import("scoring", csv_text, context_assessment_id="RC-MAIN", change_note="v1")
    second = run_import("scoring", csv_text, context_assessment_id="RC-MAIN", change_note="v2")

    assert (first.result.rows_created, second.result.rows_updated) == (2, 2)
    assert ScoringOutput.objects.get().formulas[0]["formula_id"] == "accuracy_formula"
    history = list_import_history("RC-MAIN")
    assert [row["change_note"] for row in history] == ["v2", "v1"]
    assert history[0]["imported_by"] == "CSV Import"
    assert str(history[0]["import_id"]) == second.history_id


class UnreachableStore(InMemoryEntityStore):
    def list_by_filter(self, table, **lookups):
        raise StoreError("read timeout", table=table)


def test_reference_lookup_failure_is_reported_not_raised():
    store = UnreachableStore()

    pipeline = run_import("forms", FORMS_CSV, store=store)

    assert not pipeline.ok
    assert pipeline.result is None
    issue = pipeline.blocking_issues[0]
    assert issue.code == ImportIssueCode.REFERENCE_LOOKUP_FAILED
    assert issue.stage == ImportIssueStage.REFERENCE
    assert issue.message == "Could not check references: read timeout"
    assert ("upsert_batch", "forms") not in store.calls
    with pytest.raises(ReferenceViolationError):
        raise_for_blocking_issues(pipeline)
