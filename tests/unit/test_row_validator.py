import pytest

from assessment_registry.importing.constants import ImportIssueCode, ImportIssueSeverity
from assessment_registry.importing.services.csv_parser import parse_csv, rows_to_records
from assessment_registry.importing.services.errors import ImportServiceError
from assessment_registry.importing.services.row_validator import validate_columns, validate_rows
from assessment_registry.importing.services.schema_registry import (
    get_required_columns,
    get_schema,
    normalize_import_type,
)

pytestmark = pytest.mark.unit

FORM_ID = "PA-OONS.G1.form01"


def _item(**overrides):
    row = {
        "item_id": f"{FORM_ID}.i1",
        "form_id": FORM_ID,
        "item_type": "word",
        "sequence_number": "1",
        "stimulus": "cat",
    }
    row.update(overrides)
    return row


def _codes(issues):
    return [issue.code for issue in issues]


def test_required_columns_per_import_type():
    assert get_required_columns("items") == ["item_id", "form_id", "item_type", "sequence_number"]
    assert get_required_columns("specVersion") == [
        "spec_version_id",
        "assessment_id",
        "section",
        "field",
        "value",
    ]
    assert get_schema("banks").table == "content_banks"


def test_unknown_import_type_is_rejected():
    with pytest.raises(ImportServiceError) as excinfo:
        normalize_import_type("students")
    assert excinfo.value.code == ImportIssueCode.UNKNOWN_IMPORT_TYPE


def test_validate_columns_reports_all_missing_columns_once():
    issues = validate_columns("forms", ["form_id", "assessment_id", "content_bank_id"])

    assert len(issues) == 1
    assert issues[0].row_number == 1
    assert issues[0].code == ImportIssueCode.MISSING_REQUIRED_COLUMN
    assert issues[0].message == "Missing required columns: grade_or_level_tag, form_number"


def test_validate_columns_accepts_complete_header():
    assert validate_columns("items", ["item_id", "form_id", "item_type", "sequence_number", "text"]) == []


def test_valid_item_rows_pass():
    result = validate_rows(
        "items",
        [
            _item(),
            _item(item_id=f"{FORM_ID}.i2", sequence_number="2", stimulus="", text="dog"),
        ],
    )

    assert result.valid
    assert result.valid_rows == 2
    assert result.total_rows == 2
    assert result.warnings == []


def test_item_field_rules_are_enforced():
    result = validate_rows(
        "items",
        [
            _item(item_type="bogus"),
            _item(item_id=f"{FORM_ID}.i2", sequence_number="0"),
            _item(item_id=f"{FORM_ID}.i3", sequence_number="abc"),
        ],
    )

    messages = {(issue.row_number, issue.field_path): issue.message for issue in result.errors}
    assert messages[(2, "item_type")].startswith("Invalid value 'bogus'")
    assert messages[(3, "sequence_number")] == "Must be at least 1"
    assert messages[(4, "sequence_number")] == "Must be a number"
    assert set(_codes(result.errors)) == {ImportIssueCode.SCHEMA_VIOLATION}
    assert result.valid_rows == 0


def test_item_requires_stimulus_or_text():
    result = validate_rows("items", [_item(stimulus="")])

    assert len(result.errors) == 1
    assert result.errors[0].message == "Either stimulus or text is required"
    assert result.errors[0].row_number == 2


def test_duplicate_item_ids_flag_every_involved_row():
    result = validate_rows(
        "items",
        [
            _item(),
            _item(sequence_number="2", stimulus="dog"),
            _item(item_id=f"{FORM_ID}.i3", sequence_number="3", stimulus="sun"),
        ],
    )

    duplicates = [issue for issue in result.errors if issue.code == ImportIssueCode.DUPLICATE_MATCHING_KEY]
    assert [issue.row_number for issue in duplicates] == [2, 3]
    assert duplicates[0].message == f"Duplicate matching key '{FORM_ID}.i1' in batch."
    assert result.valid_rows == 1


def test_duplicate_sequence_within_form_is_an_error():
    result = validate_rows(
        "items",
        [_item(), _item(item_id=f"{FORM_ID}.i2", stimulus="dog")],
    )

    assert _codes(result.errors) == [ImportIssueCode.DUPLICATE_MATCHING_KEY] * 2
    assert result.errors[0].field_path == "form_id,sequence_number"


def test_lineage_and_duplicate_stimulus_are_warnings():
    result = validate_rows(
        "items",
        [
            _item(stimulus="Cat"),
            _item(item_id="elsewhere.i2", sequence_number="2", stimulus="cat"),
        ],
    )

    assert result.valid
    assert _codes(result.warnings) == [
        ImportIssueCode.LINEAGE_MISMATCH,
        ImportIssueCode.DUPLICATE_STIMULUS,
    ]
    assert all(issue.severity == ImportIssueSeverity.WARNING for issue in result.warnings)
    assert "first seen on row 2" in result.warnings[1].message


def test_form_rules_and_lineage():
    result = validate_rows(
        "forms",
        [
            {
                "form_id": "PA-OONS.G1.form01",
                "assessment_id": "PA-OONS",
                "content_bank_id": "PA-OONS.bank1",
                "grade_or_level_tag": "G1",
                "form_number": "1",
            },
            {
                "form_id": "custom-form",
                "assessment_id": "PA-OONS",
                "content_bank_id": "PA-OONS.bank1",
                "grade_or_level_tag": "G99",
                "form_number": "2",
            },
        ],
    )

    assert [(issue.row_number, issue.message) for issue in result.errors] == [(3, "Invalid grade tag")]
    assert [(issue.row_number, issue.code) for issue in result.warnings] == [
        (3, ImportIssueCode.LINEAGE_MISMATCH)
    ]


def test_spec_version_section_must_be_a_through_j():
    row = {
        "spec_version_id": "PA-OONS.v1",
        "assessment_id": "PA-OONS",
        "section": "section_k",
        "field": "name",
        "value": "x",
    }

    result = validate_rows("specVersion", [row])

    assert result.errors[0].field_path == "section"
    assert result.errors[0].message == "Section must be section_a through section_j"


def test_spec_version_same_field_twice_is_a_duplicate():
    row = {
        "spec_version_id": "PA-OONS.v1",
        "assessment_id": "PA-OONS",
        "section": "section_a",
        "field": "name",
        "value": "x",
    }

    result = validate_rows("specVersion", [row, dict(row, value="y")])

    assert _codes(result.errors) == [ImportIssueCode.DUPLICATE_MATCHING_KEY] * 2


def test_scoring_formula_on_raw_metric_is_ignored_with_warning():
    result = validate_rows(
        "scoring",
        [
            {
                "scoring_model_id": "PA-OONS.scoring01",
                "assessment_id": "PA-OONS",
                "metric_type": "raw",
                "metric_id": "items_correct",
                "metric_name": "Items Correct",
                "formula": "a+b",
            }
        ],
    )

    assert result.valid
    assert _codes(result.warnings) == [ImportIssueCode.IGNORED_VALUE]


def test_scoring_metric_type_must_be_raw_or_derived():
    result = validate_rows(
        "scoring",
        [
            {
                "scoring_model_id": "PA-OONS.scoring01",
                "assessment_id": "PA-OONS",
                "metric_type": "weighted",
                "metric_id": "m",
                "metric_name": "M",
            }
        ],
    )

    assert result.errors[0].field_path == "metric_type"


def test_row_numbers_count_records_not_physical_lines():
    text = (
        "item_id,form_id,item_type,sequence_number,stimulus\n"
        f"{FORM_ID}.i1,{FORM_ID},word,1,cat\n"
        f'{FORM_ID}.i2,{FORM_ID},word,2,"two\nlines"\n'
        "\n"
        f"{FORM_ID}.i3,{FORM_ID},bogus,3,dog\n"
    )
    _, records = rows_to_records(parse_csv(text))

    result = validate_rows("items", records)

    assert [(issue.row_number, issue.field_path) for issue in result.errors] == [(4, "item_type")]
