import pytest

from assessment_registry.importing.constants import ImportType
from assessment_registry.importing.services.csv_parser import parse_csv, rows_to_records
from assessment_registry.importing.services.row_validator import validate_columns, validate_rows
from assessment_registry.importing.services.templates import (
    get_template_content,
    get_template_description,
    get_template_file_name,
)

pytestmark = pytest.mark.unit


def test_placeholders_are_substituted():
    content = get_template_content("specVersion", "PH-LWID", "Letter Word ID", "Phonics")

    assert "{ASSESSMENT_ID}" not in content
    assert "PH-LWID.v1,PH-LWID,section_a,assessment_name,Letter Word ID" in content
    assert "section_b,component,Phonics" in content


def test_assessment_name_defaults_to_id():
    content = get_template_content("banks", "PH-LWID")
    assert "PH-LWID Content Bank" in content


@pytest.mark.parametrize("import_type", ImportType.values)
def test_every_template_passes_schema_validation(import_type):
    headers, records = rows_to_records(parse_csv(get_template_content(import_type, "RC-MAIN")))

    assert validate_columns(import_type, headers) == []
    assert validate_rows(import_type, records).errors == []


def test_descriptions_and_file_names():
    assert "pipe (|)" in get_template_description("items")
    assert get_template_file_name(ImportType.SCORING, "RC-MAIN") == "scoring_RC-MAIN_template.csv"
