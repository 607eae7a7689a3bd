import pytest
from django.contrib.auth import get_user_model

from assessment_registry.models import Assessment, ContentBank, Form
from assessment_registry.testing import RegistryGraphQLTestClient

pytestmark = [pytest.mark.integration, pytest.mark.django_db]

FORMS_CSV = (
    "form_id,assessment_id,content_bank_id,grade_or_level_tag,form_number\n"
    "FL-WRF.G1.form01,FL-WRF,FL-WRF.bank1,G1,1\n"
    "FL-WRF.G1.form02,FL-WRF,FL-WRF.bank1,G1,2\n"
)

VALIDATE_MUTATION = """
mutation Validate($input: ValidateImportInput!) {
  validateImport(input: $input) {
    ok
    totalRows
    validRows
    issues { code rowNumber fieldPath message severity }
    warnings { code message severity }
    analysis { toCreate toUpdate newIds existingIds missingReferences }
  }
}
"""

RUN_MUTATION = """
mutation Run($input: RunImportInput!) {
  runImport(input: $input) {
    ok
    totalRows
    historyId
    issues { code message }
    result { success rowsProcessed rowsCreated rowsUpdated rowsFailed errors warnings }
  }
}
"""

TEMPLATE_QUERY = """
query Template($importType: ImportTypeEnum!, $assessmentId: String!) {
  importTemplate(importType: $importType, assessmentId: $assessmentId, assessmentName: "Word Reading") {
    importType
    fileName
    content
    description
    requiredColumns
    optionalColumns
  }
}
"""

HISTORY_QUERY = """
query History($assessmentId: String) {
  importHistory(assessmentId: $assessmentId) {
    importId
    importType
    rowsProcessed
    rowsCreated
    changeNote
    fileName
    importedBy
  }
}
"""


@pytest.fixture
def assessment():
    assessment = Assessment.objects.create(assessment_id="FL-WRF", component_code="FL")
    ContentBank.objects.create(
        content_bank_id="FL-WRF.bank1", linked_assessment=assessment, name="Word Reading Bank"
    )
    return assessment


@pytest.fixture
def client():
    user = get_user_model().objects.create_user(username="content_editor", password="pass")
    return RegistryGraphQLTestClient(user=user)


def test_validate_import_reports_analysis_without_writing(client, assessment):
    response = client.execute(
        VALIDATE_MUTATION,
        variables={"input": {"importType": "FORMS", "csvText": FORMS_CSV, "assessmentId": "FL-WRF"}},
    )

    assert "errors" not in response
    payload = response["data"]["validateImport"]
    assert payload["ok"] is True
    assert payload["totalRows"] == 2
    assert payload["validRows"] == 2
    assert payload["issues"] == []
    assert payload["analysis"]["toCreate"] == 2
    assert payload["analysis"]["newIds"] == ["FL-WRF.G1.form01", "FL-WRF.G1.form02"]
    assert Form.objects.count() == 0


def test_validate_import_returns_row_issues(client, assessment):
    bad_csv = FORMS_CSV.replace("G1,2", "G99,2")

    response = client.execute(
        VALIDATE_MUTATION,
        variables={"input": {"importType": "FORMS", "csvText": bad_csv}},
    )

    payload = response["data"]["validateImport"]
    assert payload["ok"] is False
    assert payload["issues"] == [
        {
            "code": "SCHEMA_VIOLATION",
            "rowNumber": 3,
            "fieldPath": "grade_or_level_tag",
            "message": "Invalid grade tag",
            "severity": "ERROR",
        }
    ]
    assert payload["analysis"] is None


def test_run_import_writes_and_records_history(client, assessment):
    response = client.execute(
        RUN_MUTATION,
        variables={
            "input": {
                "importType": "FORMS",
                "csvText": FORMS_CSV,
                "assessmentId": "FL-WRF",
                "changeNote": "initial forms",
                "fileName": "forms.csv",
            }
        },
    )

    assert "errors" not in response
    payload = response["data"]["runImport"]
    assert payload["ok"] is True
    assert payload["result"]["rowsCreated"] == 2
    assert payload["historyId"]
    assert Form.objects.count() == 2

    history = client.execute(HISTORY_QUERY, variables={"assessmentId": "FL-WRF"})
    entries = history["data"]["importHistory"]
    assert len(entries) == 1
    assert entries[0]["importType"] == "FORMS"
    assert entries[0]["importId"] == payload["historyId"]
    assert entries[0]["changeNote"] == "initial forms"
    assert entries[0]["fileName"] == "forms.csv"
    assert entries[0]["importedBy"] == "content_editor"


def test_run_import_blocked_by_missing_form(client, assessment):
    items_csv = (
        "item_id,form_id,item_type,sequence_number,stimulus\n"
        "FL-WRF.G1.form09.i1,FL-WRF.G1.form09,word,1,cat\n"
    )

    response = client.execute(
        RUN_MUTATION,
        variables={"input": {"importType": "ITEMS", "csvText": items_csv}},
    )

    payload = response["data"]["runImport"]
    assert payload["ok"] is False
    assert payload["result"] is None
    assert payload["issues"][0]["code"] == "REFERENCE_NOT_FOUND"


def test_run_import_accepts_pending_ids(client, assessment):
    items_csv = (
        "item_id,form_id,item_type,sequence_number,stimulus\n"
        "FL-WRF.G1.form09.i1,FL-WRF.G1.form09,word,1,cat\n"
    )

    response = client.execute(
        RUN_MUTATION,
        variables={
            "input": {
                "importType": "ITEMS",
                "csvText": items_csv,
                "pendingIds": '{"forms": ["FL-WRF.G1.form09"]}',
                "dryRun": True,
            }
        },
    )

    payload = response["data"]["runImport"]
    assert payload["ok"] is True
    assert payload["result"] is None


def test_import_template_query(client):
    response = client.execute(
        TEMPLATE_QUERY,
        variables={"importType": "SPEC_VERSION", "assessmentId": "FL-WRF"},
    )

    template = response["data"]["importTemplate"]
    assert template["importType"] == "SPEC_VERSION"
    assert template["fileName"] == "specVersion_FL-WRF_template.csv"
    assert "FL-WRF.v1,FL-WRF,section_a,assessment_name,Word Reading" in template["content"]
    assert template["requiredColumns"] == [
        "spec_version_id",
        "assessment_id",
        "section",
        "field",
        "value",
    ]
    assert template["optionalColumns"] == []
