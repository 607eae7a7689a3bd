"""Example CSV templates for each import type."""

from __future__ import annotations

from typing import Any

from .schema_registry import normalize_import_type

TEMPLATES: dict[str, str] = {
    "items": (
        "item_id,form_id,item_type,sequence_number,stimulus,text,choices,correct_answer,"
        "scoring_tags,sentence_id,skill_tag,genre,word_count,sentence_count\n"
        "{ASSESSMENT_ID}.G2.form01.passage01,{ASSESSMENT_ID}.G2.form01,passage,1,,"
        '"The Lost Ball. Max had a red ball. He rolled it down the hill.",,,'
        "narrative,,,narrative,,3\n"
        "{ASSESSMENT_ID}.G2.form01.recall.s1,{ASSESSMENT_ID}.G2.form01,recall_sentence_unit,2,,"
        "Max had a red ball.,,,recall,s1,,,,\n"
        "{ASSESSMENT_ID}.G2.form01.q1,{ASSESSMENT_ID}.G2.form01,mcq_item,3,"
        "What color was Max's ball?,,Blue|Red|Green|Yellow,Red,mcq|key_detail,,key_detail,,,"
    ),
    "forms": (
        "form_id,assessment_id,content_bank_id,grade_or_level_tag,form_number,status,"
        "equivalence_set_id\n"
        "{ASSESSMENT_ID}.G2.form01,{ASSESSMENT_ID},{ASSESSMENT_ID}.bank1,G2,1,draft,\n"
        "{ASSESSMENT_ID}.G3.form01,{ASSESSMENT_ID},{ASSESSMENT_ID}.bank1,G3,1,draft,"
    ),
    "banks": (
        "content_bank_id,linked_assessment_id,name,target_bank_size,"
        "equivalence_set_required,differentiation_keys,status\n"
        "{ASSESSMENT_ID}.bank1,{ASSESSMENT_ID},{ASSESSMENT_NAME} Content Bank,100,false,"
        "grade|form,empty"
    ),
    "specVersion": (
        "spec_version_id,assessment_id,section,field,value\n"
        "{ASSESSMENT_ID}.v1,{ASSESSMENT_ID},section_a,assessment_name,{ASSESSMENT_NAME}\n"
        "{ASSESSMENT_ID}.v1,{ASSESSMENT_ID},section_a,version,1.0\n"
        "{ASSESSMENT_ID}.v1,{ASSESSMENT_ID},section_b,component,{COMPONENT}\n"
        "{ASSESSMENT_ID}.v1,{ASSESSMENT_ID},section_e,total_items,50"
    ),
    "scoring": (
        "scoring_model_id,assessment_id,metric_type,metric_id,metric_name,"
        "metric_data_type,formula\n"
        "{ASSESSMENT_ID}.scoring01,{ASSESSMENT_ID},raw,items_correct,Items Correct,count,\n"
        "{ASSESSMENT_ID}.scoring01,{ASSESSMENT_ID},raw,items_total,Items Total,count,\n"
        "{ASSESSMENT_ID}.scoring01,{ASSESSMENT_ID},derived,accuracy,Accuracy,rate,"
        "(items_correct/items_total)*100"
    ),
}

DESCRIPTIONS: dict[str, str] = {
    "items": (
        "Items template includes comprehension support with sentence_id, skill_tag, "
        "and genre columns. Use pipe (|) for choices and scoring_tags."
    ),
    "forms": (
        "Forms template defines form structure with grade tags and bank references. "
        "form_number should be unique per grade."
    ),
    "banks": "Banks template creates content bank metadata. Use pipe (|) for differentiation_keys.",
    "specVersion": (
        "Spec version template uses vertical format (one field per row) for updating "
        "assessment specification sections."
    ),
    "scoring": "Scoring template defines raw and derived metrics. Derived metrics can include formulas.",
}


def get_template_content(
    import_type: Any,
    assessment_id: str,
    assessment_name: str | None = None,
    component: str | None = None,
) -> str:
    content = TEMPLATES[normalize_import_type(import_type)]
    return (
        content.replace("{ASSESSMENT_ID}", assessment_id)
        .replace("{ASSESSMENT_NAME}", assessment_name or assessment_id)
        .replace("{COMPONENT}", component or "Component")
    )


def get_template_description(import_type: Any) -> str:
    return DESCRIPTIONS[normalize_import_type(import_type)]


def get_template_file_name(import_type: Any, assessment_id: str) -> str:
    return f"{normalize_import_type(import_type)}_{assessment_id}_template.csv"
