import pytest

from assessment_registry.importing.services.payloads import (
    build_content_payload,
    coerce_value,
    split_list,
    to_bool,
    to_int,
)

pytestmark = pytest.mark.unit


def test_choices_become_labeled_options_and_answer_maps_to_label():
    content = build_content_payload(
        {
            "item_type": "mcq_item",
            "stimulus": "What color was the ball?",
            "choices": "Blue|Red|Green",
            "correct_answer": "Red",
        }
    )

    assert content.payload["options"] == [
        {"option_id": "A", "text": "Blue"},
        {"option_id": "B", "text": "Red"},
        {"option_id": "C", "text": "Green"},
    ]
    assert content.payload["correct_option_id"] == "B"
    assert content.unmatched_correct_answer is None


def test_unmatched_answer_falls_back_to_first_option():
    content = build_content_payload(
        {"stimulus": "?", "choices": "Blue|Red", "correct_answer": "Purple"}
    )

    assert content.payload["correct_option_id"] == "A"
    assert content.unmatched_correct_answer == "Purple"


def test_passage_without_word_count_gets_whitespace_token_count():
    content = build_content_payload(
        {"item_type": "passage", "text": "Max had a  red ball.", "genre": "narrative"}
    )

    assert content.payload["word_count"] == 5
    assert content.payload["genre"] == "narrative"


def test_explicit_counts_are_integers():
    content = build_content_payload(
        {"item_type": "passage", "text": "One two", "word_count": "40", "sentence_count": "3"}
    )

    assert content.payload["word_count"] == 40
    assert content.payload["sentence_count"] == 3


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("a| b |c", ["a", "b", "c"]),
        ("42", 42),
        ("2.5", 2.5),
        ("TRUE", True),
        ("false", False),
        ("1.2.3", "1.2.3"),
        ("", ""),
        ("-3", "-3"),
    ],
)
def test_coerce_value(raw, expected):
    assert coerce_value(raw) == expected


def test_list_and_scalar_helpers():
    assert split_list(" grade | | form ") == ["grade", "form"]
    assert split_list(None) == []
    assert to_int("", 0) == 0
    assert to_int(" 12 ") == 12
    assert to_bool("True") is True
    assert to_bool("yes") is False
