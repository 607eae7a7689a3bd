"""Transforms from flat CSV cells to structured record values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..constants import LIST_SEPARATOR
from ..types import ImportRecord

_INTEGER = re.compile(r"^\d+$")
_DECIMAL = re.compile(r"^\d+\.\d+$")


def split_list(value: Any) -> list[str]:
    """Split a pipe-delimited cell into trimmed, non-empty parts."""
    text = "" if value is None else str(value)
    if not text.strip():
        return []
    return [part.strip() for part in text.split(LIST_SEPARATOR) if part.strip()]


def unique_list(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def coerce_value(value: str) -> Any:
    """
    Coerce a vertical-import value cell.

    ``a|b`` becomes a list, digits become ``int``, digits with one decimal
    point become ``float``, ``true``/``false`` become ``bool``.
    """
    if LIST_SEPARATOR in value:
        return [part.strip() for part in value.split(LIST_SEPARATOR)]
    if _INTEGER.match(value):
        return int(value)
    if _DECIMAL.match(value):
        return float(value)
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    return value


def to_int(value: Any, default: int | None = None) -> int | None:
    text = "" if value is None else str(value).strip()
    if not text:
        return default
    return int(text)


def to_bool(value: Any) -> bool:
    return str(value or "").strip().lower() == "true"


def word_count(text: str) -> int:
    return len(text.split())


def option_label(position: int) -> str:
    return chr(ord("A") + position)


@dataclass
class ContentPayload:
    """Built ``content_payload`` plus notes about lenient substitutions."""

    payload: dict[str, Any] = field(default_factory=dict)
    unmatched_correct_answer: str | None = None


def build_content_payload(row: ImportRecord) -> ContentPayload:
    """
    Compose an item's structured content from its flat columns.

    Choices become labeled options (A, B, C...). When ``correct_answer``
    matches no option text the first label is used and the unmatched value is
    reported on the result.
    """
    payload: dict[str, Any] = {}
    result = ContentPayload(payload=payload)

    if row.get("stimulus"):
        payload["stimulus"] = row["stimulus"]
    if row.get("text"):
        payload["text"] = row["text"]

    choices = row.get("choices") or ""
    if choices:
        payload["options"] = [
            {"option_id": option_label(position), "text": text.strip()}
            for position, text in enumerate(choices.split(LIST_SEPARATOR))
        ]

    correct_answer = row.get("correct_answer") or ""
    if correct_answer and payload.get("options"):
        match = next(
            (
                option["option_id"]
                for option in payload["options"]
                if option["text"] == correct_answer.strip()
            ),
            None,
        )
        if match is None:
            result.unmatched_correct_answer = correct_answer
            match = payload["options"][0]["option_id"]
        payload["correct_option_id"] = match

    for key in ("sentence_id", "skill_tag", "genre"):
        if row.get(key):
            payload[key] = row[key]
    for key in ("word_count", "sentence_count"):
        if row.get(key):
            payload[key] = int(row[key])

    if row.get("item_type") == "passage" and row.get("text") and not row.get("word_count"):
        payload["word_count"] = word_count(row["text"])

    return result
