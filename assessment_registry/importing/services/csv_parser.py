"""Quote-aware CSV tokenizer and serializer for import payloads."""

from __future__ import annotations

import re
from typing import Any

from .errors import MalformedInputError

_BOM = "\ufeff"
_HEADER_SPACES = re.compile(r"\s+")


def decode_upload(content: Any) -> str:
    """Decode uploaded bytes as UTF-8 (with optional BOM), falling back to Latin-1."""
    if content is None:
        return ""
    if hasattr(content, "read"):
        if hasattr(content, "seek"):
            content.seek(0)
        content = content.read()
    if isinstance(content, str):
        return content
    raw = bytes(content)
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def parse_csv(text: str, *, delimiter: str = ",") -> list[list[str]]:
    """
    Split CSV text into rows of cells.

    Quoted cells may contain the delimiter, line breaks and doubled quotes.
    Unquoted cells are stripped of surrounding whitespace; quoted content is
    kept verbatim. Blank lines are skipped.

    Raises:
        MalformedInputError: when a quoted cell is never closed.
    """
    if text.startswith(_BOM):
        text = text[1:]

    rows: list[list[str]] = []
    row: list[str] = []
    cell: list[str] = []
    in_quotes = False
    cell_quoted = False
    quote_line = 0
    line = 1
    length = len(text)
    index = 0

    def finish_cell() -> None:
        value = "".join(cell)
        row.append(value if cell_quoted else value.strip())
        cell.clear()

    def finish_row() -> None:
        if not row or (len(row) == 1 and row[0] == ""):
            row.clear()
            return
        rows.append(list(row))
        row.clear()

    while index < length:
        char = text[index]
        if in_quotes:
            if char == '"':
                if index + 1 < length and text[index + 1] == '"':
                    cell.append('"')
                    index += 2
                    continue
                in_quotes = False
            else:
                if char == "\n" or (char == "\r" and text[index + 1 : index + 2] != "\n"):
                    line += 1
                cell.append(char)
            index += 1
            continue

        if char == '"' and not "".join(cell).strip():
            cell.clear()
            in_quotes = True
            cell_quoted = True
            quote_line = line
        elif char == delimiter:
            finish_cell()
            cell_quoted = False
        elif char in "\r\n":
            if char == "\r" and text[index + 1 : index + 2] == "\n":
                index += 1
            finish_cell()
            cell_quoted = False
            finish_row()
            line += 1
        elif cell_quoted and char.isspace():
            pass
        else:
            cell.append(char)
        index += 1

    if in_quotes:
        raise MalformedInputError(
            f"Unterminated quoted value starting on line {quote_line}.",
            row_number=quote_line,
        )

    if cell or row or cell_quoted:
        finish_cell()
        finish_row()
    return rows


def _needs_quotes(value: str, delimiter: str) -> bool:
    if not value:
        return False
    if value != value.strip():
        return True
    return any(token in value for token in (delimiter, '"', "\n", "\r"))


def serialize_csv(rows: list[list[Any]], *, delimiter: str = ",") -> str:
    """Render rows as CSV text accepted by ``parse_csv``."""
    lines = []
    for row in rows:
        cells = []
        for value in row:
            text = "" if value is None else str(value)
            if _needs_quotes(text, delimiter):
                text = '"' + text.replace('"', '""') + '"'
            cells.append(text)
        lines.append(delimiter.join(cells))
    return "\n".join(lines)


def normalize_header(name: str) -> str:
    return _HEADER_SPACES.sub("_", str(name).strip().lower())


def rows_to_records(grid: list[list[str]]) -> tuple[list[str], list[dict[str, str]]]:
    """Convert a parsed grid into normalized headers and one dict per data row."""
    if not grid:
        return [], []
    headers = [normalize_header(name) for name in grid[0]]
    records: list[dict[str, str]] = []
    for cells in grid[1:]:
        record = {}
        for position, header in enumerate(headers):
            if not header:
                continue
            record[header] = cells[position] if position < len(cells) else ""
        records.append(record)
    return [header for header in headers if header], records
