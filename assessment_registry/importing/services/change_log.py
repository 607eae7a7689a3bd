"""Append-only change log entries for audited entities."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

from django.utils import timezone

from ...config_proxy import get_setting
from ..types import ChangeLogEntry


def create_change_log_entry(
    description: str,
    author: str | None = None,
    *,
    now: Callable[[], datetime] | None = None,
) -> ChangeLogEntry:
    clock = now or timezone.now
    return {
        "timestamp": clock().isoformat(),
        "author": author or get_setting("import_settings.default_actor", "CSV Import"),
        "description": description,
    }


def append_to_change_log(existing: Any, entry: ChangeLogEntry) -> list[Any]:
    """Return a new log with ``entry`` appended; non-list logs count as empty."""
    log = list(existing) if isinstance(existing, list) else []
    log.append(entry)
    return log


def format_import_summary(
    import_type: str,
    created: int,
    updated: int,
    note: str | None = None,
) -> str:
    summary = f"[{str(import_type).upper()} Import] {created} created, {updated} updated"
    if note and note.strip():
        return f"{summary}: {note.strip()}"
    return summary
