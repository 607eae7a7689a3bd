"""Append-only import history records."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from django.utils import timezone

from ...config_proxy import get_setting
from ...store import EntityStore, get_default_store
from ..types import ImportResult

HISTORY_TABLE = "import_history"


def record_import(
    result: ImportResult,
    *,
    import_type: str,
    assessment_id: str | None = None,
    change_note: str | None = None,
    file_name: str | None = None,
    actor: str | None = None,
    store: EntityStore | None = None,
    now: Callable[[], datetime] | None = None,
) -> dict[str, Any]:
    store = store or get_default_store()
    clock = now or timezone.now
    return store.insert(
        HISTORY_TABLE,
        {
            "import_id": uuid.uuid4(),
            "assessment_id": assessment_id or None,
            "import_type": str(import_type),
            "rows_processed": result.rows_processed,
            "rows_created": result.rows_created,
            "rows_updated": result.rows_updated,
            "rows_failed": result.rows_failed,
            "change_note": change_note or None,
            "file_name": file_name or None,
            "imported_at": clock(),
            "imported_by": actor or get_setting("import_settings.default_actor", "CSV Import"),
        },
    )


def list_import_history(
    assessment_id: str | None = None,
    *,
    limit: int | None = None,
    store: EntityStore | None = None,
) -> list[dict[str, Any]]:
    """Return the most recent imports first, optionally for one assessment."""
    store = store or get_default_store()
    lookups = {"assessment_id": assessment_id} if assessment_id else {}
    rows = store.list_by_filter(HISTORY_TABLE, **lookups)
    rows.sort(key=lambda row: row["imported_at"], reverse=True)
    return rows[: limit or get_setting("import_settings.history_limit", 50)]
