"""Chunked upsert of transformed records with per-batch failure isolation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from ...config_proxy import get_setting
from ...store import EntityStore, StoreError
from ..constants import DEFAULT_BATCH_SIZE
from ..types import ProgressCallback
from .audit_log import log_import_event
from .errors import BatchWriteFailure

logger = logging.getLogger(__name__)


@dataclass
class BatchWriteResult:
    created_keys: list[str] = field(default_factory=list)
    updated_keys: list[str] = field(default_factory=list)
    failed_keys: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    batches: int = 0

    @property
    def written(self) -> int:
        return len(self.created_keys) + len(self.updated_keys)


def resolve_batch_size(batch_size: int | None = None) -> int:
    size = batch_size or get_setting("import_settings.batch_size", DEFAULT_BATCH_SIZE)
    return max(int(size), 1)


def batch_upsert(
    store: EntityStore,
    table: str,
    records: list[dict[str, Any]],
    conflict_key: str,
    *,
    batch_size: int | None = None,
    on_progress: ProgressCallback | None = None,
    actor: str | None = None,
) -> BatchWriteResult:
    """
    Write ``records`` in fixed-size batches keyed on ``conflict_key``.

    A rejected batch is recorded as ``Batch <n> failed: <message>`` and the
    remaining batches are still attempted. Keys already present before a batch
    is written are reported as updates.
    """
    size = resolve_batch_size(batch_size)
    result = BatchWriteResult()
    total = len(records)
    total_batches = math.ceil(total / size) if total else 0

    for start in range(0, total, size):
        batch = records[start : start + size]
        batch_number = start // size + 1
        keys = [str(record[conflict_key]) for record in batch]
        result.batches += 1
        try:
            existing = store.existing_ids(table, keys)
            store.upsert_batch(table, batch, conflict_key)
        except StoreError as exc:
            failure = BatchWriteFailure(batch_number, exc.message)
            result.errors.append(failure.message)
            result.failed_keys.extend(keys)
            logger.warning("Batch %s of %s failed for %s: %s", batch_number, total_batches, table, exc)
            log_import_event(
                "batch_failed",
                user_id=actor,
                details={"table": table, "batch": batch_number, "error": exc.message},
                kpis={"records": len(batch)},
                level=logging.WARNING,
            )
        else:
            for key in keys:
                if key in existing:
                    result.updated_keys.append(key)
                else:
                    result.created_keys.append(key)
        if on_progress is not None:
            on_progress(start + len(batch), total, f"Uploading batch {batch_number}/{total_batches}")

    return result
