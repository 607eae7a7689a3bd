"""Per-type transforms and writes for validated import records."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ...config_proxy import get_setting
from ...store import EntityStore, StoreError, get_default_store
from ..constants import FIRST_DATA_ROW, ImportType
from ..types import ImportRecord, ImportResult, ProgressCallback
from .audit_log import log_import_event
from .batch_writer import BatchWriteResult, batch_upsert
from .change_log import append_to_change_log, create_change_log_entry, format_import_summary
from .payloads import build_content_payload, coerce_value, split_list, to_bool, to_int, unique_list
from .schema_registry import normalize_import_type

logger = logging.getLogger(__name__)


@dataclass
class ProcessContext:
    store: EntityStore
    change_note: str
    actor: str | None = None
    batch_size: int | None = None
    on_progress: ProgressCallback | None = None

    def progress(self, done: int, total: int, phase: str) -> None:
        if self.on_progress is not None:
            self.on_progress(done, total, phase)


def group_rows(records: list[ImportRecord], key: str) -> dict[str, list[ImportRecord]]:
    """Group records by ``key`` keeping first-seen order."""
    groups: dict[str, list[ImportRecord]] = {}
    for record in records:
        groups.setdefault(str(record.get(key) or ""), []).append(record)
    return groups


class ImportProcessor:
    """Base strategy: transform one row into one record and batch-upsert it."""

    import_type: str = ""
    table: str = ""
    conflict_key: str = ""
    label: str = ""

    def transform(
        self, records: list[ImportRecord], context: ProcessContext, result: ImportResult
    ) -> list[dict[str, Any]]:
        """Build the records to write; the default maps each row through ``transform_row``."""
        return [
            self.transform_row(record, FIRST_DATA_ROW + offset, context, result)
            for offset, record in enumerate(records)
        ]

    def transform_row(
        self,
        record: ImportRecord,
        row_number: int,
        context: ProcessContext,
        result: ImportResult,
    ) -> dict[str, Any]:
        """
        Map one row to one record.

        Only required by processors that keep the default ``transform``.
        """
        raise NotImplementedError(f"{type(self).__name__} does not transform single rows")

    def write(
        self, prepared: list[dict[str, Any]], context: ProcessContext
    ) -> BatchWriteResult:
        return batch_upsert(
            context.store,
            self.table,
            prepared,
            self.conflict_key,
            batch_size=context.batch_size,
            on_progress=context.on_progress,
            actor=context.actor,
        )

    def process(self, records: list[ImportRecord], context: ProcessContext) -> ImportResult:
        result = ImportResult(rows_processed=len(records))
        context.progress(0, len(records), f"Building {self.label}...")
        prepared = [row for row in self.transform(records, context, result) if row is not None]
        written = self.write(prepared, context)
        result.rows_created += len(written.created_keys)
        result.rows_updated += len(written.updated_keys)
        result.rows_failed += len(written.failed_keys)
        for message in written.errors:
            result.add_error(message)
        return result


class ItemsProcessor(ImportProcessor):
    import_type = ImportType.ITEMS
    table = "items"
    conflict_key = "item_id"
    label = "items"

    def transform(self, records, context, result):
        strict = bool(get_setting("import_settings.strict_correct_answer", False))
        prepared = []
        for offset, record in enumerate(records):
            row_number = FIRST_DATA_ROW + offset
            content = build_content_payload(record)
            unmatched = content.unmatched_correct_answer
            if unmatched is not None:
                if strict:
                    result.rows_failed += 1
                    result.add_error(
                        f"Row {row_number}: correct_answer: '{unmatched}' does not match any choice"
                    )
                    continue
                message = (
                    f"Row {row_number}: correct_answer '{unmatched}' does not match any "
                    f"choice; defaulting to '{content.payload['correct_option_id']}'"
                )
                logger.warning("Item %s: %s", record.get("item_id"), message)
                result.warnings.append(message)
            prepared.append(
                {
                    "item_id": record["item_id"],
                    "form_id": record["form_id"],
                    "item_type": record["item_type"],
                    "sequence_number": int(record["sequence_number"]),
                    "content_payload": content.payload,
                    "scoring_tags": unique_list(split_list(record.get("scoring_tags"))),
                }
            )
        return prepared


class FormsProcessor(ImportProcessor):
    import_type = ImportType.FORMS
    table = "forms"
    conflict_key = "form_id"
    label = "forms"

    def transform_row(self, record, row_number, context, result):
        return {
            "form_id": record["form_id"],
            "assessment_id": record["assessment_id"],
            "content_bank_id": record["content_bank_id"],
            "grade_or_level_tag": record["grade_or_level_tag"],
            "form_number": int(record["form_number"]),
            "status": record.get("status") or "draft",
            "equivalence_set_id": record.get("equivalence_set_id") or None,
        }


class BanksProcessor(ImportProcessor):
    import_type = ImportType.BANKS
    table = "content_banks"
    conflict_key = "content_bank_id"
    label = "banks"

    def transform_row(self, record, row_number, context, result):
        return {
            "content_bank_id": record["content_bank_id"],
            "linked_assessment_id": record["linked_assessment_id"],
            "name": record["name"],
            "target_bank_size": to_int(record.get("target_bank_size"), 0),
            "equivalence_set_required": to_bool(record.get("equivalence_set_required")),
            "differentiation_keys": split_list(record.get("differentiation_keys")),
            "status": record.get("status") or "empty",
        }


class SpecVersionProcessor(ImportProcessor):
    """
    Vertical merge of ``(section, field, value)`` rows into spec versions.

    Each spec version group is fetched, merged over its current sections,
    stamped with one change log entry and written back. A failed group is
    reported and the remaining groups still run.
    """

    import_type = ImportType.SPEC_VERSION
    table = "spec_versions"
    conflict_key = "spec_version_id"
    label = "spec version sections"

    def merge_sections(
        self, current: dict[str, Any], rows: list[ImportRecord]
    ) -> dict[str, dict[str, Any]]:
        updates: dict[str, dict[str, Any]] = {}
        for row in rows:
            section = row["section"]
            if section not in updates:
                existing = current.get(section)
                updates[section] = dict(existing) if isinstance(existing, dict) else {}
            updates[section][row["field"]] = coerce_value(row.get("value") or "")
        return updates

    def process(self, records, context):
        result = ImportResult(rows_processed=len(records))
        total = len(records)
        context.progress(0, total, f"Building {self.label}...")
        done = 0

        for spec_version_id, rows in group_rows(records, self.conflict_key).items():
            try:
                current = context.store.fetch_by_id(self.table, spec_version_id)
                if current is None:
                    raise StoreError(f"Spec version {spec_version_id} not found", table=self.table)
                updates: dict[str, Any] = self.merge_sections(current, rows)
                entry = create_change_log_entry(
                    format_import_summary(self.import_type, 0, len(rows), context.change_note),
                    context.actor,
                )
                updates["change_log"] = append_to_change_log(current.get("change_log"), entry)
                context.store.update(self.table, spec_version_id, updates)
            except StoreError as exc:
                result.rows_failed += len(rows)
                result.add_error(f"Spec version {spec_version_id}: {exc.message}")
                logger.warning("Spec version group %s failed: %s", spec_version_id, exc)
                log_import_event(
                    "group_failed",
                    user_id=context.actor,
                    details={"table": self.table, "id": spec_version_id, "error": exc.message},
                    kpis={"rows": len(rows)},
                    level=logging.WARNING,
                )
            else:
                result.rows_updated += len(rows)
            done += len(rows)
            context.progress(done, total, "Updating spec version sections...")

        return result


class ScoringProcessor(ImportProcessor):
    import_type = ImportType.SCORING
    table = "scoring_outputs"
    conflict_key = "scoring_model_id"
    label = "scoring data"

    def transform(self, records, context, result):
        groups = group_rows(records, self.conflict_key)
        existing = {
            row[self.conflict_key]: row
            for row in context.store.list_by_filter(
                self.table, **{f"{self.conflict_key}__in": list(groups)}
            )
        }
        prepared = []
        for model_id, rows in groups.items():
            raw = [row for row in rows if row.get("metric_type") == "raw"]
            derived = [row for row in rows if row.get("metric_type") == "derived"]
            previous = existing.get(model_id, {})
            prepared.append(
                {
                    "scoring_model_id": model_id,
                    "assessment_id": rows[0].get("assessment_id"),
                    "raw_metrics_schema": [
                        self._metric(row, default_type="count") for row in raw
                    ],
                    "derived_metrics_schema": [
                        self._metric(row, default_type="rate") for row in derived
                    ],
                    "formulas": [
                        {
                            "formula_id": f"{row['metric_id']}_formula",
                            "name": row["metric_name"],
                            "expression": row["formula"],
                            "inputs": [],
                            "output": row["metric_id"],
                        }
                        for row in derived
                        if row.get("formula")
                    ],
                    "flags": list(previous.get("flags") or []),
                    "thresholds": list(previous.get("thresholds") or []),
                }
            )
        return prepared

    @staticmethod
    def _metric(row: ImportRecord, *, default_type: str) -> dict[str, str]:
        return {
            "metric_id": row["metric_id"],
            "name": row["metric_name"],
            "type": row.get("metric_data_type") or default_type,
            "description": "",
        }

    def process(self, records, context):
        result = ImportResult(rows_processed=len(records))
        context.progress(0, len(records), f"Building {self.label}...")
        sizes = {key: len(rows) for key, rows in group_rows(records, self.conflict_key).items()}
        try:
            prepared = self.transform(records, context, result)
        except StoreError as exc:
            result.rows_failed = len(records)
            result.add_error(f"Scoring models: {exc.message}")
            logger.warning("Could not read existing scoring models: %s", exc)
            return result
        written = self.write(prepared, context)
        result.rows_created += sum(sizes[key] for key in written.created_keys)
        result.rows_updated += sum(sizes[key] for key in written.updated_keys)
        result.rows_failed += sum(sizes[key] for key in written.failed_keys)
        for message in written.errors:
            result.add_error(message)
        return result


PROCESSORS: dict[str, ImportProcessor] = {
    processor.import_type: processor
    for processor in (
        ItemsProcessor(),
        FormsProcessor(),
        BanksProcessor(),
        SpecVersionProcessor(),
        ScoringProcessor(),
    )
}


def get_processor(import_type: Any) -> ImportProcessor:
    return PROCESSORS[normalize_import_type(import_type)]


def process_import(
    import_type: Any,
    records: list[ImportRecord],
    change_note: str,
    on_progress: ProgressCallback | None = None,
    *,
    store: EntityStore | None = None,
    actor: str | None = None,
    batch_size: int | None = None,
) -> ImportResult:
    """
    Transform and write validated records for ``import_type``.

    Failures of individual batches or groups are reported on the result and
    never raised. ``rows_created + rows_updated + rows_failed`` always equals
    ``rows_processed``.
    """
    processor = get_processor(import_type)
    context = ProcessContext(
        store=store or get_default_store(),
        change_note=change_note or "",
        actor=actor,
        batch_size=batch_size,
        on_progress=on_progress,
    )
    result = processor.process(records, context)
    log_import_event(
        "process",
        user_id=actor,
        details={"import_type": str(processor.import_type), "success": result.success},
        kpis={
            "rows_processed": result.rows_processed,
            "rows_created": result.rows_created,
            "rows_updated": result.rows_updated,
            "rows_failed": result.rows_failed,
        },
    )
    return result
