"""Record-oriented store contract consumed by the import pipeline and gates."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

Record = dict[str, Any]


class EntityStore(ABC):
    """
    Persistent store addressed by table name.

    Records are plain dicts keyed by column name; reference columns use their
    ``<name>_id`` form. Implementations raise ``StoreError`` for rejected
    reads or writes and ``RecordNotFoundError`` when an update targets a
    missing primary key.
    """

    @abstractmethod
    def primary_key(self, table: str) -> str:
        """Return the natural key column of ``table``."""

    @abstractmethod
    def fetch_by_id(self, table: str, record_id: str) -> Record | None:
        """Return the record with primary key ``record_id`` or ``None``."""

    @abstractmethod
    def list_by_filter(self, table: str, **lookups: Any) -> list[Record]:
        """Return every record matching ``lookups``."""

    @abstractmethod
    def upsert_batch(
        self, table: str, records: list[Record], conflict_key: str
    ) -> list[Record]:
        """Insert or replace ``records`` by ``conflict_key`` as one unit."""

    @abstractmethod
    def update(self, table: str, record_id: str, fields: Record) -> Record:
        """Apply ``fields`` to an existing record and return it."""

    @abstractmethod
    def insert(self, table: str, record: Record) -> Record:
        """Create a new record and return it."""

    def existing_ids(self, table: str, ids: Iterable[str]) -> set[str]:
        """Return the subset of ``ids`` that already exist in ``table``."""
        wanted = sorted({str(value) for value in ids if value not in ("", None)})
        if not wanted:
            return set()
        key = self.primary_key(table)
        rows = self.list_by_filter(table, **{f"{key}__in": wanted})
        return {str(row[key]) for row in rows}
