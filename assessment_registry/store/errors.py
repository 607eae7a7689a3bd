"""Exceptions raised by entity stores."""

from __future__ import annotations


class StoreError(Exception):
    """The store rejected a read or write."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.table = table


class RecordNotFoundError(StoreError):
    """No record exists for the requested primary key."""

    code = "RECORD_NOT_FOUND"

    def __init__(self, table: str, record_id: str) -> None:
        super().__init__(f"{table} record '{record_id}' not found", table=table)
        self.record_id = record_id
