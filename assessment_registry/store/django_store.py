"""Django ORM implementation of the entity store."""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import FieldDoesNotExist, FieldError, ValidationError
from django.db import DatabaseError, models, transaction

from ..importing.models import ImportHistory
from ..models import (
    Assessment,
    AssessmentBank,
    ContentBank,
    Form,
    Item,
    ScoringOutput,
    SpecVersion,
)
from .base import EntityStore, Record
from .errors import RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)

TABLE_MODELS: dict[str, type[models.Model]] = {
    "assessments": Assessment,
    "spec_versions": SpecVersion,
    "content_banks": ContentBank,
    "assessment_banks": AssessmentBank,
    "forms": Form,
    "items": Item,
    "scoring_outputs": ScoringOutput,
    "import_history": ImportHistory,
}

_STORE_ERRORS = (DatabaseError, ValidationError, FieldError, FieldDoesNotExist, TypeError, ValueError)


def _to_record(instance: models.Model) -> Record:
    return {
        field.attname: getattr(instance, field.attname)
        for field in instance._meta.concrete_fields
    }


def _writable_fields(model: type[models.Model]) -> set[str]:
    names: set[str] = set()
    for field in model._meta.concrete_fields:
        names.add(field.name)
        names.add(field.attname)
    return names


def _assign(instance: models.Model, fields: Record) -> None:
    writable = _writable_fields(type(instance))
    for name, value in fields.items():
        if name not in writable:
            raise StoreError(
                f"Unknown column '{name}' for {type(instance).__name__}",
                table=instance._meta.db_table,
            )
        setattr(instance, name, value)


class DjangoEntityStore(EntityStore):
    """Entity store backed by the assessment registry models."""

    def _model(self, table: str) -> type[models.Model]:
        try:
            return TABLE_MODELS[table]
        except KeyError:
            raise StoreError(f"Unknown table '{table}'", table=table) from None

    def primary_key(self, table: str) -> str:
        return self._model(table)._meta.pk.attname

    def fetch_by_id(self, table: str, record_id: str) -> Record | None:
        model = self._model(table)
        try:
            instance = model.objects.filter(pk=record_id).first()
        except _STORE_ERRORS as exc:
            raise StoreError(f"Fetch failed: {exc}", table=table) from exc
        return _to_record(instance) if instance is not None else None

    def list_by_filter(self, table: str, **lookups: Any) -> list[Record]:
        model = self._model(table)
        try:
            return [_to_record(instance) for instance in model.objects.filter(**lookups)]
        except _STORE_ERRORS as exc:
            raise StoreError(f"List failed: {exc}", table=table) from exc

    def upsert_batch(
        self, table: str, records: list[Record], conflict_key: str
    ) -> list[Record]:
        model = self._model(table)
        written: list[Record] = []
        try:
            with transaction.atomic():
                for record in records:
                    key_value = record.get(conflict_key)
                    if key_value in ("", None):
                        raise StoreError(
                            f"Record is missing conflict key '{conflict_key}'",
                            table=table,
                        )
                    instance = model.objects.filter(**{conflict_key: key_value}).first()
                    if instance is None:
                        instance = model()
                    _assign(instance, record)
                    instance.save()
                    written.append(_to_record(instance))
        except StoreError:
            raise
        except _STORE_ERRORS as exc:
            raise StoreError(f"Upsert failed: {exc}", table=table) from exc
        return written

    def update(self, table: str, record_id: str, fields: Record) -> Record:
        model = self._model(table)
        try:
            with transaction.atomic():
                instance = model.objects.select_for_update().filter(pk=record_id).first()
                if instance is None:
                    raise RecordNotFoundError(table, record_id)
                _assign(instance, fields)
                instance.save()
        except StoreError:
            raise
        except _STORE_ERRORS as exc:
            raise StoreError(f"Update failed: {exc}", table=table) from exc
        return _to_record(instance)

    def insert(self, table: str, record: Record) -> Record:
        model = self._model(table)
        try:
            instance = model()
            _assign(instance, record)
            instance.save(force_insert=True)
        except StoreError:
            raise
        except _STORE_ERRORS as exc:
            raise StoreError(f"Insert failed: {exc}", table=table) from exc
        return _to_record(instance)


_default_store: DjangoEntityStore | None = None


def get_default_store() -> DjangoEntityStore:
    """Return the process-wide ORM store."""
    global _default_store
    if _default_store is None:
        _default_store = DjangoEntityStore()
    return _default_store
