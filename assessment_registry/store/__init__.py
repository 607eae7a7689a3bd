"""Store contract and its Django ORM binding."""

from .base import EntityStore, Record
from .errors import RecordNotFoundError, StoreError

__all__ = [
    "EntityStore",
    "Record",
    "StoreError",
    "RecordNotFoundError",
    "get_default_store",
]


def get_default_store():
    from .django_store import get_default_store as _get_default_store

    return _get_default_store()
