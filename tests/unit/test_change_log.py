from datetime import datetime, timezone

import pytest

from assessment_registry.importing.services.change_log import (
    append_to_change_log,
    create_change_log_entry,
    format_import_summary,
)
from assessment_registry.testing import override_registry_settings

pytestmark = pytest.mark.unit


def _clock():
    return datetime(2026, 1, 7, 12, 40, tzinfo=timezone.utc)


def test_entry_uses_clock_and_default_actor():
    entry = create_change_log_entry("[ITEMS Import] 3 created, 0 updated", now=_clock)

    assert entry == {
        "timestamp": "2026-01-07T12:40:00+00:00",
        "author": "CSV Import",
        "description": "[ITEMS Import] 3 created, 0 updated",
    }


def test_default_actor_follows_settings():
    with override_registry_settings(import_settings={"default_actor": "Bulk Loader"}):
        entry = create_change_log_entry("note", now=_clock)

    assert entry["author"] == "Bulk Loader"


def test_append_returns_new_list_and_keeps_prior_entries():
    existing = [{"timestamp": "t0", "author": "a", "description": "first"}]
    entry = create_change_log_entry("second", "b", now=_clock)

    updated = append_to_change_log(existing, entry)

    assert updated == existing + [entry]
    assert updated is not existing
    assert len(existing) == 1


def test_append_treats_non_list_log_as_empty():
    entry = create_change_log_entry("only", now=_clock)
    assert append_to_change_log({"bad": "shape"}, entry) == [entry]
    assert append_to_change_log(None, entry) == [entry]


@pytest.mark.parametrize(
    "args,expected",
    [
        (("items", 3, 2, "Fall load"), "[ITEMS Import] 3 created, 2 updated: Fall load"),
        (("specVersion", 0, 4, None), "[SPECVERSION Import] 0 created, 4 updated"),
        (("forms", 1, 0, "   "), "[FORMS Import] 1 created, 0 updated"),
    ],
)
def test_format_import_summary(args, expected):
    assert format_import_summary(*args) == expected
