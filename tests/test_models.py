from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from too.models import COMPLETION, DONE, PENDING, ROOT, Todo, parse_timestamp


def test_new_todo_defaults():
    todo = Todo(text="Groceries")
    assert todo.parent_uid == ROOT
    assert todo.statuses == {COMPLETION: PENDING}
    assert todo.is_pending and not todo.is_done
    assert len(todo.uid) == 36
    assert todo.short_id == todo.uid[:7]
    assert todo.modified_at.tzinfo is not None


def test_uids_are_unique():
    assert len({Todo(text="x").uid for _ in range(200)}) == 200


def test_touch_is_monotonic():
    todo = Todo(text="x")
    later = todo.modified_at + timedelta(seconds=5)
    todo.touch(later)
    assert todo.modified_at == later

    # A clock that went backwards never moves the timestamp back.
    todo.touch(later - timedelta(hours=1))
    assert todo.modified_at > later


def test_round_trip_dict():
    todo = Todo(text="multi\nline", parent_uid="p", statuses={COMPLETION: DONE, "priority": "high"})
    assert Todo.from_dict(todo.to_dict()) == todo


def test_from_dict_defaults_missing_completion():
    todo = Todo.from_dict({"uid": "abc", "text": "x", "statuses": {"priority": "low"}})
    assert todo.statuses == {"priority": "low", COMPLETION: PENDING}
    assert todo.parent_uid == ROOT


@pytest.mark.parametrize(
    "record",
    [
        {"text": "no uid"},
        {"uid": "a", "text": 3},
        {"uid": "a", "text": "x", "statuses": {COMPLETION: "archived"}},
        {"uid": "a", "text": "x", "statuses": ["done"]},
        {"uid": "a", "text": "x", "modified_at": 12},
    ],
)
def test_from_dict_rejects_bad_records(record):
    with pytest.raises(ValueError):
        Todo.from_dict(record)


def test_parse_timestamp_accepts_z_and_nanoseconds():
    parsed = parse_timestamp("2024-03-01T10:20:30.123456789Z")
    assert parsed == datetime(2024, 3, 1, 10, 20, 30, 123456, tzinfo=timezone.utc)


def test_parse_timestamp_short_fraction_and_offset():
    parsed = parse_timestamp("2024-03-01T10:20:30.5+02:00")
    assert parsed.microsecond == 500000
    assert parsed.utcoffset() == timedelta(hours=2)


def test_parse_timestamp_naive_is_utc():
    assert parse_timestamp("2024-03-01T10:20:30").tzinfo == timezone.utc
