"""Tests for the JSON file task store."""

import json
from datetime import datetime

import pytest

from cadence.adapters.json_store import JsonTaskStore, StorageError
from cadence.core.recurrence import MonthlyRule
from cadence.core.tasks import RecurringTask, complete_current_occurrence


@pytest.fixture
def store(tmp_path):
    return JsonTaskStore(tmp_path / "data" / "tasks.json")


@pytest.fixture
def task():
    return RecurringTask(
        id="rent",
        title="Pay rent",
        priority=3,
        created_at=datetime(2025, 1, 10, 9, 0),
        is_recurring=True,
        recurrence=MonthlyRule(day_of_month=31, end_date=datetime(2025, 12, 31)),
        next_occurrence=datetime(2025, 1, 31),
        reminder_before=120,
    )


class TestJsonTaskStore:
    def test_missing_file_is_empty(self, store):
        assert store.load_all() == []
        assert store.get("anything") is None

    def test_save_creates_file(self, store, task):
        store.save(task)
        assert store.path.exists()
        data = json.loads(store.path.read_text())
        assert data["version"] == 1
        assert data["tasks"][0]["id"] == "rent"
        assert data["tasks"][0]["next_occurrence"] == "2025-01-31T00:00:00"

    def test_round_trip(self, store, task):
        completed = complete_current_occurrence(task, datetime(2025, 2, 1, 8, 15))
        store.save(completed)
        assert store.get("rent") == completed

    def test_save_replaces_by_id(self, store, task):
        store.save(task)
        store.save(RecurringTask(id="other", title="Other"))
        store.save(complete_current_occurrence(task, datetime(2025, 1, 31, 10)))

        tasks = store.load_all()
        assert [t.id for t in tasks] == ["rent", "other"]
        assert tasks[0].next_occurrence == datetime(2025, 2, 28)

    def test_delete(self, store, task):
        store.save(task)
        assert store.delete("rent") is True
        assert store.delete("rent") is False
        assert store.load_all() == []

    def test_no_temp_file_left(self, store, task):
        store.save(task)
        assert [p.name for p in store.path.parent.iterdir()] == ["tasks.json"]

    def test_corrupt_json(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        with pytest.raises(StorageError, match="Cannot read"):
            store.load_all()

    def test_wrong_shape(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps([{"id": "x"}]))
        with pytest.raises(StorageError, match="Invalid task file format"):
            store.load_all()

    def test_malformed_record(self, store):
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"version": 1, "tasks": [{"title": "no id"}]}))
        with pytest.raises(StorageError, match="Malformed"):
            store.load_all()

    def test_malformed_rule(self, store):
        store.path.parent.mkdir(parents=True)
        record = {"id": "a", "title": "x", "is_recurring": True, "recurrence": "daily"}
        store.path.write_text(json.dumps({"version": 1, "tasks": [record]}))
        with pytest.raises(StorageError, match="Malformed"):
            store.load_all()

    def test_expands_user_path(self):
        store = JsonTaskStore("~/somewhere/tasks.json")
        assert "~" not in str(store.path)
