"""Tests for the shared workflow layer."""

from datetime import datetime

import pytest

from cadence.adapters.json_store import JsonTaskStore
from cadence.config import Config
from cadence.core.recurrence import CustomRule, DailyRule, MonthlyRule, WeeklyRule
from cadence.workflows import (
    TaskNotFoundError,
    add_task,
    build_rule,
    complete_task,
    delete_task,
    due_tasks,
    get_store,
    list_tasks,
    parse_weekday,
    pending_reminders,
)


@pytest.fixture
def now():
    """Wednesday 2025-01-15."""
    return datetime(2025, 1, 15, 12, 0)


@pytest.fixture
def store(tmp_path):
    return JsonTaskStore(tmp_path / "tasks.json")


class TestGetStore:
    def test_uses_configured_file(self, tmp_path):
        store = get_store(Config(tasks_file=str(tmp_path / "mine.json")))
        assert store.path == tmp_path / "mine.json"


class TestParseWeekday:
    @pytest.mark.parametrize("value,expected", [("sun", 0), ("Monday", 1), ("WED", 3), ("6", 6), (" fri ", 5)])
    def test_valid(self, value, expected):
        assert parse_weekday(value) == expected

    @pytest.mark.parametrize("value", ["7", "someday", ""])
    def test_invalid(self, value):
        with pytest.raises(ValueError, match="Invalid weekday"):
            parse_weekday(value)


class TestBuildRule:
    def test_daily(self):
        assert build_rule("daily", interval=2) == DailyRule(interval=2)

    def test_weekly_sorts_and_dedupes(self):
        assert build_rule("weekly", days_of_week=[3, 1, 3]) == WeeklyRule(days_of_week=(1, 3))

    def test_weekly_defaults_to_today(self, now):
        assert build_rule("weekly", today=now) == WeeklyRule(days_of_week=(3,))
        assert build_rule("custom", today=now) == CustomRule(days_of_week=(3,))

    def test_monthly_defaults_to_first(self):
        assert build_rule("monthly") == MonthlyRule(day_of_month=1)

    def test_keeps_end_date(self):
        end = datetime(2025, 6, 30)
        assert build_rule("daily", end_date=end).end_date == end

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError, match="must be one of"):
            build_rule("yearly")

    @pytest.mark.parametrize("interval", [0, -1])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError, match="Interval"):
            build_rule("daily", interval=interval)

    def test_rejects_bad_weekday(self):
        with pytest.raises(ValueError, match="Weekday"):
            build_rule("weekly", days_of_week=[7])

    def test_rejects_bad_day_of_month(self):
        with pytest.raises(ValueError, match="Day of month"):
            build_rule("monthly", day_of_month=32)

    @pytest.mark.parametrize("kind", ["daily", "monthly"])
    def test_rejects_weekdays_outside_weekly(self, kind):
        with pytest.raises(ValueError, match="Weekdays only apply"):
            build_rule(kind, days_of_week=[1])

    @pytest.mark.parametrize("kind", ["daily", "weekly", "custom"])
    def test_rejects_day_of_month_outside_monthly(self, kind):
        with pytest.raises(ValueError, match="Day of month only applies"):
            build_rule(kind, day_of_month=15)


class TestAddTask:
    def test_seeds_and_saves(self, store, now):
        task = add_task(store, "  Stretch  ", rule=DailyRule(), reminder_before=10, now=now)
        assert task.title == "Stretch"
        assert task.is_recurring is True
        assert task.next_occurrence == datetime(2025, 1, 16)
        assert task.created_at == now
        assert store.get(task.id) == task

    def test_one_off(self, store, now):
        task = add_task(store, "Call mom", now=now)
        assert task.is_recurring is False
        assert task.next_occurrence is None

    def test_zero_reminder_means_none(self, store, now):
        task = add_task(store, "Stretch", rule=DailyRule(), reminder_before=0, now=now)
        assert task.reminder_before is None

    def test_rejects_empty_title(self, store):
        with pytest.raises(ValueError, match="Title"):
            add_task(store, "   ")

    def test_rejects_bad_priority(self, store):
        with pytest.raises(ValueError, match="Priority"):
            add_task(store, "Stretch", priority=5)

    def test_rejects_negative_reminder(self, store):
        with pytest.raises(ValueError, match="Reminder"):
            add_task(store, "Stretch", rule=DailyRule(), reminder_before=-5)


class TestCompleteTask:
    def test_advances_and_saves(self, store, now):
        task = add_task(store, "Stretch", rule=DailyRule(), now=now)
        updated = complete_task(store, task.id, now=datetime(2025, 1, 18, 7, 0))

        assert updated.next_occurrence == datetime(2025, 1, 17)
        assert updated.occurrences.dates == [datetime(2025, 1, 16)]
        assert store.get(task.id) == updated

    def test_exhausted_task_unchanged(self, store, now):
        task = add_task(store, "Done", rule=DailyRule(end_date=datetime(2025, 1, 1)), now=now)
        assert complete_task(store, task.id, now=now) == task

    def test_unknown_id(self, store):
        with pytest.raises(TaskNotFoundError):
            complete_task(store, "missing")


class TestQueries:
    @pytest.fixture
    def populated(self, store, now):
        add_task(store, "Weekly review", rule=WeeklyRule(days_of_week=(5,)), now=now)
        add_task(store, "Stretch", rule=DailyRule(), reminder_before=30, now=now)
        add_task(store, "Call mom", now=now)
        return store

    def test_list_recurring_sorted(self, populated):
        assert [t.title for t in list_tasks(populated)] == ["Stretch", "Weekly review"]

    def test_list_all(self, populated):
        assert len(list_tasks(populated, include_all=True)) == 3

    def test_due_tasks(self, populated):
        assert due_tasks(populated, datetime(2025, 1, 15, 18, 0)) == []
        assert [t.title for t in due_tasks(populated, datetime(2025, 1, 16, 9, 0))] == ["Stretch"]
        assert [t.title for t in due_tasks(populated, datetime(2025, 1, 17, 9, 0))] == ["Stretch", "Weekly review"]

    def test_pending_reminders(self, populated):
        assert [t.title for t in pending_reminders(populated, datetime(2025, 1, 15, 23, 45))] == ["Stretch"]
        assert pending_reminders(populated, datetime(2025, 1, 15, 23, 0)) == []


class TestDeleteTask:
    def test_delete(self, store, now):
        task = add_task(store, "Stretch", now=now)
        delete_task(store, task.id)
        assert store.get(task.id) is None

    def test_unknown_id(self, store):
        with pytest.raises(TaskNotFoundError):
            delete_task(store, "missing")
