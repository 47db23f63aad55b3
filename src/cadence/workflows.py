"""Shared workflow layer between the CLI and the reminder watcher.

Validates input at the task-creation boundary, then runs the pure core
against the task store.
"""

import logging
import uuid
from datetime import datetime

from .adapters.json_store import JsonTaskStore
from .config import Config
from .core.describe import DAY_NAMES
from .core.recurrence import (
    RULE_KINDS,
    CustomRule,
    DailyRule,
    MonthlyRule,
    RecurrenceRule,
    WeeklyRule,
    sunday_weekday,
)
from .core.tasks import (
    RecurringTask,
    complete_current_occurrence,
    filter_due,
    filter_recurring,
    filter_reminders,
    initialize_recurring_task,
    sort_by_next_occurrence,
)
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when a task id is not in the store."""

    pass


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task store from config."""
    return JsonTaskStore(config.tasks_path)


def parse_weekday(value: str) -> int:
    """Parse "mon", "Monday" or "1" into a Sunday=0 weekday index."""
    value = value.strip().lower()
    if value.isdigit():
        index = int(value)
    else:
        names = [d.lower() for d in DAY_NAMES]
        index = names.index(value[:3]) if value[:3] in names else -1
    if not 0 <= index <= 6:
        raise ValueError(f"Invalid weekday: {value!r} (use sun..sat or 0..6)")
    return index


def build_rule(
    kind: str,
    interval: int = 1,
    days_of_week: list[int] | tuple[int, ...] = (),
    day_of_month: int | None = None,
    end_date: datetime | None = None,
    today: datetime | None = None,
) -> RecurrenceRule:
    """
    Build a validated recurrence rule.

    Weekly and custom rules without days repeat on today's weekday.
    Raises ValueError for invalid input; the core itself never validates.
    """
    if kind not in RULE_KINDS:
        raise ValueError(f"Recurrence must be one of: {', '.join(RULE_KINDS)}")
    if interval < 1:
        raise ValueError(f"Interval must be at least 1, got {interval}")
    for day in days_of_week:
        if not 0 <= day <= 6:
            raise ValueError(f"Weekday must be 0 (Sunday) to 6 (Saturday), got {day}")
    if day_of_month is not None and not 1 <= day_of_month <= 31:
        raise ValueError(f"Day of month must be 1 to 31, got {day_of_month}")
    if days_of_week and kind not in ("weekly", "custom"):
        raise ValueError(f"Weekdays only apply to weekly and custom rules, not {kind}")
    if day_of_month is not None and kind != "monthly":
        raise ValueError(f"Day of month only applies to monthly rules, not {kind}")

    days = tuple(sorted(set(days_of_week)))

    match kind:
        case "daily":
            return DailyRule(interval=interval, end_date=end_date)
        case "weekly" | "custom":
            if not days:
                days = (sunday_weekday(today or datetime.now()),)
            rule_cls = WeeklyRule if kind == "weekly" else CustomRule
            return rule_cls(interval=interval, days_of_week=days, end_date=end_date)
        case _:
            return MonthlyRule(interval=interval, day_of_month=day_of_month or 1, end_date=end_date)


def add_task(
    store: TaskStore,
    title: str,
    rule: RecurrenceRule | None = None,
    reminder_before: int | None = None,
    description: str = "",
    priority: int = 2,
    now: datetime | None = None,
) -> RecurringTask:
    """Create a task, seed its first occurrence and save it."""
    if not title.strip():
        raise ValueError("Title must not be empty")
    if priority not in (1, 2, 3):
        raise ValueError(f"Priority must be 1, 2 or 3, got {priority}")
    if reminder_before is not None and reminder_before < 0:
        raise ValueError(f"Reminder lead time must not be negative, got {reminder_before}")

    now = now or datetime.now()
    task = RecurringTask(
        id=uuid.uuid4().hex[:8],
        title=title.strip(),
        description=description,
        priority=priority,
        created_at=now,
        is_recurring=rule is not None,
        recurrence=rule,
        reminder_before=reminder_before or None,
    )
    task = initialize_recurring_task(task, now)
    store.save(task)
    logger.info(f"Added task {task.id} ({task.title}), next occurrence {task.next_occurrence}")
    return task


def get_task(store: TaskStore, task_id: str) -> RecurringTask:
    task = store.get(task_id)
    if task is None:
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    return task


def complete_task(store: TaskStore, task_id: str, now: datetime | None = None) -> RecurringTask:
    """Complete the current occurrence of a task and save the result."""
    task = get_task(store, task_id)
    updated = complete_current_occurrence(task, now)
    if updated is task:
        logger.info(f"Task {task_id} has no pending occurrence, nothing to complete")
        return task

    store.save(updated)
    if updated.next_occurrence is None:
        logger.info(f"Task {task_id} completed; recurrence has ended")
    else:
        logger.info(f"Task {task_id} completed; next occurrence {updated.next_occurrence}")
    return updated


def delete_task(store: TaskStore, task_id: str) -> None:
    if not store.delete(task_id):
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    logger.info(f"Deleted task {task_id}")


def list_tasks(store: TaskStore, include_all: bool = False) -> list[RecurringTask]:
    """Recurring tasks (or every task) ordered by next occurrence."""
    tasks = store.load_all()
    if not include_all:
        tasks = filter_recurring(tasks)
    return sort_by_next_occurrence(tasks)


def due_tasks(store: TaskStore, now: datetime | None = None) -> list[RecurringTask]:
    """Tasks due today or overdue, earliest first."""
    return sort_by_next_occurrence(filter_due(store.load_all(), now))


def pending_reminders(store: TaskStore, now: datetime | None = None) -> list[RecurringTask]:
    """Tasks whose reminder should be shown now."""
    return sort_by_next_occurrence(filter_reminders(store.load_all(), now))
