"""Pure recurring task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Iterator

from .recurrence import (
    RecurrenceRule,
    calculate_next_occurrence,
    rule_from_dict,
    rule_to_dict,
    start_of_day,
)


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _format_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Occurrence:
    """One satisfied due date of a recurring task."""

    date: datetime
    completed_at: datetime

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "completed_at": self.completed_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict) -> "Occurrence":
        return cls(
            date=datetime.fromisoformat(data["date"]),
            completed_at=datetime.fromisoformat(data["completed_at"]),
        )


@dataclass(frozen=True)
class OccurrenceLedger:
    """
    Append-only history of completed occurrences.

    Entries are kept in completion order. `append` returns a new ledger;
    existing entries are never edited, removed or reordered.
    """

    entries: tuple[Occurrence, ...] = ()

    def append(self, occurrence: Occurrence) -> "OccurrenceLedger":
        return OccurrenceLedger(self.entries + (occurrence,))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Occurrence]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> Occurrence:
        return self.entries[index]

    @property
    def dates(self) -> list[datetime]:
        return [o.date for o in self.entries]

    @property
    def last(self) -> Occurrence | None:
        return self.entries[-1] if self.entries else None

    def recent(self, count: int = 5) -> list[Occurrence]:
        """Most recent completions, newest first."""
        if count <= 0:
            return []
        return list(reversed(self.entries[-count:]))


@dataclass(frozen=True)
class RecurringTask:
    """A planner task, optionally repeating on a recurrence rule."""

    id: str
    title: str
    description: str = ""
    priority: int = 2  # 1 = low, 2 = medium, 3 = high
    created_at: datetime = field(default_factory=datetime.now)
    is_recurring: bool = False
    recurrence: RecurrenceRule | None = None
    next_occurrence: datetime | None = None
    occurrences: OccurrenceLedger = field(default_factory=OccurrenceLedger)
    reminder_before: int | None = None  # minutes

    @property
    def completed_count(self) -> int:
        return len(self.occurrences)

    @property
    def is_exhausted(self) -> bool:
        """Recurring task whose rule has no further dates."""
        return self.is_recurring and self.recurrence is not None and self.next_occurrence is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
            "is_recurring": self.is_recurring,
            "recurrence": rule_to_dict(self.recurrence) if self.recurrence else None,
            "next_occurrence": _format_dt(self.next_occurrence),
            "occurrences": [o.to_dict() for o in self.occurrences],
            "reminder_before": self.reminder_before,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RecurringTask":
        recurrence = data.get("recurrence")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", "") or "",
            priority=data.get("priority", 2),
            created_at=_parse_dt(data.get("created_at")) or datetime.now(),
            is_recurring=bool(data.get("is_recurring", False)),
            recurrence=rule_from_dict(recurrence) if recurrence else None,
            next_occurrence=_parse_dt(data.get("next_occurrence")),
            occurrences=OccurrenceLedger(
                tuple(Occurrence.from_dict(o) for o in data.get("occurrences") or [])
            ),
            reminder_before=data.get("reminder_before"),
        )


def initialize_recurring_task(task: RecurringTask, now: datetime | None = None) -> RecurringTask:
    """Seed next_occurrence for a freshly created recurring task."""
    if not task.is_recurring or task.recurrence is None:
        return task
    return replace(task, next_occurrence=calculate_next_occurrence(task.recurrence, now))


def complete_current_occurrence(
    task: RecurringTask,
    completed_at: datetime | None = None,
) -> RecurringTask:
    """
    Record the current occurrence as done and advance to the next one.

    The next date is computed from the occurrence being completed, not from
    the completion time, so completing late never shifts the cadence.
    No-op for non-recurring or exhausted tasks.
    """
    if not task.is_recurring or task.recurrence is None or task.next_occurrence is None:
        return task

    occurrence = Occurrence(date=task.next_occurrence, completed_at=completed_at or datetime.now())
    return replace(
        task,
        occurrences=task.occurrences.append(occurrence),
        next_occurrence=calculate_next_occurrence(task.recurrence, occurrence.date),
    )


def following_occurrences(task: RecurringTask, count: int = 5) -> list[datetime]:
    """
    Due dates after the current one, in the order completions will reach them.

    Chains the calculator from next_occurrence exactly as
    complete_current_occurrence advances.
    """
    if task.recurrence is None or task.next_occurrence is None:
        return []

    dates = []
    current = task.next_occurrence
    while len(dates) < count:
        current = calculate_next_occurrence(task.recurrence, current)
        if current is None:
            break
        dates.append(current)
    return dates


def is_occurrence_due_today(next_occurrence: datetime | None, now: datetime | None = None) -> bool:
    """Next occurrence falls on the same calendar day as now."""
    if not next_occurrence:
        return False
    now = now or datetime.now()
    return start_of_day(next_occurrence) == start_of_day(now)


def is_occurrence_overdue(next_occurrence: datetime | None, now: datetime | None = None) -> bool:
    """Next occurrence falls on a calendar day before today."""
    if not next_occurrence:
        return False
    now = now or datetime.now()
    return start_of_day(next_occurrence) < start_of_day(now)


def should_show_reminder(task: RecurringTask, now: datetime | None = None) -> bool:
    """
    Now is within the reminder lead time before the next occurrence.

    Instant-precise: the window is [occurrence - reminder_before, occurrence).
    """
    if not task.is_recurring or not task.next_occurrence or not task.reminder_before:
        return False
    if task.reminder_before < 0:
        return False
    now = now or datetime.now()
    remind_at = task.next_occurrence - timedelta(minutes=task.reminder_before)
    return remind_at <= now < task.next_occurrence


def filter_recurring(tasks: list[RecurringTask]) -> list[RecurringTask]:
    return [t for t in tasks if t.is_recurring]


def sort_by_next_occurrence(tasks: list[RecurringTask]) -> list[RecurringTask]:
    """
    Sort by next occurrence (ascending), tasks without one last.

    Pure function - no I/O.
    """

    def sort_key(t: RecurringTask) -> tuple[bool, datetime]:
        return (t.next_occurrence is None, t.next_occurrence or datetime.min)

    return sorted(tasks, key=sort_key)


def filter_due(tasks: list[RecurringTask], now: datetime | None = None) -> list[RecurringTask]:
    """Recurring tasks due today or overdue."""
    now = now or datetime.now()
    return [
        t
        for t in filter_recurring(tasks)
        if is_occurrence_due_today(t.next_occurrence, now) or is_occurrence_overdue(t.next_occurrence, now)
    ]


def filter_reminders(tasks: list[RecurringTask], now: datetime | None = None) -> list[RecurringTask]:
    """Tasks whose reminder window is open."""
    now = now or datetime.now()
    return [t for t in tasks if should_show_reminder(t, now)]
