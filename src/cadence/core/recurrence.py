"""Pure recurrence rule logic - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import ClassVar, Iterator

RULE_KINDS = ("daily", "weekly", "monthly", "custom")


@dataclass(frozen=True)
class DailyRule:
    """Every N days."""

    kind: ClassVar[str] = "daily"

    interval: int = 1
    end_date: datetime | None = None


@dataclass(frozen=True)
class WeeklyRule:
    """Every N weeks, optionally on specific weekdays (0=Sunday..6=Saturday)."""

    kind: ClassVar[str] = "weekly"

    interval: int = 1
    days_of_week: tuple[int, ...] = ()
    end_date: datetime | None = None


@dataclass(frozen=True)
class MonthlyRule:
    """Every N months on a day of the month (clamped to the month's length)."""

    kind: ClassVar[str] = "monthly"

    interval: int = 1
    day_of_month: int | None = None
    end_date: datetime | None = None


@dataclass(frozen=True)
class CustomRule:
    """An arbitrary weekday set."""

    kind: ClassVar[str] = "custom"

    interval: int = 1
    days_of_week: tuple[int, ...] = ()
    end_date: datetime | None = None


RecurrenceRule = DailyRule | WeeklyRule | MonthlyRule | CustomRule


def start_of_day(dt: datetime) -> datetime:
    """Drop the time-of-day, keeping tzinfo."""
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def sunday_weekday(dt: datetime) -> int:
    """Weekday index with Sunday=0 (datetime.weekday() has Monday=0)."""
    return (dt.weekday() + 1) % 7


def sorted_days(days_of_week) -> list[int]:
    """Weekdays in ascending order with duplicates removed."""
    return sorted(set(days_of_week or ()))


def add_months(base: datetime, months: int, day: int) -> datetime:
    """Move `months` months ahead and land on `day`, clamped to the month's last day."""
    total_months = base.year * 12 + base.month - 1 + months
    year = total_months // 12
    month = total_months % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return base.replace(year=year, month=month, day=min(day, last_day))


def _next_weekday(base: datetime, days_of_week, interval: int) -> datetime:
    days = sorted_days(days_of_week)
    if not days:
        return base + timedelta(days=7 * interval)

    current = sunday_weekday(base)
    later_this_week = [d for d in days if d > current]
    if later_this_week:
        return base + timedelta(days=later_this_week[0] - current)

    # Wrap to the first listed day, skipping interval - 1 whole weeks
    return base + timedelta(days=(7 - current + days[0]) + (interval - 1) * 7)


def _is_past_end(dt: datetime, rule: RecurrenceRule) -> bool:
    return rule.end_date is not None and dt > rule.end_date


def calculate_next_occurrence(
    rule: RecurrenceRule,
    from_date: datetime | None = None,
) -> datetime | None:
    """
    Next due date strictly after the day of `from_date`.

    Returns None once the rule's end date has been passed.
    Pure function - no I/O.
    """
    reference = start_of_day(from_date or datetime.now())

    if _is_past_end(reference, rule):
        return None

    interval = rule.interval or 1

    match rule:
        case DailyRule():
            next_date = reference + timedelta(days=interval)
        case WeeklyRule() | CustomRule():
            next_date = _next_weekday(reference, rule.days_of_week, interval)
        case MonthlyRule():
            next_date = add_months(reference, interval, rule.day_of_month or 1)
        case _:
            raise TypeError(f"Unsupported recurrence rule: {rule!r}")

    if _is_past_end(next_date, rule):
        return None

    return next_date


def iter_upcoming_occurrences(
    rule: RecurrenceRule,
    start_date: datetime | None = None,
) -> Iterator[datetime]:
    """
    Lazily yield future due dates until the rule is exhausted.

    After each hit the search resumes one day past it. Calling again
    restarts from `start_date`.
    """
    current = start_date or datetime.now()
    while True:
        next_date = calculate_next_occurrence(rule, current)
        if next_date is None:
            return
        yield next_date
        current = next_date + timedelta(days=1)


def get_upcoming_occurrences(
    rule: RecurrenceRule,
    count: int = 5,
    start_date: datetime | None = None,
) -> list[datetime]:
    """Up to `count` upcoming due dates, fewer if the rule ends first."""
    occurrences = []
    for next_date in iter_upcoming_occurrences(rule, start_date):
        if len(occurrences) >= count:
            break
        occurrences.append(next_date)
    return occurrences


def rule_to_dict(rule: RecurrenceRule) -> dict:
    """Serialize a rule, including only the fields its kind carries."""
    data: dict = {"kind": rule.kind, "interval": rule.interval}
    match rule:
        case WeeklyRule() | CustomRule():
            data["days_of_week"] = list(rule.days_of_week)
        case MonthlyRule():
            data["day_of_month"] = rule.day_of_month
    data["end_date"] = rule.end_date.isoformat() if rule.end_date else None
    return data


def rule_from_dict(data: dict) -> RecurrenceRule:
    """Parse a rule from its dict form. Raises ValueError on an unknown kind."""
    if not isinstance(data, dict):
        raise ValueError(f"Recurrence rule must be a mapping, got {data!r}")
    kind = data.get("kind")
    interval = data.get("interval") or 1
    end_date = datetime.fromisoformat(data["end_date"]) if data.get("end_date") else None

    match kind:
        case "daily":
            return DailyRule(interval=interval, end_date=end_date)
        case "weekly":
            return WeeklyRule(
                interval=interval,
                days_of_week=tuple(data.get("days_of_week") or ()),
                end_date=end_date,
            )
        case "monthly":
            return MonthlyRule(
                interval=interval,
                day_of_month=data.get("day_of_month"),
                end_date=end_date,
            )
        case "custom":
            return CustomRule(
                interval=interval,
                days_of_week=tuple(data.get("days_of_week") or ()),
                end_date=end_date,
            )
    raise ValueError(f"Unknown recurrence kind: {kind!r}")
