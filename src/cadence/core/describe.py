"""Human-readable descriptions of rules and dates - no I/O dependencies."""

from datetime import datetime, timedelta

from .recurrence import (
    CustomRule,
    DailyRule,
    MonthlyRule,
    RecurrenceRule,
    WeeklyRule,
    sorted_days,
    start_of_day,
)
from .tasks import RecurringTask, is_occurrence_due_today, is_occurrence_overdue

DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def day_name(index: int) -> str:
    """Weekday abbreviation for a Sunday=0 index, empty if out of range."""
    if 0 <= index < len(DAY_NAMES):
        return DAY_NAMES[index]
    return ""


def ordinal_suffix(day: int) -> str:
    """English ordinal suffix: 1st, 2nd, 3rd, 11th, 22nd..."""
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def get_recurrence_description(rule: RecurrenceRule) -> str:
    """
    Describe a rule the way the calculator evaluates it.

    Pure function - no I/O.
    """
    interval = rule.interval or 1

    match rule:
        case DailyRule():
            return "Daily" if interval == 1 else f"Every {interval} days"
        case WeeklyRule():
            days = [day_name(d) for d in sorted_days(rule.days_of_week)]
            if days:
                if len(days) == 7:
                    return "Daily"
                if len(days) == 1:
                    return f"Weekly on {days[0]}"
                return f"Weekly on {', '.join(days)}"
            return "Weekly" if interval == 1 else f"Every {interval} weeks"
        case MonthlyRule():
            day = rule.day_of_month or 1
            return f"Monthly on the {day}{ordinal_suffix(day)}"
        case CustomRule():
            days = [day_name(d) for d in sorted_days(rule.days_of_week)]
            if days:
                return ", ".join(days)
            return "Custom schedule"
    return "Custom"


def format_short_date(dt: datetime) -> str:
    """e.g. "Mar 5"."""
    return f"{dt.strftime('%b')} {dt.day}"


def format_occurrence_date(dt: datetime) -> str:
    """e.g. "Mar 5, 2025"."""
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}"


def format_next_occurrence(next_occurrence: datetime | None, now: datetime | None = None) -> str:
    """
    Relative description of the next due date.

    Today / Tomorrow / Overdue / In N days (up to a week) / "Mar 5".
    """
    if not next_occurrence:
        return "No upcoming occurrences"

    today = start_of_day(now or datetime.now())
    occurrence_day = start_of_day(next_occurrence)

    if occurrence_day == today:
        return "Today"
    if occurrence_day == today + timedelta(days=1):
        return "Tomorrow"
    if occurrence_day < today:
        return "Overdue"

    days = (occurrence_day - today).days
    if days <= 7:
        return f"In {days} day{'s' if days != 1 else ''}"
    return format_short_date(occurrence_day)


def format_task_line(task: RecurringTask, now: datetime | None = None) -> str:
    """
    Format a single task for list display.

    Pure function - no I/O.
    """
    now = now or datetime.now()

    marker = " "
    if is_occurrence_overdue(task.next_occurrence, now):
        marker = "!"
    elif is_occurrence_due_today(task.next_occurrence, now):
        marker = "*"

    schedule = get_recurrence_description(task.recurrence) if task.recurrence else "Does not repeat"
    when = format_next_occurrence(task.next_occurrence, now)
    return f"[{marker}] {task.id}  {task.title} ({schedule}; next: {when}; done {task.completed_count}x)"
