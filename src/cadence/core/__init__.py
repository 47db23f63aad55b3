"""Functional core - pure scheduling logic with no I/O."""

from .recurrence import (
    DailyRule,
    WeeklyRule,
    MonthlyRule,
    CustomRule,
    RecurrenceRule,
    calculate_next_occurrence,
    get_upcoming_occurrences,
    iter_upcoming_occurrences,
)
from .tasks import (
    Occurrence,
    OccurrenceLedger,
    RecurringTask,
    complete_current_occurrence,
    following_occurrences,
    initialize_recurring_task,
    is_occurrence_due_today,
    is_occurrence_overdue,
    should_show_reminder,
    sort_by_next_occurrence,
)
from .describe import get_recurrence_description, format_next_occurrence

__all__ = [
    # Rules
    "DailyRule",
    "WeeklyRule",
    "MonthlyRule",
    "CustomRule",
    "RecurrenceRule",
    "calculate_next_occurrence",
    "get_upcoming_occurrences",
    "iter_upcoming_occurrences",
    # Tasks
    "Occurrence",
    "OccurrenceLedger",
    "RecurringTask",
    "complete_current_occurrence",
    "following_occurrences",
    "initialize_recurring_task",
    "is_occurrence_due_today",
    "is_occurrence_overdue",
    "should_show_reminder",
    "sort_by_next_occurrence",
    # Descriptions
    "get_recurrence_description",
    "format_next_occurrence",
]
