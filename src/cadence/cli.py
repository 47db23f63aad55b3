"""Cadence CLI - recurring task planner."""

import json
import logging
import sys
from datetime import datetime

import click

from .adapters.json_store import StorageError
from .config import load_config
from .core.describe import (
    format_next_occurrence,
    format_occurrence_date,
    format_short_date,
    format_task_line,
    get_recurrence_description,
)
from .core.recurrence import RULE_KINDS, get_upcoming_occurrences
from .core.tasks import following_occurrences
from .workflows import (
    TaskNotFoundError,
    add_task,
    build_rule,
    complete_task,
    delete_task,
    due_tasks,
    get_store,
    get_task,
    list_tasks,
    parse_weekday,
    pending_reminders,
)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _rule_from_options(kind, interval, days, day_of_month, until):
    weekdays = [parse_weekday(d) for d in days]
    return build_rule(
        kind,
        interval=interval,
        days_of_week=weekdays,
        day_of_month=day_of_month,
        end_date=until,
    )


def _show_tasks(tasks: list, as_json: bool, empty_msg: str) -> None:
    """Shared task display logic."""
    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        return

    if not tasks:
        click.echo(empty_msg)
        return

    now = datetime.now()
    for task in tasks:
        click.echo(format_task_line(task, now))


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Cadence - recurring task planner."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("title")
@click.option("--kind", type=click.Choice(RULE_KINDS), default=None, help="Repeat schedule (omit for a one-off task)")
@click.option("--interval", default=1, show_default=True, help="Repeat every N days/weeks/months")
@click.option("--day", "-d", "days", multiple=True, help="Weekday for weekly/custom rules (sun..sat or 0..6)")
@click.option("--day-of-month", type=int, default=None, help="Day of month for monthly rules")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Last date (inclusive)")
@click.option("--remind", type=int, default=None, help="Reminder lead time in minutes")
@click.option("--description", default="", help="Task description")
@click.option("--priority", type=click.IntRange(1, 3), default=2, show_default=True, help="1 low, 2 medium, 3 high")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def add(title, kind, interval, days, day_of_month, until, remind, description, priority, as_json):
    """Add a task."""
    config = load_config()
    if remind is None and kind and config.default_reminder_minutes:
        remind = config.default_reminder_minutes

    try:
        rule = _rule_from_options(kind, interval, days, day_of_month, until) if kind else None
        task = add_task(
            get_store(config),
            title,
            rule=rule,
            reminder_before=remind,
            description=description,
            priority=priority,
        )
    except (ValueError, StorageError) as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(task.to_dict(), indent=2))
        return

    click.echo(f"Added {task.id}: {task.title}")
    if task.recurrence:
        click.echo(f"  {get_recurrence_description(task.recurrence)}, next: {format_next_occurrence(task.next_occurrence)}")


@main.command("list")
@click.option("--all", "include_all", is_flag=True, help="Include one-off tasks")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_command(include_all: bool, as_json: bool):
    """List recurring tasks by next occurrence."""
    try:
        tasks = list_tasks(get_store(load_config()), include_all=include_all)
    except StorageError as e:
        _fail(e)
    _show_tasks(tasks, as_json, "No recurring tasks yet.")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def due(as_json: bool):
    """List tasks due today or overdue."""
    try:
        tasks = due_tasks(get_store(load_config()))
    except StorageError as e:
        _fail(e)
    _show_tasks(tasks, as_json, "Nothing due today.")


@main.command()
@click.argument("task_id")
def show(task_id: str):
    """Show a task's schedule and history."""
    config = load_config()
    try:
        task = get_task(get_store(config), task_id)
    except (TaskNotFoundError, StorageError) as e:
        _fail(e)

    click.echo(f"{task.title} [{task.id}]")
    if task.description:
        click.echo(f"  {task.description}")

    if not task.recurrence:
        click.echo("  Does not repeat")
        return

    click.echo(f"  Schedule: {get_recurrence_description(task.recurrence)}")
    if task.next_occurrence:
        click.echo(
            f"  Next: {format_occurrence_date(task.next_occurrence)} ({format_next_occurrence(task.next_occurrence)})"
        )
        upcoming = following_occurrences(task, config.preview_count)
        if upcoming:
            click.echo(f"  Then: {', '.join(format_short_date(d) for d in upcoming)}")
    else:
        click.echo("  Next: No upcoming occurrences")

    if task.reminder_before:
        click.echo(f"  Reminder: {task.reminder_before} min before")

    click.echo(f"  Completed: {task.completed_count} occurrence{'s' if task.completed_count != 1 else ''}")
    for occurrence in task.occurrences.recent():
        click.echo(f"    ✓ {format_occurrence_date(occurrence.date)}")


@main.command()
@click.argument("task_id")
def complete(task_id: str):
    """Complete the current occurrence of a task."""
    store = get_store(load_config())
    try:
        before = get_task(store, task_id)
        task = complete_task(store, task_id)
    except (TaskNotFoundError, StorageError) as e:
        _fail(e)

    if task.completed_count == before.completed_count:
        click.echo(f"{task.title}: nothing to complete.")
    elif task.next_occurrence:
        click.echo(f"Completed {task.title}. Next occurrence: {format_next_occurrence(task.next_occurrence)}")
    else:
        click.echo(f"Completed {task.title}. No upcoming occurrences.")


@main.command()
@click.argument("task_id")
def delete(task_id: str):
    """Delete a task."""
    try:
        delete_task(get_store(load_config()), task_id)
    except (TaskNotFoundError, StorageError) as e:
        _fail(e)
    click.echo(f"Deleted {task_id}.")


@main.command()
@click.option("--kind", type=click.Choice(RULE_KINDS), required=True, help="Repeat schedule")
@click.option("--interval", default=1, show_default=True, help="Repeat every N days/weeks/months")
@click.option("--day", "-d", "days", multiple=True, help="Weekday for weekly/custom rules (sun..sat or 0..6)")
@click.option("--day-of-month", type=int, default=None, help="Day of month for monthly rules")
@click.option("--until", type=click.DateTime(formats=["%Y-%m-%d"]), default=None, help="Last date (inclusive)")
@click.option("--count", type=click.IntRange(min=1), default=None, help="Number of dates to show")
def preview(kind, interval, days, day_of_month, until, count):
    """Preview upcoming dates for a rule without saving it."""
    config = load_config()
    try:
        rule = _rule_from_options(kind, interval, days, day_of_month, until)
    except ValueError as e:
        _fail(e)

    click.echo(get_recurrence_description(rule))
    dates = get_upcoming_occurrences(rule, count if count is not None else config.preview_count)
    if not dates:
        click.echo("No upcoming occurrences.")
    for d in dates:
        click.echo(f"  {d.strftime('%a')} {format_occurrence_date(d)}")


@main.command()
@click.option("--watch", is_flag=True, help="Keep polling and report reminders as they come due")
def reminders(watch: bool):
    """Show reminders that are due now."""
    if watch:
        from .reminders import run_watcher

        click.echo("Watching for reminders...")
        click.echo("Press Ctrl+C to stop")
        try:
            run_watcher(notify=click.echo)
        except KeyboardInterrupt:
            click.echo("\nWatcher stopped.")
        return

    try:
        tasks = pending_reminders(get_store(load_config()))
    except StorageError as e:
        _fail(e)

    if not tasks:
        click.echo("No reminders right now.")
        return
    from .reminders import format_reminder

    for task in tasks:
        click.echo(format_reminder(task))
