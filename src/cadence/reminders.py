"""Reminder watcher - polls the task store and reports due reminders."""

import logging
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config, load_config
from .core.describe import format_next_occurrence
from .core.tasks import RecurringTask
from .ports.task_store import TaskStore
from .workflows import get_store, pending_reminders

logger = logging.getLogger(__name__)


def format_reminder(task: RecurringTask, now: datetime | None = None) -> str:
    """One-line reminder text."""
    due = task.next_occurrence.strftime("%H:%M") if task.next_occurrence else "?"
    return f"Reminder: {task.title} ({format_next_occurrence(task.next_occurrence, now)} at {due})"


class ReminderWatcher:
    """
    Reports each (task, occurrence) reminder once per process.

    Delivery is left to the `notify` callback; the store is only read.
    """

    def __init__(self, store: TaskStore, notify: Callable[[str], None] | None = None):
        self.store = store
        self.notify = notify or logger.info
        self._sent: set[tuple[str, datetime]] = set()

    def check(self, now: datetime | None = None) -> list[RecurringTask]:
        """Run one poll. Returns the tasks newly reported."""
        now = now or datetime.now()
        # Occurrences already past cannot come back into a reminder window
        self._sent = {key for key in self._sent if key[1] > now}
        reported = []
        for task in pending_reminders(self.store, now):
            key = (task.id, task.next_occurrence)
            if key in self._sent:
                continue
            self._sent.add(key)
            self.notify(format_reminder(task, now))
            reported.append(task)
        return reported

    def tick(self) -> None:
        """Scheduler job entry point; a failed poll must not stop the scheduler."""
        try:
            self.check()
        except Exception as e:
            logger.error(f"Reminder check failed: {e}")


def setup_scheduler(watcher: ReminderWatcher, config: Config | None = None) -> BlockingScheduler:
    """Set up the polling job."""
    if config is None:
        config = load_config()

    scheduler = BlockingScheduler()
    seconds = config.reminder_poll_seconds if config.reminder_poll_seconds > 0 else 60
    scheduler.add_job(
        watcher.tick,
        IntervalTrigger(seconds=seconds),
        id="reminder_check",
    )
    logger.info(f"Scheduled reminder check every {seconds}s")
    return scheduler


def run_watcher(notify: Callable[[str], None] | None = None, config: Config | None = None) -> None:
    """Run the reminder watcher until interrupted."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    config = config or load_config()
    store = get_store(config)
    watcher = ReminderWatcher(store, notify)
    scheduler = setup_scheduler(watcher, config)

    logger.info(f"Watching {store.path} for reminders...")
    watcher.tick()
    scheduler.start()
