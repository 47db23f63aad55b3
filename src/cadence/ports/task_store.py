"""Task storage interface."""

from typing import Protocol

from cadence.core.tasks import RecurringTask


class TaskStore(Protocol):
    """Interface for persisting tasks in any backend."""

    def load_all(self) -> list[RecurringTask]:
        """Load every stored task."""
        ...

    def get(self, task_id: str) -> RecurringTask | None:
        """Fetch one task. Returns None if not found."""
        ...

    def save(self, task: RecurringTask) -> None:
        """Insert or replace a task by id."""
        ...

    def delete(self, task_id: str) -> bool:
        """Remove a task. Returns False if it did not exist."""
        ...
