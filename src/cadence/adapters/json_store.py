"""JSON file task storage adapter."""

import json
import logging
from pathlib import Path

from cadence.core.tasks import RecurringTask

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class StorageError(Exception):
    """Raised when the task file cannot be read or parsed."""

    pass


class JsonTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. All tasks live in one file; every save
    rewrites it via a temp file and an atomic rename (last write wins).
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read task file {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise StorageError(f"Invalid task file format: {self.path}")
        if data.get("version", FORMAT_VERSION) != FORMAT_VERSION:
            logger.warning(f"Task file {self.path} has version {data.get('version')}, expected {FORMAT_VERSION}")
        return data["tasks"]

    def _write(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        tmp.write_text(json.dumps({"version": FORMAT_VERSION, "tasks": records}, indent=2))
        tmp.replace(self.path)
        logger.debug(f"Wrote {len(records)} tasks to {self.path}")

    def load_all(self) -> list[RecurringTask]:
        """Load every stored task."""
        try:
            return [RecurringTask.from_dict(r) for r in self._read()]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Malformed task record in {self.path}: {e}") from e

    def get(self, task_id: str) -> RecurringTask | None:
        """Fetch one task. Returns None if not found."""
        for task in self.load_all():
            if task.id == task_id:
                return task
        return None

    def save(self, task: RecurringTask) -> None:
        """Insert or replace a task by id."""
        records = self._read()
        record = task.to_dict()
        for i, existing in enumerate(records):
            if existing.get("id") == task.id:
                records[i] = record
                break
        else:
            records.append(record)
        self._write(records)

    def delete(self, task_id: str) -> bool:
        """Remove a task. Returns False if it did not exist."""
        records = self._read()
        remaining = [r for r in records if r.get("id") != task_id]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        return True
