"""JSON file task storage adapter."""

import json
import logging
from pathlib import Path

from cadence.core.errors import CadenceError
from cadence.core.tasks import Task

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonTaskStore:
    """
    File-based task storage.

    Implements TaskStore protocol. All tasks live in one JSON document,
    rewritten on every save.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise CadenceError(f"Task file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise CadenceError(f"Task file {self.path} has no task list")
        return data["tasks"]

    def _write(self, records: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"version": FORMAT_VERSION, "tasks": records}, indent=2))
        tmp.replace(self.path)
        logger.debug(f"Wrote {len(records)} tasks to {self.path}")

    def load_all(self) -> list[Task]:
        """Load all tasks, in insertion order."""
        try:
            return [Task.from_dict(r) for r in self._read()]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CadenceError(f"Task file {self.path} has an invalid record: {e}") from e

    def get(self, task_id: str) -> Task | None:
        for task in self.load_all():
            if task.id == task_id:
                return task
        return None

    def save(self, task: Task) -> None:
        self.save_all([task])

    def save_all(self, tasks: list[Task]) -> None:
        """Replace matching records in place; append new ones."""
        records = self._read()
        index = {r.get("id"): i for i, r in enumerate(records)}
        for task in tasks:
            if task.id in index:
                records[index[task.id]] = task.to_dict()
            else:
                index[task.id] = len(records)
                records.append(task.to_dict())
        self._write(records)

    def delete(self, task_id: str) -> bool:
        records = self._read()
        kept = [r for r in records if r.get("id") != task_id]
        if len(kept) == len(records):
            return False
        self._write(kept)
        logger.info(f"Deleted task {task_id}")
        return True
