"""Task storage interface."""

from typing import Protocol

from cadence.core.tasks import Task


class TaskStore(Protocol):
    """Interface for loading and persisting tasks in any backend."""

    def load_all(self) -> list[Task]:
        """Load all tasks."""
        ...

    def get(self, task_id: str) -> Task | None:
        """Load one task by exact id. Returns None if not found."""
        ...

    def save(self, task: Task) -> None:
        """Insert or replace a task."""
        ...

    def save_all(self, tasks: list[Task]) -> None:
        """Insert or replace several tasks at once."""
        ...

    def delete(self, task_id: str) -> bool:
        """Delete a task. Returns False if it did not exist."""
        ...
