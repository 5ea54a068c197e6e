"""Bounded undo stack for completions - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime

from .tasks import Task

DEFAULT_CAPACITY = 10


@dataclass(frozen=True)
class UndoEntry:
    """
    State needed to reverse one completion.

    Holds the task id, not the task: the owning collection is looked up
    at undo time.
    """

    task_id: str
    previous_last_completed_date: datetime | None
    previous_missed_count: int
    timestamp: datetime = field(default_factory=datetime.now)


class UndoStack:
    """LIFO of recent completions; the oldest entry is evicted past capacity."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"Undo capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._entries: list[UndoEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return bool(self._entries)

    def push(self, entry: UndoEntry) -> None:
        self._entries.append(entry)
        if len(self._entries) > self.capacity:
            self._entries.pop(0)

    def peek(self) -> UndoEntry | None:
        return self._entries[-1] if self._entries else None

    def pop(self) -> UndoEntry | None:
        """Remove and return the latest entry; the caller applies the undo."""
        return self._entries.pop() if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def entries(self) -> list[UndoEntry]:
        """Entries oldest first."""
        return list(self._entries)

    def record_completion(self, task: Task, now: datetime | None = None) -> UndoEntry:
        """Capture `task`'s state before it is completed and push it."""
        entry = UndoEntry(
            task_id=task.id,
            previous_last_completed_date=task.last_completed_date,
            previous_missed_count=task.missed_count,
            timestamp=now or datetime.now(),
        )
        self.push(entry)
        return entry
