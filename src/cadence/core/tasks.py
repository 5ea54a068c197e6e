"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from . import due as due_dates
from .errors import TaskNotFoundError, ValidationError
from .missed import missed_count as compute_missed_count
from .rules import RecurrenceRule, compute_anchor_date
from .scoring import average_points, points, total_points
from .units import PeriodUnit


@dataclass(frozen=True)
class CompletionRecord:
    """One completion of a task."""

    completion_date: datetime
    missed_count_at_completion: int = 0

    @property
    def points(self) -> int:
        return points(self.missed_count_at_completion)


class TaskState(Enum):
    PENDING = "pending"
    DUE = "due"
    OVERDUE = "overdue"
    COMPLETED_ONE_OFF = "completed"


@dataclass
class Task:
    """
    A recurring or one-off task.

    `creation_date` doubles as the recurrence anchor: its weekday, day of
    month or month-and-day is the target for weekly, monthly and yearly
    rules. `missed_count` is a cache; call recompute_missed_count() first.
    """

    id: str
    name: str
    rule: RecurrenceRule
    creation_date: datetime
    last_completed_date: datetime | None = None
    missed_count: int = 0
    history: list[CompletionRecord] = field(default_factory=list)

    @classmethod
    def new(cls, name: str, rule: RecurrenceRule, created: datetime | None = None) -> "Task":
        """Create a task with a fresh id, no history and nothing missed."""
        return cls(
            id=uuid.uuid4().hex,
            name=_check_name(name),
            rule=rule,
            creation_date=created or datetime.now(),
        )

    @property
    def anchor(self) -> datetime:
        return self.creation_date

    @property
    def is_repeating(self) -> bool:
        return self.rule.is_repeating

    @property
    def is_completed_one_off(self) -> bool:
        return not self.rule.is_repeating and self.last_completed_date is not None

    @property
    def total_points(self) -> int:
        return total_points(self)

    @property
    def average_points(self) -> float:
        return average_points(self)

    def next_due_date(self) -> datetime:
        return due_dates.next_due_date(self)

    def is_overdue(self, now: datetime | None = None) -> bool:
        return due_dates.is_overdue(self, now or datetime.now())

    def days_overdue(self, now: datetime | None = None) -> int:
        return due_dates.days_overdue(self, now or datetime.now())

    def is_active_for_date(self, moment: datetime | None = None) -> bool:
        return due_dates.is_active_for_date(self, moment or datetime.now())

    def to_dict(self) -> dict:
        """Serialize for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "periodUnit": self.rule.period_unit.value,
            "periodCount": self.rule.period_count,
            "scheduledHour": self.rule.scheduled_hour,
            "isRepeating": self.rule.is_repeating,
            "creationDate": self.creation_date.isoformat(),
            "lastCompletedDate": _iso(self.last_completed_date),
            "missedCount": self.missed_count,
            "history": [
                {
                    "completionDate": r.completion_date.isoformat(),
                    "missedCountAtCompletion": r.missed_count_at_completion,
                }
                for r in self.history
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a stored record."""
        rule = RecurrenceRule(
            period_unit=PeriodUnit.parse(data["periodUnit"]),
            period_count=data.get("periodCount", 1),
            scheduled_hour=data.get("scheduledHour", 0),
            is_repeating=data.get("isRepeating", True),
        )
        return cls(
            id=data["id"],
            name=data["name"],
            rule=rule,
            creation_date=datetime.fromisoformat(data["creationDate"]),
            last_completed_date=_parse_iso(data.get("lastCompletedDate")),
            missed_count=data.get("missedCount", 0),
            history=[
                CompletionRecord(
                    completion_date=datetime.fromisoformat(r["completionDate"]),
                    missed_count_at_completion=r.get("missedCountAtCompletion", 0),
                )
                for r in data.get("history", [])
            ],
        )


def _iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt else None


def _parse_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _check_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Task name must not be empty")
    return name


# ============== Lifecycle ==============


def task_state(task: Task, now: datetime) -> TaskState:
    """Where the task stands at `now`."""
    if task.is_completed_one_off:
        return TaskState.COMPLETED_ONE_OFF
    if due_dates.next_due_date(task) > now:
        return TaskState.PENDING
    if compute_missed_count(task, now) >= 1:
        return TaskState.OVERDUE
    return TaskState.DUE


def recompute_missed_count(task: Task, now: datetime) -> int:
    """Refresh the cached missed count from the rule and completion date."""
    task.missed_count = compute_missed_count(task, now)
    return task.missed_count


def complete(task: Task, at: datetime | None = None) -> CompletionRecord:
    """
    Mark the task done at `at`.

    Snapshots the current missed count into the history, then resets it.
    Completing again just records another entry.
    """
    at = at or datetime.now()
    record = CompletionRecord(completion_date=at, missed_count_at_completion=task.missed_count)
    task.history.append(record)
    task.last_completed_date = at
    task.missed_count = 0
    return record


def undo_last_completion(
    task: Task,
    previous_date: datetime | None,
    previous_missed_count: int,
) -> CompletionRecord | None:
    """
    Reverse the latest completion using caller-supplied previous values.

    Returns the removed record, or None if there was no history (the
    previous values are still restored).
    """
    removed = task.history.pop() if task.history else None
    task.last_completed_date = previous_date
    task.missed_count = previous_missed_count
    return removed


def reschedule_one_off(task: Task) -> None:
    """Put a completed one-off task back on the list."""
    if task.is_repeating:
        raise ValidationError(f"Task {task.name!r} repeats; only one-off tasks can be rescheduled")
    task.last_completed_date = None


# ============== Edits ==============


def rename(task: Task, name: str) -> None:
    task.name = _check_name(name)


def update_rule(
    task: Task,
    rule: RecurrenceRule,
    first_due: datetime | None = None,
    *,
    weekday: int | None = None,
    day: int | None = None,
    month: int | None = None,
) -> None:
    """
    Replace the task's rule.

    With `first_due`, the anchor is recomputed so the next due date lands on
    the requested target; targets without a first due date are rejected
    since the anchor would drift from them.
    """
    has_targets = any(v is not None for v in (weekday, day, month))
    if has_targets and first_due is None:
        raise ValidationError("A first due date is required to change the recurrence target")
    if first_due is not None:
        task.creation_date = compute_anchor_date(rule, first_due, weekday=weekday, day=day, month=month)
    task.rule = rule


# ============== Collections ==============


def filter_active(tasks: list[Task], now: datetime) -> list[Task]:
    """Tasks due today or overdue at `now`."""
    return [t for t in tasks if due_dates.is_active_for_date(t, now)]


def sort_by_urgency(tasks: list[Task]) -> list[Task]:
    """Most missed periods first, then earliest due date."""
    return sorted(tasks, key=lambda t: (-t.missed_count, due_dates.next_due_date(t)))


def filter_completed_one_offs(tasks: list[Task]) -> list[Task]:
    """Completed one-off tasks, by name, for rescheduling."""
    return sorted((t for t in tasks if t.is_completed_one_off), key=lambda t: t.name)


def find_task(tasks: list[Task], key: str) -> Task:
    """Look up a task by id or unique id prefix."""
    for t in tasks:
        if t.id == key:
            return t
    matches = [t for t in tasks if key and t.id.startswith(key)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        raise TaskNotFoundError(f"Task id prefix {key!r} is ambiguous ({len(matches)} matches)")
    raise TaskNotFoundError(f"No task with id {key!r}")
