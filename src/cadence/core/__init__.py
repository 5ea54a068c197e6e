"""Functional core - pure scheduling logic with no I/O."""

from .errors import (
    CadenceError,
    ValidationError,
    CalendarArithmeticError,
    SchedulingError,
    TaskNotFoundError,
)
from .units import PeriodUnit
from .rules import RecurrenceRule, compute_anchor_date
from .due import next_due_date, compute_next_due_date, is_overdue, days_overdue, is_active_for_date
from .missed import missed_count
from .tasks import (
    Task,
    CompletionRecord,
    TaskState,
    task_state,
    complete,
    undo_last_completion,
    reschedule_one_off,
    recompute_missed_count,
)
from .scoring import points, total_points, average_points, TaskStats, stats_for
from .undo import UndoEntry, UndoStack
from .snapshot import TaskSnapshot, build_snapshot

__all__ = [
    # Errors
    "CadenceError",
    "ValidationError",
    "CalendarArithmeticError",
    "SchedulingError",
    "TaskNotFoundError",
    # Rules
    "PeriodUnit",
    "RecurrenceRule",
    "compute_anchor_date",
    # Due dates
    "next_due_date",
    "compute_next_due_date",
    "is_overdue",
    "days_overdue",
    "is_active_for_date",
    "missed_count",
    # Tasks
    "Task",
    "CompletionRecord",
    "TaskState",
    "task_state",
    "complete",
    "undo_last_completion",
    "reschedule_one_off",
    "recompute_missed_count",
    # Scoring
    "points",
    "total_points",
    "average_points",
    "TaskStats",
    "stats_for",
    # Undo
    "UndoEntry",
    "UndoStack",
    # Snapshot
    "TaskSnapshot",
    "build_snapshot",
]
