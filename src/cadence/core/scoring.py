"""Completion scoring - no I/O dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tasks import Task


def points(missed_count_at_completion: int) -> int:
    """
    Points for one completion, from how many periods were missed.

    0 -> 5, 1-2 -> 4, 3-4 -> 3, 5-6 -> 2, 7+ -> 1.
    """
    if missed_count_at_completion <= 0:
        return 5
    if missed_count_at_completion < 3:
        return 4
    if missed_count_at_completion < 5:
        return 3
    if missed_count_at_completion < 7:
        return 2
    return 1


def total_points(task: Task) -> int:
    """Sum of points over the task's completion history."""
    return sum(points(r.missed_count_at_completion) for r in task.history)


def average_points(task: Task) -> float:
    """Mean points per completion, 0 with no history."""
    if not task.history:
        return 0.0
    return total_points(task) / len(task.history)


def average_missed_count(task: Task) -> float:
    """Mean missed count at completion, 0 with no history."""
    if not task.history:
        return 0.0
    return sum(r.missed_count_at_completion for r in task.history) / len(task.history)


def on_time_rate(task: Task) -> float:
    """Fraction of completions made with nothing missed."""
    if not task.history:
        return 0.0
    on_time = sum(1 for r in task.history if r.missed_count_at_completion == 0)
    return on_time / len(task.history)


@dataclass
class TaskStats:
    """History statistics for one task."""

    completions: int
    total_points: int
    average_points: float
    average_missed_count: float
    on_time_rate: float


def stats_for(task: Task) -> TaskStats:
    return TaskStats(
        completions=len(task.history),
        total_points=total_points(task),
        average_points=average_points(task),
        average_missed_count=average_missed_count(task),
        on_time_rate=on_time_rate(task),
    )
