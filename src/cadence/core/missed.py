"""Missed-period counting - no I/O dependencies."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from . import calendar as cal
from .due import next_due_date

if TYPE_CHECKING:
    from .tasks import Task

logger = logging.getLogger(__name__)


def missed_count(task: Task, now: datetime) -> int:
    """
    Whole recurrence periods elapsed since the task fell due.

    0 for one-off tasks and for tasks not yet due. Being late by less than
    one full period is still 0; each full period crossed adds one.
    Pure function of the due date and `now`.
    """
    if not task.rule.is_repeating:
        return 0

    due = next_due_date(task)
    if due >= now:
        return 0

    try:
        elapsed = cal.whole_units_between(due, now, task.rule.period_unit)
    except (OverflowError, ValueError) as e:
        logger.warning(f"Missed count for task {task.name!r} defaulted to 0: {e}")
        return 0

    return max(0, elapsed // task.rule.period_count)
