"""Due-date computation - no I/O dependencies.

Every repeating unit follows the same pattern: build a candidate on the
anchor's target weekday / day / month-day in the period containing the
reference point (last completion, or creation), then step forward by the
rule's period until the candidate is strictly after the reference.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable

from dateutil.relativedelta import relativedelta

from . import calendar as cal
from .errors import CalendarArithmeticError, SchedulingError
from .rules import target_day, target_month_day, target_weekday
from .units import PeriodUnit

if TYPE_CHECKING:
    from .tasks import Task

logger = logging.getLogger(__name__)

MAX_ADVANCE_STEPS = 10000


def reference_date(task: Task) -> datetime:
    """Point the next due date is computed from."""
    return task.last_completed_date or task.creation_date


def compute_next_due_date(task: Task) -> datetime:
    """
    Next due date, strictly after the reference point for repeating tasks.

    Raises CalendarArithmeticError or SchedulingError; use next_due_date()
    for the recovering variant.
    """
    rule = task.rule
    if not rule.is_repeating:
        if task.last_completed_date is not None:
            return cal.FAR_FUTURE
        return cal.at_hour(task.creation_date, rule.scheduled_hour)

    reference = reference_date(task)
    try:
        step = _step_function(task, reference)
    except (OverflowError, ValueError) as e:
        raise CalendarArithmeticError(f"Cannot build candidates from {reference.isoformat()}: {e}") from e
    return _advance_past(step, reference)


def _step_function(task: Task, reference: datetime) -> Callable[[int], datetime]:
    """Candidate generator: step(i) is the i-th occurrence from the reference period."""
    rule = task.rule
    anchor = task.creation_date
    hour = rule.scheduled_hour
    count = rule.period_count

    match rule.period_unit:
        case PeriodUnit.DAYS:
            start = cal.at_hour(reference, hour)

            def step(i: int) -> datetime:
                return start + timedelta(days=i * count)

        case PeriodUnit.WEEKS:
            week = cal.start_of_week(reference)
            start = cal.at_hour(week + timedelta(days=target_weekday(anchor)), hour)

            def step(i: int) -> datetime:
                return start + timedelta(weeks=i * count)

        case PeriodUnit.MONTHS:
            month_start = cal.at_hour(reference.replace(day=1), hour)

            # Re-clamp from the month start each time so day 31 survives February
            def step(i: int) -> datetime:
                first = month_start + relativedelta(months=i * count)
                return cal.with_day(first, target_day(anchor))

        case PeriodUnit.YEARS:
            year_start = cal.at_hour(reference.replace(month=1, day=1), hour)

            def step(i: int) -> datetime:
                first = year_start + relativedelta(years=i * count)
                return cal.with_month_day(first, *target_month_day(anchor))

        case _:
            raise SchedulingError(f"Unknown period unit: {rule.period_unit!r}")

    return step


def _advance_past(step: Callable[[int], datetime], reference: datetime) -> datetime:
    """First step(i), i = 0, 1, ..., that is strictly after reference."""
    for i in range(MAX_ADVANCE_STEPS):
        try:
            candidate = step(i)
        except (OverflowError, ValueError) as e:
            raise CalendarArithmeticError(f"Cannot advance past {reference.isoformat()}: {e}") from e
        if candidate > reference:
            return candidate
    raise SchedulingError(
        f"No due date after {reference.isoformat()} within {MAX_ADVANCE_STEPS} steps"
    )


def next_due_date(task: Task) -> datetime:
    """
    Next due date, falling back to the reference date on computation errors.

    The fallback makes the task show as due now; the failure is logged.
    """
    try:
        return compute_next_due_date(task)
    except (CalendarArithmeticError, SchedulingError) as e:
        logger.warning(f"Due date for task {task.name!r} fell back to reference date: {e}")
        return reference_date(task)


def is_overdue(task: Task, now: datetime) -> bool:
    """Due date has passed."""
    return next_due_date(task) < now


def days_overdue(task: Task, now: datetime) -> int:
    """Whole days since the due date (0 if not overdue)."""
    due = next_due_date(task)
    if due >= now:
        return 0
    return (now - due).days


def is_active_for_date(task: Task, moment: datetime) -> bool:
    """Task belongs on the to-do list at `moment`: due that day or overdue."""
    due = next_due_date(task)
    return due.date() == moment.date() or due < moment
