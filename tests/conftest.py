"""Shared test helpers."""

from datetime import datetime

import pytest

from cadence.core.rules import RecurrenceRule
from cadence.core.tasks import Task
from cadence.core.units import PeriodUnit


@pytest.fixture
def now():
    # Wednesday
    return datetime(2025, 6, 11, 12, 0)


@pytest.fixture
def make_task():
    """Factory for tasks with explicit dates (no wall clock)."""

    def _make(
        unit: PeriodUnit = PeriodUnit.DAYS,
        count: int = 1,
        hour: int = 0,
        created: datetime = datetime(2025, 6, 1, 12, 0),
        last: datetime | None = None,
        repeating: bool = True,
        name: str = "Test task",
        task_id: str = "task-1",
    ) -> Task:
        rule = RecurrenceRule(
            period_unit=unit,
            period_count=count,
            scheduled_hour=hour,
            is_repeating=repeating,
        )
        return Task(
            id=task_id,
            name=name,
            rule=rule,
            creation_date=created,
            last_completed_date=last,
        )

    return _make
