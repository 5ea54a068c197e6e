"""Tests for missed-period counting."""

from datetime import datetime

import pytest

from cadence.core import calendar as cal
from cadence.core.missed import missed_count
from cadence.core.units import PeriodUnit


class TestDailyMissed:
    def test_five_days_late(self, make_task):
        task = make_task(last=datetime(2025, 6, 5, 10, 0))
        # due Jun 6 00:00
        assert missed_count(task, datetime(2025, 6, 11, 10, 0)) == 5

    def test_every_three_days(self, make_task):
        task = make_task(count=3, last=datetime(2025, 6, 1, 10, 0))
        # due Jun 4 00:00, 7 days late
        assert missed_count(task, datetime(2025, 6, 11, 10, 0)) == 2

    def test_late_by_less_than_one_period(self, make_task):
        task = make_task(hour=10, last=datetime(2025, 6, 10, 17, 0))
        assert missed_count(task, datetime(2025, 6, 11, 14, 0)) == 0

    def test_exactly_one_period_late(self, make_task):
        task = make_task(hour=10, last=datetime(2025, 6, 10, 17, 0))
        assert missed_count(task, datetime(2025, 6, 12, 10, 0)) == 1

    def test_not_yet_due(self, make_task):
        task = make_task(hour=20, last=datetime(2025, 6, 11, 9, 0))
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 0

    def test_exactly_at_due_date(self, make_task):
        task = make_task(hour=20, last=datetime(2025, 6, 11, 9, 0))
        assert missed_count(task, datetime(2025, 6, 11, 20, 0)) == 0


class TestWeeklyMissed:
    def test_weekly(self, make_task):
        task = make_task(
            unit=PeriodUnit.WEEKS,
            hour=10,
            created=datetime(2025, 5, 24, 10, 0),
            last=datetime(2025, 5, 28, 12, 0),
        )
        # due Sat May 31 10:00, 11 days late
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 1

    def test_biweekly_rounds_down(self, make_task):
        task = make_task(
            unit=PeriodUnit.WEEKS,
            count=2,
            hour=10,
            created=datetime(2025, 5, 24, 10, 0),
            last=datetime(2025, 5, 28, 12, 0),
        )
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 0


class TestMonthlyMissed:
    def test_monthly(self, make_task):
        task = make_task(
            unit=PeriodUnit.MONTHS,
            created=datetime(2025, 1, 15, 12, 0),
            last=datetime(2025, 1, 20, 9, 0),
        )
        # due Feb 15
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 3

    def test_every_two_months(self, make_task):
        task = make_task(
            unit=PeriodUnit.MONTHS,
            count=2,
            created=datetime(2025, 1, 15, 12, 0),
            last=datetime(2025, 1, 20, 9, 0),
        )
        # due Mar 15
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 1

    def test_month_end_boundary(self, make_task):
        task = make_task(unit=PeriodUnit.MONTHS, created=datetime(2024, 12, 31, 12, 0))
        # due Jan 31 00:00; a month has passed once Feb 28 is reached
        assert missed_count(task, datetime(2025, 2, 27, 23, 0)) == 0
        assert missed_count(task, datetime(2025, 2, 28, 0, 0)) == 1


class TestYearlyMissed:
    def test_leap_day_anchor(self, make_task):
        task = make_task(unit=PeriodUnit.YEARS, created=datetime(2024, 2, 29, 8, 0))
        # due 2025-02-28
        assert missed_count(task, datetime(2026, 2, 27, 0, 0)) == 0
        assert missed_count(task, datetime(2027, 3, 1, 0, 0)) == 2


class TestNeverMissed:
    def test_one_off_never_counts(self, make_task):
        task = make_task(created=datetime(2025, 1, 1, 9, 0), repeating=False)
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 0

    @pytest.mark.parametrize("unit", list(PeriodUnit))
    def test_never_negative(self, make_task, unit):
        task = make_task(unit=unit, created=datetime(2025, 6, 11, 12, 0))
        assert missed_count(task, datetime(2025, 6, 11, 12, 0)) == 0
        assert missed_count(task, datetime(2020, 1, 1)) == 0

    def test_arithmetic_failure_counts_zero(self, make_task, monkeypatch):
        def boom(start, end, unit):
            raise OverflowError("date value out of range")

        monkeypatch.setattr(cal, "whole_units_between", boom)
        task = make_task(last=datetime(2025, 6, 5, 10, 0))
        assert missed_count(task, datetime(2025, 6, 11, 10, 0)) == 0

    def test_does_not_mutate_task(self, make_task):
        task = make_task(last=datetime(2025, 6, 5, 10, 0))
        missed_count(task, datetime(2025, 6, 11, 10, 0))
        assert task.missed_count == 0
