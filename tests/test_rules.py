"""Tests for recurrence rules and anchor computation."""

from datetime import datetime

import pytest

from cadence.core.calendar import month_length
from cadence.core.due import next_due_date
from cadence.core.errors import ValidationError
from cadence.core.rules import (
    RecurrenceRule,
    compute_anchor_date,
    parse_weekday,
    target_day,
    target_month_day,
    target_weekday,
)
from cadence.core.units import PeriodUnit


class TestRecurrenceRule:
    def test_defaults(self):
        rule = RecurrenceRule(PeriodUnit.DAYS)
        assert rule.period_count == 1
        assert rule.scheduled_hour == 0
        assert rule.is_repeating is True

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_period_count_below_one(self, count):
        with pytest.raises(ValidationError):
            RecurrenceRule(PeriodUnit.WEEKS, period_count=count)

    @pytest.mark.parametrize("hour", [-1, 24, 100])
    def test_rejects_hour_out_of_range(self, hour):
        with pytest.raises(ValidationError):
            RecurrenceRule(PeriodUnit.DAYS, scheduled_hour=hour)

    def test_rejects_non_integer_count(self):
        with pytest.raises(ValidationError):
            RecurrenceRule(PeriodUnit.DAYS, period_count=1.5)

    def test_rejects_unit_string(self):
        with pytest.raises(ValidationError):
            RecurrenceRule("Days")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            RecurrenceRule(PeriodUnit.DAYS, scheduled_hour=24)

    def test_is_immutable(self):
        rule = RecurrenceRule(PeriodUnit.DAYS)
        with pytest.raises(AttributeError):
            rule.period_count = 2

    def test_describe(self):
        assert RecurrenceRule(PeriodUnit.WEEKS, 2, 20).describe() == "every 2 weeks at 20:00"
        assert RecurrenceRule(PeriodUnit.DAYS).describe() == "every day at 00:00"
        assert RecurrenceRule(PeriodUnit.DAYS, 1, 9, is_repeating=False).describe() == "once at 09:00"


class TestPeriodUnit:
    @pytest.mark.parametrize(
        "text, unit",
        [
            ("days", PeriodUnit.DAYS),
            ("Day", PeriodUnit.DAYS),
            ("WEEK", PeriodUnit.WEEKS),
            ("Months", PeriodUnit.MONTHS),
            (" year ", PeriodUnit.YEARS),
        ],
    )
    def test_parse(self, text, unit):
        assert PeriodUnit.parse(text) == unit

    def test_parse_unknown(self):
        with pytest.raises(ValidationError):
            PeriodUnit.parse("fortnights")

    @pytest.mark.parametrize("value", [5, None, ["Days"]])
    def test_parse_non_string(self, value):
        with pytest.raises(ValidationError):
            PeriodUnit.parse(value)

    def test_label(self):
        assert PeriodUnit.MONTHS.label(1) == "month"
        assert PeriodUnit.MONTHS.label(3) == "months"


class TestParseWeekday:
    def test_names_and_abbreviations(self):
        assert parse_weekday("sat") == 5
        assert parse_weekday("Saturday") == 5
        assert parse_weekday("mo") == 0
        assert parse_weekday("SUN") == 6

    def test_numbers(self):
        assert parse_weekday("0") == 0
        assert parse_weekday("6") == 6

    @pytest.mark.parametrize("text", ["s", "t", "7", "xyz", ""])
    def test_rejects_ambiguous_or_unknown(self, text):
        with pytest.raises(ValidationError):
            parse_weekday(text)


class TestTargets:
    def test_targets_read_off_anchor(self):
        anchor = datetime(2025, 5, 31, 10, 0)  # Saturday
        assert target_weekday(anchor) == 5
        assert target_day(anchor) == 31
        assert target_month_day(anchor) == (5, 31)


class TestComputeAnchorDate:
    def _task(self, make_task, rule, anchor):
        return make_task(
            unit=rule.period_unit,
            count=rule.period_count,
            hour=rule.scheduled_hour,
            created=anchor,
            repeating=rule.is_repeating,
        )

    def test_every_two_weeks_on_saturday(self, make_task):
        rule = RecurrenceRule(PeriodUnit.WEEKS, period_count=2, scheduled_hour=9)
        anchor = compute_anchor_date(rule, datetime(2025, 6, 14), weekday=5)

        assert anchor == datetime(2025, 5, 31, 9, 0)
        assert next_due_date(self._task(make_task, rule, anchor)) == datetime(2025, 6, 14, 9, 0)

    def test_weekday_after_first_due(self, make_task):
        rule = RecurrenceRule(PeriodUnit.WEEKS, scheduled_hour=20)
        # Wednesday -> next Saturday
        anchor = compute_anchor_date(rule, datetime(2025, 6, 11), weekday=5)

        assert anchor == datetime(2025, 6, 7, 20, 0)
        assert next_due_date(self._task(make_task, rule, anchor)) == datetime(2025, 6, 14, 20, 0)

    def test_weekday_defaults_to_first_due(self):
        rule = RecurrenceRule(PeriodUnit.WEEKS)
        anchor = compute_anchor_date(rule, datetime(2025, 6, 11, 15, 30))
        assert anchor == datetime(2025, 6, 4, 0, 0)

    def test_days_step_back_period(self, make_task):
        rule = RecurrenceRule(PeriodUnit.DAYS, period_count=3, scheduled_hour=8)
        anchor = compute_anchor_date(rule, datetime(2025, 6, 14))

        assert anchor == datetime(2025, 6, 11, 8, 0)
        assert next_due_date(self._task(make_task, rule, anchor)) == datetime(2025, 6, 14, 8, 0)

    def test_month_day_31_survives_february(self, make_task):
        rule = RecurrenceRule(PeriodUnit.MONTHS, scheduled_hour=9)
        anchor = compute_anchor_date(rule, datetime(2025, 2, 10), day=31)

        assert anchor == datetime(2025, 1, 31, 9, 0)
        task = self._task(make_task, rule, anchor)
        assert next_due_date(task) == datetime(2025, 2, 28, 9, 0)

        task.last_completed_date = datetime(2025, 2, 28, 9, 30)
        assert next_due_date(task) == datetime(2025, 3, 31, 9, 0)

    def test_month_day_before_first_due_rolls_to_next_month(self, make_task):
        rule = RecurrenceRule(PeriodUnit.MONTHS)
        anchor = compute_anchor_date(rule, datetime(2025, 6, 20), day=5)

        assert anchor == datetime(2025, 6, 5, 0, 0)
        assert next_due_date(self._task(make_task, rule, anchor)) == datetime(2025, 7, 5, 0, 0)

    def test_year_keeps_leap_day(self, make_task):
        rule = RecurrenceRule(PeriodUnit.YEARS)
        anchor = compute_anchor_date(rule, datetime(2025, 1, 1), month=2, day=29)

        assert anchor == datetime(2024, 2, 29, 0, 0)
        assert next_due_date(self._task(make_task, rule, anchor)) == datetime(2025, 2, 28, 0, 0)

    def test_year_month_without_day_clamps(self):
        rule = RecurrenceRule(PeriodUnit.YEARS)
        anchor = compute_anchor_date(rule, datetime(2025, 1, 31), month=2)
        assert anchor == datetime(2024, 2, 29, 0, 0)

    def test_one_off_is_first_due_at_hour(self):
        rule = RecurrenceRule(PeriodUnit.DAYS, scheduled_hour=14, is_repeating=False)
        anchor = compute_anchor_date(rule, datetime(2025, 6, 20))
        assert anchor == datetime(2025, 6, 20, 14, 0)

    @pytest.mark.parametrize(
        "targets",
        [{"weekday": 7}, {"day": 0}, {"day": 32}, {"month": 13}, {"month": 2, "day": 30}],
    )
    def test_rejects_invalid_targets(self, targets):
        rule = RecurrenceRule(PeriodUnit.YEARS)
        with pytest.raises(ValidationError):
            compute_anchor_date(rule, datetime(2025, 1, 1), **targets)


class TestAnchorKeepsTargetDay:
    def test_day_31_after_february_due_same_month(self, make_task):
        rule = RecurrenceRule(PeriodUnit.MONTHS, scheduled_hour=9)
        anchor = compute_anchor_date(rule, datetime(2025, 3, 5), day=31)

        assert anchor == datetime(2025, 3, 31, 0, 0)
        task = make_task(unit=PeriodUnit.MONTHS, hour=9, created=anchor)
        assert next_due_date(task) == datetime(2025, 3, 31, 9, 0)

        task.last_completed_date = datetime(2025, 3, 31, 9, 30)
        assert next_due_date(task) == datetime(2025, 4, 30, 9, 0)
        task.last_completed_date = datetime(2025, 4, 30, 9, 30)
        assert next_due_date(task) == datetime(2025, 5, 31, 9, 0)

    @pytest.mark.parametrize("day", [30, 31])
    def test_midnight_target_missing_from_february(self, make_task, day):
        rule = RecurrenceRule(PeriodUnit.MONTHS)
        anchor = compute_anchor_date(rule, datetime(2025, 3, 2), day=day)

        assert anchor == datetime(2025, 3, day, 0, 0)
        task = make_task(unit=PeriodUnit.MONTHS, created=anchor)
        assert next_due_date(task) == datetime(2025, 4, 30, 0, 0)

    def test_every_two_months_steps_over_february(self, make_task):
        rule = RecurrenceRule(PeriodUnit.MONTHS, period_count=2)
        anchor = compute_anchor_date(rule, datetime(2025, 3, 5), day=31)

        assert anchor == datetime(2025, 1, 31, 0, 0)
        task = make_task(unit=PeriodUnit.MONTHS, count=2, created=anchor)
        assert next_due_date(task) == datetime(2025, 3, 31, 0, 0)

    def test_leap_day_from_common_year_at_midnight(self):
        rule = RecurrenceRule(PeriodUnit.YEARS)
        anchor = compute_anchor_date(rule, datetime(2026, 1, 1), month=2, day=29)
        assert anchor == datetime(2028, 2, 29, 0, 0)

    def test_leap_day_from_common_year_after_midnight(self, make_task):
        rule = RecurrenceRule(PeriodUnit.YEARS, scheduled_hour=9)
        anchor = compute_anchor_date(rule, datetime(2026, 1, 1), month=2, day=29)

        assert anchor == datetime(2028, 2, 29, 0, 0)
        task = make_task(unit=PeriodUnit.YEARS, hour=9, created=anchor)
        assert next_due_date(task) == datetime(2028, 2, 29, 9, 0)

    @pytest.mark.parametrize(
        "first_due",
        [datetime(2025, 1, 31), datetime(2025, 2, 1), datetime(2025, 3, 2), datetime(2024, 2, 29), datetime(2025, 11, 30)],
    )
    @pytest.mark.parametrize("day", [28, 29, 30, 31])
    @pytest.mark.parametrize("hour", [0, 9])
    @pytest.mark.parametrize("count", [1, 2, 3])
    def test_monthly_anchor_on_target(self, make_task, first_due, day, hour, count):
        rule = RecurrenceRule(PeriodUnit.MONTHS, period_count=count, scheduled_hour=hour)
        anchor = compute_anchor_date(rule, first_due, day=day)

        assert anchor.day == day
        due = next_due_date(make_task(unit=PeriodUnit.MONTHS, count=count, hour=hour, created=anchor))
        assert due >= first_due.replace(hour=hour)
        assert due.day == min(day, month_length(due.year, due.month))

    @pytest.mark.parametrize(
        "first_due", [datetime(2025, 1, 1), datetime(2026, 3, 1), datetime(2024, 2, 29)]
    )
    @pytest.mark.parametrize("month, day", [(2, 29), (2, 28), (12, 31)])
    @pytest.mark.parametrize("hour", [0, 9])
    @pytest.mark.parametrize("count", [1, 2])
    def test_yearly_anchor_on_target(self, make_task, first_due, month, day, hour, count):
        rule = RecurrenceRule(PeriodUnit.YEARS, period_count=count, scheduled_hour=hour)
        anchor = compute_anchor_date(rule, first_due, month=month, day=day)

        assert (anchor.month, anchor.day) == (month, day)
        due = next_due_date(make_task(unit=PeriodUnit.YEARS, count=count, hour=hour, created=anchor))
        assert due >= first_due.replace(hour=hour)
        assert due.month == month
