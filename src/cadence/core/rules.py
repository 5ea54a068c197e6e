"""Recurrence rules and anchor computation - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from . import calendar as cal
from .errors import SchedulingError, ValidationError
from .units import PeriodUnit

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

# Occurrences tried when looking for an anchor that keeps the target day
MAX_ANCHOR_SEARCH = 12


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How a task repeats.

    The anchor date that fixes the target weekday / day-of-month / month-day
    is not stored here: it is the owning task's creation date.
    """

    period_unit: PeriodUnit
    period_count: int = 1
    scheduled_hour: int = 0
    is_repeating: bool = True

    def __post_init__(self):
        if not isinstance(self.period_unit, PeriodUnit):
            raise ValidationError(f"period_unit must be a PeriodUnit, got {self.period_unit!r}")
        if isinstance(self.period_count, bool) or not isinstance(self.period_count, int):
            raise ValidationError(f"period_count must be an integer, got {self.period_count!r}")
        if self.period_count < 1:
            raise ValidationError(f"period_count must be at least 1, got {self.period_count}")
        if isinstance(self.scheduled_hour, bool) or not isinstance(self.scheduled_hour, int):
            raise ValidationError(f"scheduled_hour must be an integer, got {self.scheduled_hour!r}")
        if not 0 <= self.scheduled_hour <= 23:
            raise ValidationError(f"scheduled_hour must be in 0-23, got {self.scheduled_hour}")

    def describe(self) -> str:
        """Human-readable summary, e.g. 'every 2 weeks at 20:00'."""
        hour = f"{self.scheduled_hour:02d}:00"
        if not self.is_repeating:
            return f"once at {hour}"
        if self.period_count == 1:
            return f"every {self.period_unit.label(1)} at {hour}"
        return f"every {self.period_count} {self.period_unit.label(self.period_count)} at {hour}"


def target_weekday(anchor: datetime) -> int:
    """Weekday (Monday=0) weekly rules recur on."""
    return anchor.weekday()


def target_day(anchor: datetime) -> int:
    """Day of month monthly rules recur on (before clamping)."""
    return anchor.day


def target_month_day(anchor: datetime) -> tuple[int, int]:
    """(month, day) yearly rules recur on (before clamping)."""
    return anchor.month, anchor.day


def parse_weekday(text: str) -> int:
    """Parse 'sat', 'Saturday', '5' into a weekday number (Monday=0)."""
    key = text.strip().lower()
    if key.isdigit():
        value = int(key)
        if 0 <= value <= 6:
            return value
        raise ValidationError(f"Weekday number must be in 0-6, got {value}")
    if len(key) >= 2:
        for i, name in enumerate(WEEKDAY_NAMES):
            if name.startswith(key):
                return i
    raise ValidationError(f"Unknown weekday: {text!r}")


def _check_targets(weekday: int | None, day: int | None, month: int | None) -> None:
    if weekday is not None and not 0 <= weekday <= 6:
        raise ValidationError(f"weekday must be in 0-6, got {weekday}")
    if day is not None and not 1 <= day <= 31:
        raise ValidationError(f"day must be in 1-31, got {day}")
    if month is not None and not 1 <= month <= 12:
        raise ValidationError(f"month must be in 1-12, got {month}")
    if month is not None and day is not None:
        # 2000 is a leap year, so Feb 29 is accepted
        if day > cal.month_length(2000, month):
            raise ValidationError(f"Month {month} has no day {day}")


def compute_anchor_date(
    rule: RecurrenceRule,
    first_due: datetime,
    *,
    weekday: int | None = None,
    day: int | None = None,
    month: int | None = None,
) -> datetime:
    """
    Anchor date that makes the first computed due date land on the target.

    Finds the first date on or after `first_due` matching the target
    weekday (weeks), day of month (months) or month and day (years), sets it
    to the rule's scheduled hour, then steps back one period. The anchor
    always keeps the target day: when no anchor on it can fall due on that
    first date (day 31 at midnight after a February), the first due date
    moves to the next occurrence that has one. Targets left
    as None default to `first_due`'s own weekday/day/month. One-off rules
    are due at the anchor itself, so they get `first_due` at the scheduled
    hour. Used by editors only; due-date computation never calls this.

    Example: every 2 weeks on Saturday starting Sat 2025-06-14
        -> anchor Sat 2025-05-31, first due 2025-06-14.
    """
    _check_targets(weekday, day, month)
    base = cal.at_hour(first_due, rule.scheduled_hour)
    if not rule.is_repeating:
        return base
    count = rule.period_count

    match rule.period_unit:
        case PeriodUnit.DAYS:
            return cal.add_units(base, PeriodUnit.DAYS, -count)

        case PeriodUnit.WEEKS:
            target = base.weekday() if weekday is None else weekday
            found = base + timedelta(days=(target - base.weekday()) % 7)
            return cal.add_units(found, PeriodUnit.WEEKS, -count)

        case PeriodUnit.MONTHS:
            target = base.day if day is None else day
            found = cal.with_day(base, target)
            if found < base:
                found = cal.with_day(base.replace(day=1) + relativedelta(months=1), target)
            for _ in range(MAX_ANCHOR_SEARCH):
                back = cal.add_units(found, PeriodUnit.MONTHS, -count)
                anchor = _anchor_on_target(found, back, target)
                if anchor is not None:
                    return anchor
                found = cal.with_day(found.replace(day=1) + relativedelta(months=1), target)

        case PeriodUnit.YEARS:
            target_month = base.month if month is None else month
            if day is None:
                target = min(base.day, cal.month_length(2000, target_month))
            else:
                target = day
            found = cal.with_month_day(base, target_month, target)
            if found < base:
                found = cal.with_month_day(base.replace(month=1, day=1) + relativedelta(years=1), target_month, target)
            for _ in range(MAX_ANCHOR_SEARCH):
                back = cal.add_units(found, PeriodUnit.YEARS, -count)
                anchor = _anchor_on_target(found, back, target)
                if anchor is not None:
                    return anchor
                found = cal.with_month_day(found.replace(day=1) + relativedelta(years=1), target_month, target)

        case _:
            raise ValidationError(f"Unknown period unit: {rule.period_unit!r}")

    raise SchedulingError(f"No anchor on day {target} found within {MAX_ANCHOR_SEARCH} occurrences")


def _anchor_on_target(found: datetime, back: datetime, target: int) -> datetime | None:
    """
    Anchor on day `target` whose first due date is `found`, if one exists.

    `back` is `found` stepped back one period. The anchor sits there when its
    month holds the target day, else at midnight of `found` itself when
    `found` is on the target day and due later that day.
    """
    if cal.month_length(back.year, back.month) >= target:
        return back.replace(day=target)
    if found.day == target and found.hour > 0:
        return found.replace(hour=0)
    return None
