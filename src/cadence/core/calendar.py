"""Calendar arithmetic primitives - no I/O dependencies.

Month and year steps use `dateutil.relativedelta`, which clamps to the
target month's length (Jan 31 + 1 month = Feb 28/29).
"""

from calendar import monthrange
from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from .errors import CalendarArithmeticError
from .units import PeriodUnit

# Due date of a one-off task that has already been completed.
FAR_FUTURE = datetime(9999, 12, 31, 23, 59, 59)


def month_length(year: int, month: int) -> int:
    """Number of days in the given month."""
    return monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> int:
    """Clamp a day-of-month to the length of the given month."""
    return min(day, month_length(year, month))


def at_hour(dt: datetime, hour: int) -> datetime:
    """Same calendar date as `dt`, at `hour`:00:00."""
    return dt.replace(hour=hour, minute=0, second=0, microsecond=0)


def start_of_week(dt: datetime) -> datetime:
    """Midnight on the Monday of the ISO week containing `dt`."""
    return at_hour(dt, 0) - timedelta(days=dt.weekday())


def unit_delta(unit: PeriodUnit, count: int) -> relativedelta:
    """relativedelta for `count` periods of `unit`."""
    match unit:
        case PeriodUnit.DAYS:
            return relativedelta(days=count)
        case PeriodUnit.WEEKS:
            return relativedelta(weeks=count)
        case PeriodUnit.MONTHS:
            return relativedelta(months=count)
        case PeriodUnit.YEARS:
            return relativedelta(years=count)
    raise ValueError(f"Unknown period unit: {unit!r}")


def add_units(dt: datetime, unit: PeriodUnit, count: int) -> datetime:
    """
    Add `count` periods of `unit` to `dt`, clamping to month length.

    Raises CalendarArithmeticError if the result is not representable.
    """
    try:
        return dt + unit_delta(unit, count)
    except (OverflowError, ValueError) as e:
        raise CalendarArithmeticError(
            f"Cannot add {count} {unit.value.lower()} to {dt.isoformat()}: {e}"
        ) from e


def with_day(dt: datetime, day: int) -> datetime:
    """Move `dt` to `day` within its month, clamped to the month's length."""
    return dt.replace(day=clamp_day(dt.year, dt.month, day))


def with_month_day(dt: datetime, month: int, day: int) -> datetime:
    """Move `dt` to `month`/`day` within its year, clamped (Feb 29 -> Feb 28)."""
    return dt.replace(month=month, day=clamp_day(dt.year, month, day))


def whole_units_between(start: datetime, end: datetime, unit: PeriodUnit) -> int:
    """
    Whole periods of `unit` elapsed from `start` to `end`.

    Days and weeks count elapsed 24h blocks. Months and years use the
    calendar difference from relativedelta, which agrees with add_units:
    a month has passed once the clamped same day next month is reached,
    so Jan 31 -> Feb 28 is 1 month and Jan 31 -> Feb 27 is 0.
    Negative when `end` is before `start`.
    """
    match unit:
        case PeriodUnit.DAYS:
            return (end - start).days
        case PeriodUnit.WEEKS:
            return (end - start).days // 7
        case PeriodUnit.MONTHS:
            diff = relativedelta(end, start)
            return diff.years * 12 + diff.months
        case PeriodUnit.YEARS:
            return relativedelta(end, start).years
    raise ValueError(f"Unknown period unit: {unit!r}")
