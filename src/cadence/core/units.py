"""Recurrence period units."""

from enum import Enum

from .errors import ValidationError


class PeriodUnit(Enum):
    """Unit a recurrence rule repeats in. Values are the exported strings."""

    DAYS = "Days"
    WEEKS = "Weeks"
    MONTHS = "Months"
    YEARS = "Years"

    @classmethod
    def parse(cls, text: str) -> "PeriodUnit":
        """Parse 'days', 'Week', 'MONTHS', 'year', ... into a unit."""
        key = str(text).strip().lower()
        for unit in cls:
            plural = unit.value.lower()
            if key in (plural, plural[:-1]):
                return unit
        raise ValidationError(f"Unknown period unit: {text!r}")

    def label(self, count: int) -> str:
        """'day' / 'days' depending on count."""
        word = self.value.lower()
        return word[:-1] if count == 1 else word
