"""Error taxonomy for the scheduling core."""


class CadenceError(Exception):
    """Base class for all cadence errors."""


class ValidationError(CadenceError, ValueError):
    """Invalid rule or task data, rejected at construction or edit time."""


class CalendarArithmeticError(CadenceError):
    """Calendar arithmetic could not produce a date (e.g. year overflow)."""


class SchedulingError(CadenceError):
    """A due-date advance loop did not terminate within its step cap."""


class TaskNotFoundError(CadenceError, LookupError):
    """No stored task matches the given id or id prefix."""
