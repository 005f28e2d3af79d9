"""
Domain-specific exception hierarchy for the schedule engine.
"""


class ScheduleError(Exception):
    """Base class for all application-level errors."""


class InvalidTimeFormat(ScheduleError, ValueError):
    """Raised when a time-of-day string cannot be parsed."""


class InvalidDateFormat(ScheduleError, ValueError):
    """Raised when a calendar date string cannot be parsed."""


class InvalidPeriodRange(ScheduleError, ValueError):
    """Raised when a period does not start before it ends."""


class InvalidScheduleError(ScheduleError, ValueError):
    """Raised when a schedule violates one of its construction invariants."""


class OverlappingPeriodsInSchedule(InvalidScheduleError):
    """Raised when two periods of the same schedule overlap each other."""


class ScheduleConflict(ScheduleError):
    """
    Raised when a proposed schedule overlaps an existing active schedule
    of the same owner.

    The engine never raises this itself; it is a policy decision taken by
    the service layer. ``conflicts`` holds the matches that caused it.
    """

    def __init__(self, message: str, conflicts=()):
        super().__init__(message)
        self.conflicts = list(conflicts)


class RepositoryError(ScheduleError):
    """Raised when schedule storage cannot be read or written."""
