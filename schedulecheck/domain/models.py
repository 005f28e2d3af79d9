"""
Domain models for schedules, periods and times of day.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import FrozenSet, Tuple

import pendulum

from .exceptions import (
    InvalidDateFormat,
    InvalidPeriodRange,
    InvalidScheduleError,
    InvalidTimeFormat,
    OverlappingPeriodsInSchedule,
)
from .overlap import find_overlapping_pair, overlaps

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


class ScheduleType(str, Enum):
    APPOINTMENT = "appointment"
    BLOCKED = "blocked"
    AVAILABILITY = "availability"
    CUSTOM = "custom"


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def parse_date(value: date | str) -> date:
    """
    Parse an ISO ``YYYY-MM-DD`` string into a date.

    Date (and datetime) objects are passed through as plain dates.

    Raises:
        InvalidDateFormat: If the string is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return pendulum.from_format(str(value).strip(), "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidDateFormat(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """
    A naive wall-clock time with minute resolution.

    Stored as minutes since midnight so comparisons are numeric; "9:00"
    and "09:00" parse to the same value.
    """
    minutes: int

    def __post_init__(self):
        if not isinstance(self.minutes, int) or not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidTimeFormat(
                f"Minutes since midnight must be in [0, {MINUTES_PER_DAY}), got {self.minutes!r}"
            )

    @classmethod
    def parse(cls, raw: str) -> "TimeOfDay":
        """
        Parse "H:MM" or "HH:MM" into a TimeOfDay.

        Raises:
            InvalidTimeFormat: If the string is malformed or out of range
        """
        match = _TIME_PATTERN.match(raw.strip()) if isinstance(raw, str) else None
        if match is None:
            raise InvalidTimeFormat(f"Invalid time {raw!r}, expected H:MM or HH:MM")

        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            raise InvalidTimeFormat(f"Time out of range: {raw!r}")

        return cls(hour * 60 + minute)

    @classmethod
    def from_time(cls, value: time) -> "TimeOfDay":
        """Build from a ``datetime.time``, dropping seconds."""
        return cls(value.hour * 60 + value.minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_time(self) -> time:
        return time(hour=self.hour, minute=self.minute)

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


def _coerce_time(value: TimeOfDay | str) -> TimeOfDay:
    if isinstance(value, TimeOfDay):
        return value
    if isinstance(value, time):
        return TimeOfDay.from_time(value)
    return TimeOfDay.parse(value)


@dataclass(frozen=True)
class Period:
    """
    A time-of-day interval within a schedule.

    Invariant: start must be before end.
    """
    start: TimeOfDay
    end: TimeOfDay
    is_available: bool = True
    label: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "start", _coerce_time(self.start))
        object.__setattr__(self, "end", _coerce_time(self.end))

        if self.start >= self.end:
            raise InvalidPeriodRange(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end.minutes - self.start.minutes

    def overlaps(self, other: "Period") -> bool:
        """Check if this period overlaps with another."""
        return overlaps(self, other)

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Schedule:
    """
    An owner-scoped, immutable schedule.

    Invariants:
    - at least one period, and no two periods overlap each other
    - end_date, when present, is not before start_date
    - weekdays (0=Monday, 6=Sunday) only narrow weekly recurrence
    """
    owner_id: str
    name: str
    schedule_type: ScheduleType
    start_date: date
    periods: Tuple[Period, ...]
    end_date: date | None = None
    recurrence: Recurrence = Recurrence.NONE
    is_active: bool = True
    description: str | None = None
    weekdays: FrozenSet[int] = frozenset()
    id: str = field(default_factory=_new_id)

    def __post_init__(self):
        object.__setattr__(self, "periods", tuple(self.periods))
        object.__setattr__(self, "weekdays", frozenset(self.weekdays))

        if not self.periods:
            raise InvalidScheduleError(f"Schedule {self.name!r} must have at least one period")

        if self.end_date is not None and self.end_date < self.start_date:
            raise InvalidScheduleError(
                f"End date {self.end_date} must not be before start date {self.start_date}"
            )

        invalid_days = sorted(day for day in self.weekdays if day not in range(7))
        if invalid_days:
            raise InvalidScheduleError(f"weekdays must be between 0 and 6, got {invalid_days}")

        pair = find_overlapping_pair(self.periods)
        if pair is not None:
            first, second = pair
            raise OverlappingPeriodsInSchedule(
                f"Periods {first} and {second} of schedule {self.name!r} overlap"
            )

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not Recurrence.NONE

    def describe_dates(self) -> str:
        """Human-readable summary of the date rule."""
        if self.end_date is None:
            span = f"{self.start_date.isoformat()}"
            if self.is_recurring:
                span += " onwards"
        else:
            span = f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"

        if self.is_recurring:
            return f"{self.recurrence.value}, {span}"
        return span
