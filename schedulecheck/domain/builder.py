"""
Fluent construction of immutable Schedule values.

Example:

    schedule = (
        ScheduleBuilder.for_owner("user-1")
        .named("Doctor Appointment")
        .appointment()
        .on("2025-03-15")
        .add_period("09:00", "10:00")
        .build()
    )

All invariants are checked by ``build()``; the builder itself only collects
values.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List

from .exceptions import InvalidScheduleError
from .models import Period, Recurrence, Schedule, ScheduleType, TimeOfDay, parse_date

_DAY_MAP = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


def _weekday_number(day: int | str) -> int:
    if isinstance(day, int):
        return day
    try:
        return _DAY_MAP[day.strip().lower()]
    except KeyError:
        raise InvalidScheduleError(f"Unknown weekday: {day!r}") from None


class ScheduleBuilder:
    """Collects schedule attributes through chained calls."""

    def __init__(self, owner_id: str):
        self._owner_id = owner_id
        self._name: str | None = None
        self._description: str | None = None
        self._schedule_type = ScheduleType.CUSTOM
        self._start_date: date | None = None
        self._end_date: date | None = None
        self._recurrence = Recurrence.NONE
        self._weekdays: List[int] = []
        self._periods: List[Period] = []
        self._is_active = True
        self._schedule_id: str | None = None

    @classmethod
    def for_owner(cls, owner_id: str) -> "ScheduleBuilder":
        return cls(owner_id)

    def with_id(self, schedule_id: str) -> "ScheduleBuilder":
        self._schedule_id = schedule_id
        return self

    def named(self, name: str) -> "ScheduleBuilder":
        self._name = name
        return self

    def description(self, text: str) -> "ScheduleBuilder":
        self._description = text
        return self

    # -- schedule type --------------------------------------------------

    def of_type(self, schedule_type: ScheduleType | str) -> "ScheduleBuilder":
        self._schedule_type = ScheduleType(schedule_type)
        return self

    def appointment(self) -> "ScheduleBuilder":
        return self.of_type(ScheduleType.APPOINTMENT)

    def blocked(self) -> "ScheduleBuilder":
        return self.of_type(ScheduleType.BLOCKED)

    def availability(self) -> "ScheduleBuilder":
        return self.of_type(ScheduleType.AVAILABILITY)

    def custom(self) -> "ScheduleBuilder":
        return self.of_type(ScheduleType.CUSTOM)

    # -- dates ----------------------------------------------------------

    def on(self, day: date | str) -> "ScheduleBuilder":
        """Single-day schedule: start date only, no end date."""
        self._start_date = parse_date(day)
        self._end_date = None
        return self

    def from_date(self, day: date | str) -> "ScheduleBuilder":
        self._start_date = parse_date(day)
        return self

    def to(self, day: date | str) -> "ScheduleBuilder":
        self._end_date = parse_date(day)
        return self

    def between(self, start: date | str, end: date | str) -> "ScheduleBuilder":
        return self.from_date(start).to(end)

    # -- recurrence -----------------------------------------------------

    def daily(self) -> "ScheduleBuilder":
        self._recurrence = Recurrence.DAILY
        return self

    def weekly(self, days: Iterable[int | str] = ()) -> "ScheduleBuilder":
        """
        Repeat every week, on the start date's weekday unless ``days``
        (names like "monday" or numbers with 0=Monday) are given.
        """
        self._recurrence = Recurrence.WEEKLY
        self._weekdays = [_weekday_number(day) for day in days]
        return self

    def monthly(self) -> "ScheduleBuilder":
        self._recurrence = Recurrence.MONTHLY
        return self

    # -- periods --------------------------------------------------------

    def add_period(
        self,
        start: TimeOfDay | str,
        end: TimeOfDay | str,
        is_available: bool = True,
        label: str | None = None,
    ) -> "ScheduleBuilder":
        self._periods.append(
            Period(start=start, end=end, is_available=is_available, label=label)
        )
        return self

    def add_periods(self, periods: Iterable[Period]) -> "ScheduleBuilder":
        self._periods.extend(periods)
        return self

    def inactive(self) -> "ScheduleBuilder":
        self._is_active = False
        return self

    def build(self) -> Schedule:
        """
        Produce a validated Schedule.

        Raises:
            InvalidScheduleError: If the start date is missing or an
                invariant of Schedule is violated
        """
        if not self._owner_id:
            raise InvalidScheduleError("A schedule needs an owner")
        if self._start_date is None:
            raise InvalidScheduleError("A schedule needs a start date; call on() or from_date()")

        name = self._name or self._schedule_type.value.capitalize()
        extra = {"id": self._schedule_id} if self._schedule_id else {}

        return Schedule(
            owner_id=self._owner_id,
            name=name,
            schedule_type=self._schedule_type,
            start_date=self._start_date,
            end_date=self._end_date,
            recurrence=self._recurrence,
            periods=tuple(self._periods),
            is_active=self._is_active,
            description=self._description,
            weekdays=frozenset(self._weekdays),
            **extra,
        )
