"""
Core query logic over collections of schedules.

This is the heart of the application - pure domain logic without any
external dependencies (no storage, no I/O). Both "is this date free?" and
"does this new booking conflict with an existing one?" reduce to
``find_active_periods``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Sequence, Tuple, Union

from .date_matcher import is_active_on
from .models import Period, Schedule, ScheduleType, TimeOfDay
from .overlap import overlaps

logger = logging.getLogger(__name__)

Window = Union[Period, Tuple[Union[TimeOfDay, str], Union[TimeOfDay, str]]]


@dataclass(frozen=True)
class ScheduleMatch:
    """
    A period of a schedule that matched a query.
    """
    schedule: Schedule
    period: Period
    on_date: date

    def format_display(self) -> str:
        """
        Format the match for display.
        Format: YYYY-MM-DD | HH:MM - HH:MM | name (type)
        """
        label = f" [{self.period.label}]" if self.period.label else ""
        return (
            f"{self.on_date.isoformat()} | {self.period}{label} | "
            f"{self.schedule.name} ({self.schedule.schedule_type.value})"
        )


def as_window(window: Window) -> Period:
    """
    Normalize a ``(start, end)`` pair into a Period.

    Raises:
        InvalidPeriodRange: If start is not before end
        InvalidTimeFormat: If a bound is a malformed time string
    """
    if isinstance(window, Period):
        return window
    start, end = window
    return Period(start=start, end=end)


def is_blocking(schedule: Schedule, period: Period) -> bool:
    """A period blocks time unless it is offered availability."""
    return schedule.schedule_type is not ScheduleType.AVAILABILITY or not period.is_available


class ScheduleQueryEngine:
    """
    Answers date and time window questions over a collection of schedules.

    Algorithm for ``find_active_periods``:
    1. Keep schedules flagged as active
    2. Keep schedules that apply to the query date
    3. Optionally keep only periods marked available
    4. Optionally keep only periods overlapping the time window

    Input order is preserved: schedules first, then periods within each
    schedule. Nothing is sorted implicitly.
    """

    def find_active_periods(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        window: Window | None = None,
        only_available: bool = False,
    ) -> List[ScheduleMatch]:
        """
        Find the periods active on a date, optionally within a time window.

        Args:
            schedules: Candidate schedules, typically from a repository
            query_date: The calendar date to evaluate
            window: Optional ``(start, end)`` or Period to intersect with
            only_available: Keep only periods marked available

        Returns:
            List of ScheduleMatch objects in input order
        """
        window_period = as_window(window) if window is not None else None
        matches: List[ScheduleMatch] = []
        candidates = 0

        for schedule in schedules:
            candidates += 1
            if not schedule.is_active:
                continue
            if not is_active_on(schedule, query_date):
                continue

            for period in schedule.periods:
                if only_available and not period.is_available:
                    continue
                if window_period is not None and not overlaps(period, window_period):
                    continue
                matches.append(
                    ScheduleMatch(schedule=schedule, period=period, on_date=query_date)
                )

        logger.debug(
            "Matched %d period(s) from %d schedule(s) on %s",
            len(matches),
            candidates,
            query_date,
        )
        return matches

    def find_conflicts(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        period: Window,
    ) -> List[ScheduleMatch]:
        """Return existing periods overlapping ``period`` on ``query_date``."""
        return self.find_active_periods(
            schedules,
            query_date,
            window=as_window(period),
            only_available=False,
        )

    def has_conflict(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        period: Window,
    ) -> bool:
        return bool(self.find_conflicts(schedules, query_date, period))

    def find_free_windows(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        window: Window,
        min_duration_minutes: int = 0,
    ) -> List[Period]:
        """
        Subtract blocking periods from a window, yielding free periods.

        Example:
        Window: 09:00 - 17:00
        Blocking: [10:00-11:00, 14:00-15:00]
        Result: [09:00-10:00, 11:00-14:00, 15:00-17:00]
        """
        window_period = as_window(window)
        busy = self._blocking_periods(schedules, query_date, window_period)

        free_periods: List[Period] = []
        current_start = window_period.start

        for blocking in sorted(busy, key=lambda p: p.start):
            # Clip blocking period to the window
            clipped_start = max(blocking.start, window_period.start)
            clipped_end = min(blocking.end, window_period.end)

            if current_start < clipped_start:
                free_periods.append(Period(start=current_start, end=clipped_start))

            current_start = max(current_start, clipped_end)

        if current_start < window_period.end:
            free_periods.append(Period(start=current_start, end=window_period.end))

        return [
            period for period in free_periods
            if period.duration_minutes() >= min_duration_minutes
        ]

    def find_available_slots(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        window: Window,
        slot_minutes: int,
    ) -> List[Period]:
        """
        Cut the window into back-to-back slots and keep the unblocked ones.

        A trailing remainder shorter than ``slot_minutes`` is dropped.
        """
        if slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be greater than zero, got {slot_minutes}")

        window_period = as_window(window)
        busy = self._blocking_periods(schedules, query_date, window_period)

        slots: List[Period] = []
        start = window_period.start.minutes

        while start + slot_minutes <= window_period.end.minutes:
            slot = Period(start=TimeOfDay(start), end=TimeOfDay(start + slot_minutes))
            if not any(overlaps(slot, blocking) for blocking in busy):
                slots.append(slot)
            start += slot_minutes

        return slots

    def _blocking_periods(
        self,
        schedules: Iterable[Schedule],
        query_date: date,
        window: Period,
    ) -> Sequence[Period]:
        return [
            match.period
            for match in self.find_active_periods(schedules, query_date, window=window)
            if is_blocking(match.schedule, match.period)
        ]


_default_engine = ScheduleQueryEngine()


def find_active_periods(
    schedules: Iterable[Schedule],
    query_date: date,
    window: Window | None = None,
    only_available: bool = False,
) -> List[ScheduleMatch]:
    """Module-level shortcut for ``ScheduleQueryEngine.find_active_periods``."""
    return _default_engine.find_active_periods(
        schedules,
        query_date,
        window=window,
        only_available=only_available,
    )
