"""
Application services for schedule queries and conflict-checked inserts.

The service coordinates fetching candidate schedules via a repository
adapter and delegates the actual matching to the domain-level
``ScheduleQueryEngine``. The repository dependency is expressed as a simple
protocol so it can be stubbed in tests or swapped for a real database.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import ContextManager, Iterable, Iterator, List, Protocol, Sequence

import pendulum

from ..domain.date_matcher import is_active_on
from ..domain.exceptions import ScheduleConflict
from ..domain.models import Period, Schedule, ScheduleType, TimeOfDay
from ..domain.query_engine import ScheduleMatch, ScheduleQueryEngine, Window, is_blocking

logger = logging.getLogger(__name__)

# Two recurring schedules that ever share a day do so within two years.
RECURRENCE_HORIZON_DAYS = 2 * 366


class ScheduleRepository(Protocol):
    """
    Protocol describing the storage behaviour needed by the service.

    ``find_by_owner_and_date`` may filter on the storage side, but must
    return exactly ``find_by_owner`` filtered through ``is_active_on``.

    Callers that check for conflicts before inserting must hold
    ``owner_lock`` for the whole read-check-write sequence; otherwise two
    concurrent checks can both see no conflict and both insert.
    """

    def find_by_owner(self, owner_id: str, active_only: bool = False) -> List[Schedule]:
        """Return all schedules of an owner, in insertion order."""

    def find_by_owner_and_date(self, owner_id: str, query_date: date) -> List[Schedule]:
        """Return the owner's schedules that apply to ``query_date``."""

    def add(self, schedule: Schedule) -> None:
        """Persist a new schedule."""

    def owner_lock(self, owner_id: str) -> ContextManager[None]:
        """Serialize writers for one owner."""


class ScheduleService:
    """
    Orchestrates repository reads and engine queries.

    Dependency inversion toward a protocol makes it easy to plug in the
    in-memory or file-backed repository, or a stub in tests.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        query_engine: ScheduleQueryEngine | None = None,
        ignore_availability: bool = True,
    ) -> None:
        self._repository = repository
        self._engine = query_engine or ScheduleQueryEngine()
        self._ignore_availability = ignore_availability

    def schedules_on(self, owner_id: str, query_date: date) -> List[Schedule]:
        """Active schedules of an owner that apply to a date."""
        return [
            schedule
            for schedule in self._repository.find_by_owner_and_date(owner_id, query_date)
            if schedule.is_active
        ]

    def active_periods(
        self,
        owner_id: str,
        query_date: date,
        window: Window | None = None,
        only_available: bool = False,
    ) -> List[ScheduleMatch]:
        candidates = self._repository.find_by_owner_and_date(owner_id, query_date)
        return self._engine.find_active_periods(
            candidates,
            query_date,
            window=window,
            only_available=only_available,
        )

    def find_conflicts(
        self,
        schedule: Schedule,
        dates: Iterable[date] | None = None,
    ) -> List[ScheduleMatch]:
        """
        Find existing periods of the same owner that a schedule would overlap.

        Args:
            schedule: The proposed schedule
            dates: Dates to check. Defaults to every day of a bounded
                schedule, the start date of a single-day schedule, and for
                an open-ended recurring schedule the days it shares with
                existing schedules

        Returns:
            List of conflicting ScheduleMatch objects, ordered by date
        """
        if self._ignore_availability and schedule.schedule_type is ScheduleType.AVAILABILITY:
            return []

        check_dates = list(dates) if dates is not None else self._conflict_dates(schedule)
        conflicts: List[ScheduleMatch] = []

        for check_date in check_dates:
            if not is_active_on(schedule, check_date):
                continue

            existing = self._conflict_candidates(schedule, check_date)
            if not existing:
                continue

            for period in schedule.periods:
                conflicts.extend(self._engine.find_conflicts(existing, check_date, period))

        return conflicts

    def create_schedule(self, schedule: Schedule) -> Schedule:
        """
        Persist a schedule unless it conflicts with an existing one.

        The conflict check and the insert happen under the owner's lock.

        Raises:
            ScheduleConflict: If the schedule overlaps an existing schedule
        """
        with self._repository.owner_lock(schedule.owner_id):
            conflicts = self.find_conflicts(schedule)
            if conflicts:
                logger.warning(
                    "Schedule %r for owner %s conflicts with %d existing period(s)",
                    schedule.name,
                    schedule.owner_id,
                    len(conflicts),
                )
                names = ", ".join(sorted({match.schedule.name for match in conflicts}))
                raise ScheduleConflict(
                    f"Schedule {schedule.name!r} conflicts with: {names}",
                    conflicts=conflicts,
                )

            self._repository.add(schedule)

        logger.info("Created schedule %s (%r) for owner %s", schedule.id, schedule.name, schedule.owner_id)
        return schedule

    def is_available(
        self,
        owner_id: str,
        query_date: date,
        start: TimeOfDay | str,
        end: TimeOfDay | str,
    ) -> bool:
        """True when no blocking period of the owner overlaps ``[start, end)``."""
        matches = self.active_periods(owner_id, query_date, window=(start, end))
        return not any(is_blocking(match.schedule, match.period) for match in matches)

    def free_windows(
        self,
        owner_id: str,
        query_date: date,
        start: TimeOfDay | str,
        end: TimeOfDay | str,
        min_duration_minutes: int = 0,
    ) -> List[Period]:
        candidates = self._repository.find_by_owner_and_date(owner_id, query_date)
        return self._engine.find_free_windows(
            candidates,
            query_date,
            (start, end),
            min_duration_minutes=min_duration_minutes,
        )

    def available_slots(
        self,
        owner_id: str,
        query_date: date,
        start: TimeOfDay | str,
        end: TimeOfDay | str,
        slot_minutes: int,
    ) -> List[Period]:
        candidates = self._repository.find_by_owner_and_date(owner_id, query_date)
        return self._engine.find_available_slots(
            candidates,
            query_date,
            (start, end),
            slot_minutes=slot_minutes,
        )

    def _conflict_candidates(self, schedule: Schedule, check_date: date) -> Sequence[Schedule]:
        return [
            existing
            for existing in self._repository.find_by_owner_and_date(schedule.owner_id, check_date)
            if self._can_conflict(schedule, existing)
        ]

    def _can_conflict(self, schedule: Schedule, existing: Schedule) -> bool:
        if existing.id == schedule.id or not existing.is_active:
            return False
        return not (
            self._ignore_availability
            and existing.schedule_type is ScheduleType.AVAILABILITY
        )

    def _conflict_dates(self, schedule: Schedule) -> List[date]:
        """
        Dates on which a proposed schedule has to be checked.

        Bounded schedules are checked on every day of their range. An
        open-ended recurring schedule has no last day, so its dates come
        from the existing schedules it could meet: every day they cover on
        or after its start, or the recurrence horizon when both recur
        without an end date.
        """
        if schedule.end_date is not None:
            return list(_days(schedule.start_date, schedule.end_date))
        if not schedule.is_recurring:
            return [schedule.start_date]

        dates = set()
        for existing in self._repository.find_by_owner(schedule.owner_id, active_only=True):
            if not self._can_conflict(schedule, existing):
                continue

            first = max(schedule.start_date, existing.start_date)
            if existing.end_date is not None:
                last = existing.end_date
            elif existing.is_recurring:
                last = pendulum.date(first.year, first.month, first.day).add(days=RECURRENCE_HORIZON_DAYS)
            else:
                last = existing.start_date

            dates.update(
                day for day in _days(first, last)
                if is_active_on(existing, day) and is_active_on(schedule, day)
            )

        return sorted(dates)


def _days(first: date, last: date) -> Iterator[date]:
    """Yield every day from ``first`` to ``last``, both inclusive."""
    current = pendulum.date(first.year, first.month, first.day)
    while current <= last:
        yield current
        current = current.add(days=1)
