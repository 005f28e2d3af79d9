"""
Decides whether a schedule applies to a given calendar date.

The rule depends on the recurrence mode and on whether an end date is set:

    recurrence  end_date   rule
    ----------  --------   ---------------------------------------------
    none        absent     query_date == start_date
    none        present    start_date <= query_date <= end_date
    daily       any        query_date >= start_date (<= end_date if set)
    weekly      any        same weekday as start_date, within range
    monthly     any        same day-of-month as start_date, within range

A non-recurring schedule without an end date is a single-day schedule. It
must never be treated as open-ended.
"""

from datetime import date

from .models import Recurrence, Schedule


def is_active_on(schedule: Schedule, query_date: date) -> bool:
    """
    Check if a schedule applies to ``query_date``.

    The schedule's ``is_active`` flag is not consulted here; filtering on
    it is left to the query engine.
    """
    if schedule.recurrence is Recurrence.NONE:
        if schedule.end_date is None:
            return query_date == schedule.start_date
        return schedule.start_date <= query_date <= schedule.end_date

    if not _within_range(schedule, query_date):
        return False

    if schedule.recurrence is Recurrence.DAILY:
        return True

    if schedule.recurrence is Recurrence.WEEKLY:
        weekdays = schedule.weekdays or {schedule.start_date.weekday()}
        return query_date.weekday() in weekdays

    if schedule.recurrence is Recurrence.MONTHLY:
        # Months without this day (e.g. the 31st in April) are skipped
        return query_date.day == schedule.start_date.day

    raise ValueError(f"Unsupported recurrence: {schedule.recurrence!r}")


def _within_range(schedule: Schedule, query_date: date) -> bool:
    if query_date < schedule.start_date:
        return False
    return schedule.end_date is None or query_date <= schedule.end_date
