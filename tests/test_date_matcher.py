"""
Tests for date applicability of schedules.
"""

from datetime import date, timedelta

from schedulecheck.domain.builder import ScheduleBuilder
from schedulecheck.domain.date_matcher import is_active_on


def _builder() -> ScheduleBuilder:
    return ScheduleBuilder.for_owner("user-1").appointment().add_period("09:00", "10:00")


class TestNonRecurring:
    """Single-day and ranged schedules without recurrence."""

    def test_single_day_only_matches_start_date(self):
        """A schedule without end date is not open-ended."""
        schedule = _builder().on("2025-03-15").build()

        assert is_active_on(schedule, date(2025, 3, 15))
        assert not is_active_on(schedule, date(2025, 3, 16))
        assert not is_active_on(schedule, date(2025, 4, 1))
        assert not is_active_on(schedule, date(2025, 3, 14))

    def test_single_day_never_matches_other_dates(self):
        """Every date other than the start date is rejected."""
        schedule = _builder().on("2025-03-15").build()
        start = date(2025, 1, 1)

        for offset in range(365):
            day = start + timedelta(days=offset)
            assert is_active_on(schedule, day) == (day == date(2025, 3, 15))

    def test_range_is_inclusive(self):
        """Both ends of the range are active."""
        schedule = _builder().between("2025-03-15", "2025-03-17").build()

        assert not is_active_on(schedule, date(2025, 3, 14))
        assert is_active_on(schedule, date(2025, 3, 15))
        assert is_active_on(schedule, date(2025, 3, 16))
        assert is_active_on(schedule, date(2025, 3, 17))
        assert not is_active_on(schedule, date(2025, 3, 18))

    def test_inactive_flag_is_not_consulted(self):
        """Date matching is independent of the is_active flag."""
        schedule = _builder().on("2025-03-15").inactive().build()

        assert is_active_on(schedule, date(2025, 3, 15))


class TestDaily:
    """Daily recurrence."""

    def test_open_ended(self):
        schedule = _builder().from_date("2025-03-15").daily().build()

        assert not is_active_on(schedule, date(2025, 3, 14))
        assert is_active_on(schedule, date(2025, 3, 15))
        assert is_active_on(schedule, date(2026, 1, 1))

    def test_bounded(self):
        schedule = _builder().between("2025-03-15", "2025-03-20").daily().build()

        assert is_active_on(schedule, date(2025, 3, 20))
        assert not is_active_on(schedule, date(2025, 3, 21))


class TestWeekly:
    """Weekly recurrence."""

    def test_same_weekday_as_start(self):
        """2025-03-10 is a Monday."""
        schedule = _builder().from_date("2025-03-10").weekly().build()

        assert is_active_on(schedule, date(2025, 3, 10))
        assert is_active_on(schedule, date(2025, 3, 17))
        assert not is_active_on(schedule, date(2025, 3, 11))
        assert not is_active_on(schedule, date(2025, 3, 3))

    def test_explicit_weekdays(self):
        """Named weekdays replace the start date's weekday."""
        schedule = (
            _builder()
            .between("2025-03-10", "2025-03-31")
            .weekly(["wednesday", "friday"])
            .build()
        )

        assert not is_active_on(schedule, date(2025, 3, 10))  # Monday
        assert is_active_on(schedule, date(2025, 3, 12))  # Wednesday
        assert is_active_on(schedule, date(2025, 3, 14))  # Friday
        assert not is_active_on(schedule, date(2025, 4, 2))  # after end date

    def test_end_date_bounds_recurrence(self):
        schedule = _builder().between("2025-03-10", "2025-03-20").weekly().build()

        assert is_active_on(schedule, date(2025, 3, 17))
        assert not is_active_on(schedule, date(2025, 3, 24))


class TestMonthly:
    """Monthly recurrence."""

    def test_same_day_of_month(self):
        schedule = _builder().from_date("2025-01-15").monthly().build()

        assert is_active_on(schedule, date(2025, 1, 15))
        assert is_active_on(schedule, date(2025, 2, 15))
        assert not is_active_on(schedule, date(2025, 2, 16))
        assert not is_active_on(schedule, date(2024, 12, 15))

    def test_short_months_are_skipped(self):
        """A schedule on the 31st does not fall back to the month's last day."""
        schedule = _builder().from_date("2025-01-31").monthly().build()

        assert is_active_on(schedule, date(2025, 3, 31))
        assert not is_active_on(schedule, date(2025, 4, 30))
        assert not is_active_on(schedule, date(2025, 2, 28))
