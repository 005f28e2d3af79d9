"""
Tests for the schedule query engine.
"""

from datetime import date

import pytest

from schedulecheck.domain.builder import ScheduleBuilder
from schedulecheck.domain.exceptions import InvalidPeriodRange
from schedulecheck.domain.models import Period, TimeOfDay
from schedulecheck.domain.query_engine import find_active_periods


class TestSingleDaySchedules:
    """Single-day schedules must not leak into other dates."""

    def test_doctor_appointment_only_on_its_date(self, engine, make_single_day):
        """A single-day schedule matches its own date and nothing else."""
        schedules = [make_single_day("Doctor Appointment", "2025-03-15")]

        on_date = engine.find_active_periods(schedules, date(2025, 3, 15))
        assert len(on_date) == 1
        assert on_date[0].schedule.name == "Doctor Appointment"

        assert engine.find_active_periods(schedules, date(2025, 3, 16)) == []
        assert engine.find_active_periods(schedules, date(2025, 4, 1)) == []

    def test_not_returned_on_previous_dates(self, engine, make_single_day):
        """Schedules never match dates before their start."""
        schedules = [make_single_day("Future Appointment", "2025-03-15", "14:00", "15:00")]

        assert engine.find_active_periods(schedules, date(2025, 3, 14)) == []

    def test_conference_range(self, engine):
        """A bounded range matches every day from start to end inclusive."""
        schedules = [
            ScheduleBuilder.for_owner("user-1")
            .named("Conference")
            .appointment()
            .from_date("2025-03-15")
            .to("2025-03-17")
            .add_period("09:00", "17:00")
            .build()
        ]

        for day in (15, 16, 17):
            assert len(engine.find_active_periods(schedules, date(2025, 3, day))) == 1
        assert engine.find_active_periods(schedules, date(2025, 3, 18)) == []
        assert engine.find_active_periods(schedules, date(2025, 3, 14)) == []

    def test_multiple_single_day_appointments(self, engine, make_single_day):
        """Each single-day schedule matches only its own date."""
        schedules = [
            make_single_day("Monday Appointment", "2025-03-10"),
            make_single_day("Wednesday Appointment", "2025-03-12", "14:00", "15:00"),
        ]

        monday = engine.find_active_periods(schedules, date(2025, 3, 10))
        assert [match.schedule.name for match in monday] == ["Monday Appointment"]

        assert engine.find_active_periods(schedules, date(2025, 3, 11)) == []

        wednesday = engine.find_active_periods(schedules, date(2025, 3, 12))
        assert [match.schedule.name for match in wednesday] == ["Wednesday Appointment"]


class TestFiltering:
    """Tests for the active flag, availability and window filters."""

    def test_inactive_schedules_are_skipped(self, engine):
        """Inactive schedules never match."""
        schedule = (
            ScheduleBuilder.for_owner("user-1")
            .on("2025-03-15")
            .add_period("09:00", "10:00")
            .inactive()
            .build()
        )

        assert engine.find_active_periods([schedule], date(2025, 3, 15)) == []

    def test_only_available(self, engine, march_15):
        """Periods marked unavailable are dropped on request."""
        schedule = (
            ScheduleBuilder.for_owner("user-1")
            .availability()
            .on(march_15)
            .add_period("09:00", "12:00")
            .add_period("12:00", "13:00", is_available=False, label="Lunch")
            .add_period("13:00", "17:00")
            .build()
        )

        matches = engine.find_active_periods([schedule], march_15, only_available=True)

        assert [str(match.period) for match in matches] == ["09:00 - 12:00", "13:00 - 17:00"]

    def test_window_uses_half_open_overlap(self, engine, march_15, make_single_day):
        """Touching the window boundary is not an overlap."""
        schedules = [make_single_day("Standup", "2025-03-15", "9:00", "10:00")]

        assert engine.find_active_periods(schedules, march_15, window=("10:00", "11:00")) == []
        assert len(engine.find_active_periods(schedules, march_15, window=("9:30", "10:30"))) == 1

    def test_window_accepts_period(self, engine, march_15, make_single_day):
        """A Period can be passed as the window."""
        schedules = [make_single_day("Standup", "2025-03-15")]

        matches = engine.find_active_periods(schedules, march_15, window=Period(start="09:45", end="11:00"))

        assert len(matches) == 1

    def test_invalid_window_raises(self, engine, march_15):
        """A window whose start is not before its end is rejected."""
        with pytest.raises(InvalidPeriodRange):
            engine.find_active_periods([], march_15, window=("11:00", "10:00"))

    def test_order_preserved(self, engine, march_15):
        """Matches keep schedule order, then period order."""
        first = (
            ScheduleBuilder.for_owner("user-1")
            .named("Later")
            .on(march_15)
            .add_period("15:00", "16:00")
            .add_period("08:00", "09:00")
            .build()
        )
        second = (
            ScheduleBuilder.for_owner("user-1")
            .named("Earlier")
            .on(march_15)
            .add_period("07:00", "08:00")
            .build()
        )

        matches = engine.find_active_periods([first, second], march_15)

        assert [(match.schedule.name, str(match.period.start)) for match in matches] == [
            ("Later", "15:00"),
            ("Later", "08:00"),
            ("Earlier", "07:00"),
        ]

    def test_module_level_shortcut(self, march_15, make_single_day):
        """The module-level function uses a default engine."""
        schedules = [make_single_day("Doctor Appointment", "2025-03-15")]

        assert len(find_active_periods(schedules, march_15)) == 1


class TestConflicts:
    """Conflict checks reduce to find_active_periods over a window."""

    def test_overlapping_booking_conflicts(self, engine, march_15, make_single_day):
        """A booking overlapping an existing period conflicts."""
        existing = [make_single_day("Doctor Appointment", "2025-03-15")]

        conflicts = engine.find_conflicts(existing, march_15, Period(start="9:30", end="10:30"))

        assert len(conflicts) == 1
        assert engine.has_conflict(existing, march_15, ("9:30", "10:30"))

    def test_back_to_back_booking_does_not_conflict(self, engine, march_15, make_single_day):
        """Back-to-back bookings do not conflict."""
        existing = [make_single_day("Doctor Appointment", "2025-03-15")]

        assert not engine.has_conflict(existing, march_15, ("10:00", "11:00"))

    def test_other_dates_do_not_conflict(self, engine, make_single_day):
        """Existing periods on other dates do not conflict."""
        existing = [make_single_day("Doctor Appointment", "2025-03-15")]

        assert not engine.has_conflict(existing, date(2025, 3, 16), ("9:00", "10:00"))

    def test_format_display(self, engine, march_15, make_single_day):
        """Matches render as date, period, name and type."""
        existing = [make_single_day("Doctor Appointment", "2025-03-15")]

        match = engine.find_conflicts(existing, march_15, ("9:00", "9:30"))[0]

        assert match.format_display() == "2025-03-15 | 09:00 - 10:00 | Doctor Appointment (appointment)"


class TestFreeWindows:
    """Tests for free window and slot calculation."""

    def test_subtracts_blocking_periods(self, engine, march_15, make_single_day):
        """Blocking periods are cut out of the window."""
        schedules = [
            make_single_day("Meeting", "2025-03-15", "10:00", "11:00"),
            make_single_day("Review", "2025-03-15", "14:00", "15:00"),
        ]

        windows = engine.find_free_windows(schedules, march_15, ("09:00", "17:00"))

        assert [str(window) for window in windows] == [
            "09:00 - 10:00",
            "11:00 - 14:00",
            "15:00 - 17:00",
        ]

    def test_clips_periods_at_window_edges(self, engine, march_15, make_single_day):
        """Periods crossing the window edges are clipped."""
        schedules = [
            make_single_day("Early", "2025-03-15", "08:00", "09:30"),
            make_single_day("Late", "2025-03-15", "16:30", "18:00"),
        ]

        windows = engine.find_free_windows(schedules, march_15, ("09:00", "17:00"))

        assert [str(window) for window in windows] == ["09:30 - 16:30"]

    def test_min_duration_filter(self, engine, march_15, make_single_day):
        """Free windows shorter than the minimum are dropped."""
        schedules = [
            make_single_day("A", "2025-03-15", "09:15", "10:00"),
            make_single_day("B", "2025-03-15", "10:20", "17:00"),
        ]

        windows = engine.find_free_windows(schedules, march_15, ("09:00", "17:00"), min_duration_minutes=30)

        assert windows == []

    def test_availability_periods_do_not_block(self, engine, march_15):
        """Offered availability leaves time free."""
        schedules = [
            ScheduleBuilder.for_owner("user-1")
            .availability()
            .on(march_15)
            .add_period("09:00", "12:00")
            .add_period("12:00", "13:00", is_available=False)
            .build()
        ]

        windows = engine.find_free_windows(schedules, march_15, ("09:00", "17:00"))

        assert [str(window) for window in windows] == ["09:00 - 12:00", "13:00 - 17:00"]

    def test_available_slots(self, engine, march_15, make_single_day):
        """Slots overlapping a blocking period are skipped."""
        schedules = [make_single_day("Meeting", "2025-03-15", "10:00", "11:00")]

        slots = engine.find_available_slots(schedules, march_15, ("09:00", "12:00"), slot_minutes=60)

        assert [str(slot) for slot in slots] == ["09:00 - 10:00", "11:00 - 12:00"]

    def test_available_slots_drop_remainder(self, engine, march_15):
        """A trailing remainder shorter than a slot is dropped."""
        slots = engine.find_available_slots([], march_15, ("09:00", "10:45"), slot_minutes=30)

        assert [slot.start for slot in slots] == [
            TimeOfDay.parse("09:00"),
            TimeOfDay.parse("09:30"),
            TimeOfDay.parse("10:00"),
        ]

    def test_available_slots_requires_positive_length(self, engine, march_15):
        """Slot length must be positive."""
        with pytest.raises(ValueError):
            engine.find_available_slots([], march_15, ("09:00", "10:00"), slot_minutes=0)
