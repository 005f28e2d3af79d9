"""
Shared fixtures and builders for schedule tests.
"""

from datetime import date

import pytest

from schedulecheck.domain.builder import ScheduleBuilder
from schedulecheck.domain.query_engine import ScheduleQueryEngine


OWNER = "user-1"


def single_day(name: str, day: str, start: str = "09:00", end: str = "10:00", owner: str = OWNER):
    return (
        ScheduleBuilder.for_owner(owner)
        .named(name)
        .appointment()
        .on(day)
        .add_period(start, end)
        .build()
    )


@pytest.fixture
def engine() -> ScheduleQueryEngine:
    return ScheduleQueryEngine()


@pytest.fixture
def march_15() -> date:
    return date(2025, 3, 15)


@pytest.fixture
def make_single_day():
    """Factory for single-day appointment schedules."""
    return single_day
