"""
Domain layer - Pure business logic without external dependencies.
"""

from .builder import ScheduleBuilder
from .date_matcher import is_active_on
from .models import Period, Recurrence, Schedule, ScheduleType, TimeOfDay, parse_date
from .overlap import find_overlapping_pair, overlaps
from .query_engine import ScheduleMatch, ScheduleQueryEngine, find_active_periods

__all__ = [
    "Period",
    "Recurrence",
    "Schedule",
    "ScheduleBuilder",
    "ScheduleMatch",
    "ScheduleQueryEngine",
    "ScheduleType",
    "TimeOfDay",
    "find_active_periods",
    "find_overlapping_pair",
    "is_active_on",
    "overlaps",
    "parse_date",
]
