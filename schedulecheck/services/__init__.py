"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_service import ScheduleRepository, ScheduleService

__all__ = ["ScheduleRepository", "ScheduleService"]
