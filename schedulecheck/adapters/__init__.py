"""
Adapters layer - Schedule storage implementations.
"""

from .file_repository import JsonFileScheduleRepository
from .memory_repository import InMemoryScheduleRepository

__all__ = ["InMemoryScheduleRepository", "JsonFileScheduleRepository"]
