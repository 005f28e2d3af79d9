"""
In-memory schedule repository.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List

from ..domain.date_matcher import is_active_on
from ..domain.models import Schedule


class InMemoryScheduleRepository:
    """Dict-backed store for Schedule instances, keyed by id."""

    def __init__(self, schedules: List[Schedule] | None = None) -> None:
        self._store: Dict[str, Schedule] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

        for schedule in schedules or []:
            self._store[schedule.id] = schedule

    def add(self, schedule: Schedule) -> None:
        self._store[schedule.id] = schedule

    def get(self, schedule_id: str) -> Schedule | None:
        return self._store.get(schedule_id)

    def list_all(self) -> List[Schedule]:
        return list(self._store.values())

    def delete(self, schedule_id: str) -> None:
        self._store.pop(schedule_id, None)

    def find_by_owner(self, owner_id: str, active_only: bool = False) -> List[Schedule]:
        return [
            schedule
            for schedule in self._store.values()
            if schedule.owner_id == owner_id and (schedule.is_active or not active_only)
        ]

    def find_by_owner_and_date(self, owner_id: str, query_date: date) -> List[Schedule]:
        return [
            schedule
            for schedule in self.find_by_owner(owner_id)
            if is_active_on(schedule, query_date)
        ]

    @contextmanager
    def owner_lock(self, owner_id: str) -> Iterator[None]:
        """Hold the per-owner lock for the duration of the block."""
        with self._locks_guard:
            lock = self._locks.setdefault(owner_id, threading.RLock())

        with lock:
            yield
