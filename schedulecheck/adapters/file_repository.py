"""
JSON file backed schedule repository.

Document layout:

    {
      "schedules": [
        {
          "id": "...",
          "owner_id": "user-1",
          "name": "Doctor Appointment",
          "schedule_type": "appointment",
          "start_date": "2025-03-15",
          "end_date": null,
          "recurrence": "none",
          "weekdays": [],
          "is_active": true,
          "description": null,
          "periods": [
            {"start": "09:00", "end": "10:00", "is_available": true, "label": null}
          ]
        }
      ]
    }
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..domain.exceptions import RepositoryError, ScheduleError
from ..domain.models import Period, Recurrence, Schedule, ScheduleType, parse_date
from .memory_repository import InMemoryScheduleRepository

logger = logging.getLogger(__name__)


class PeriodRecord(BaseModel):
    """Stored representation of a Period."""
    start: str
    end: str
    is_available: bool = True
    label: Optional[str] = None

    def to_domain(self) -> Period:
        return Period(
            start=self.start,
            end=self.end,
            is_available=self.is_available,
            label=self.label,
        )

    @classmethod
    def from_domain(cls, period: Period) -> "PeriodRecord":
        return cls(
            start=str(period.start),
            end=str(period.end),
            is_available=period.is_available,
            label=period.label,
        )


class ScheduleRecord(BaseModel):
    """Stored representation of a Schedule."""
    id: str
    owner_id: str
    name: str
    schedule_type: ScheduleType = ScheduleType.CUSTOM
    start_date: str
    end_date: Optional[str] = None
    recurrence: Recurrence = Recurrence.NONE
    weekdays: List[int] = Field(default_factory=list)
    is_active: bool = True
    description: Optional[str] = None
    periods: List[PeriodRecord] = Field(default_factory=list)

    def to_domain(self) -> Schedule:
        return Schedule(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            schedule_type=self.schedule_type,
            start_date=parse_date(self.start_date),
            end_date=parse_date(self.end_date) if self.end_date else None,
            recurrence=self.recurrence,
            weekdays=frozenset(self.weekdays),
            is_active=self.is_active,
            description=self.description,
            periods=tuple(record.to_domain() for record in self.periods),
        )

    @classmethod
    def from_domain(cls, schedule: Schedule) -> "ScheduleRecord":
        return cls(
            id=schedule.id,
            owner_id=schedule.owner_id,
            name=schedule.name,
            schedule_type=schedule.schedule_type,
            start_date=schedule.start_date.isoformat(),
            end_date=schedule.end_date.isoformat() if schedule.end_date else None,
            recurrence=schedule.recurrence,
            weekdays=sorted(schedule.weekdays),
            is_active=schedule.is_active,
            description=schedule.description,
            periods=[PeriodRecord.from_domain(period) for period in schedule.periods],
        )


class JsonFileScheduleRepository(InMemoryScheduleRepository):
    """
    Repository that keeps schedules in memory and writes them through to a
    JSON document on every change.

    With ``strict=False`` invalid records are skipped with a warning instead
    of failing the whole load.
    """

    def __init__(self, path: Path, strict: bool = True) -> None:
        super().__init__()
        self.path = Path(path)
        self.strict = strict
        self._load()

    def add(self, schedule: Schedule) -> None:
        staged = dict(self._store)
        staged[schedule.id] = schedule
        self._save(staged.values())
        super().add(schedule)

    def delete(self, schedule_id: str) -> None:
        if schedule_id not in self._store:
            return
        staged = {key: value for key, value in self._store.items() if key != schedule_id}
        self._save(staged.values())
        super().delete(schedule_id)

    def _load(self) -> None:
        """Load schedules from the JSON document if it exists."""
        if not self.path.exists():
            logger.debug("Schedule file %s does not exist yet, starting empty", self.path)
            return

        try:
            with open(self.path, "r", encoding="utf-8") as file_handle:
                data = json.load(file_handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise RepositoryError(f"Could not read schedule file {self.path}: {exc}") from exc

        raw_records = data.get("schedules", []) if isinstance(data, dict) else data
        if not isinstance(raw_records, list):
            raise RepositoryError(f"Schedule file {self.path} must contain a list of schedules")

        for index, raw in enumerate(raw_records):
            try:
                schedule = ScheduleRecord.model_validate(raw).to_domain()
            except (ValidationError, ScheduleError) as exc:
                if self.strict:
                    raise RepositoryError(
                        f"Invalid schedule record #{index} in {self.path}: {exc}"
                    ) from exc
                logger.warning("Skipping invalid schedule record #%d in %s: %s", index, self.path, exc)
                continue

            self._store[schedule.id] = schedule

        logger.debug("Loaded %d schedule(s) from %s", len(self._store), self.path)

    def _save(self, schedules: Iterable[Schedule]) -> None:
        """
        Write schedules to disk, replacing the document atomically.

        The in-memory store is only updated by callers after this returns,
        so a failed write leaves both the file and the store unchanged.
        """
        payload = {
            "schedules": [
                ScheduleRecord.from_domain(schedule).model_dump(mode="json")
                for schedule in schedules
            ]
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as file_handle:
                json.dump(payload, file_handle, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise RepositoryError(f"Could not write schedule file {self.path}: {exc}") from exc
