from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional

from .entities import TaskInstance
from .enums import RecurrencePattern
from .errors import ValidationError


@dataclass(frozen=True)
class RecurrenceRule:
    """How a series repeats: every ``interval`` ``pattern`` counted from ``schedule_from``."""

    pattern: RecurrencePattern
    interval: int
    schedule_from: date
    end_date: Optional[date] = None

    def __post_init__(self) -> None:
        try:
            pattern = RecurrencePattern(self.pattern)
        except ValueError as exc:
            raise ValidationError(f"unknown recurrence pattern: {self.pattern!r}") from exc
        object.__setattr__(self, "pattern", pattern)

        if isinstance(self.interval, bool) or not isinstance(self.interval, int):
            raise ValidationError(f"interval must be an integer, got {self.interval!r}")
        if self.interval < 1:
            raise ValidationError(f"interval must be >= 1, got {self.interval}")
        if not isinstance(self.schedule_from, date):
            raise ValidationError("schedule_from is required")
        if self.end_date is not None and self.end_date <= self.schedule_from:
            raise ValidationError(
                f"end_date {self.end_date} must be after schedule_from {self.schedule_from}"
            )

    @classmethod
    def from_instance(cls, task: TaskInstance) -> RecurrenceRule:
        if not task.recurring_pattern:
            raise ValidationError(f"task {task.id} is not recurring")
        return cls(
            pattern=task.recurring_pattern,
            interval=task.recurring_interval,
            schedule_from=task.schedule_from,
            end_date=task.recurring_end_date,
        )


def stable_series_id(data: Mapping[str, Any]) -> str:
    """Deterministic series id for a recurring definition.

    The same title, owner, placement and cadence always hash to the same id,
    so submitting a definition twice lands in one series.
    """
    parts = [
        data.get("title"),
        data.get("assigned_to_id"),
        data.get("client_id"),
        data.get("space_id"),
        data.get("campaign_id"),
        data.get("recurring_pattern"),
        data.get("recurring_interval"),
        data.get("schedule_from"),
    ]
    key = "|".join("" if part is None else str(part) for part in parts)
    return "rec_" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
