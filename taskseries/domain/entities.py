from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from .enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class TaskInstance:
    id: str
    series_id: str | None
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    date_key: str | None
    assigned_to_id: int | None
    client_id: str | None
    space_id: str | None
    campaign_id: str | None
    recurring_pattern: str | None
    recurring_interval: int
    recurring_end_date: Optional[date]
    schedule_from: Optional[date]
    checklist: tuple[dict, ...] = ()
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


@dataclass(frozen=True)
class LatestTaskSnapshot:
    id: str
    status: TaskStatus
    due_date: Optional[datetime]
    assigned_to_id: int | None
    client_id: str | None
    space_id: str | None


@dataclass(frozen=True)
class SeriesSummary:
    series_id: str
    title: str
    recurring_pattern: str
    recurring_interval: int
    recurring_end_date: Optional[date]
    schedule_from: date
    total_instances: int
    open_instances: int
    completed_instances: int
    last_instance_date_key: str
    next_instance_date_key: str | None
    latest_task: LatestTaskSnapshot


@dataclass(frozen=True)
class BackfillResult:
    series_id: str
    created: int


@dataclass(frozen=True)
class BackfillReport:
    as_of_date_key: str
    series_processed: int
    tasks_created: int
    series_failed: int = 0
    series_updated: int = 0
    skipped: int = 0
    dry_run: bool = False
