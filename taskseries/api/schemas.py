"""Request and response models for the recurring series API.

Field names are snake_case in Python and camelCase on the wire, which is the
shape the recurring-tasks page reads.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from taskseries.domain.entities import BackfillReport, SeriesSummary, TaskInstance
from taskseries.domain.enums import RecurrencePattern, TaskPriority, TaskStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChecklistItem(CamelModel):
    id: str
    text: str
    completed: bool = False


class LatestTaskOut(CamelModel):
    id: str
    status: TaskStatus
    due_date: datetime | None
    assigned_to_id: int | None
    client_id: str | None
    space_id: str | None


class SeriesSummaryOut(CamelModel):
    series_id: str
    title: str
    recurring_pattern: str
    recurring_interval: int
    recurring_end_date: date | None
    schedule_from: date
    total_instances: int
    open_instances: int
    completed_instances: int
    last_instance_date_key: str
    next_instance_date_key: str | None
    latest_task: LatestTaskOut | None

    @classmethod
    def from_summary(cls, summary: SeriesSummary) -> SeriesSummaryOut:
        latest = summary.latest_task
        return cls(
            series_id=summary.series_id,
            title=summary.title,
            recurring_pattern=summary.recurring_pattern,
            recurring_interval=summary.recurring_interval,
            recurring_end_date=summary.recurring_end_date,
            schedule_from=summary.schedule_from,
            total_instances=summary.total_instances,
            open_instances=summary.open_instances,
            completed_instances=summary.completed_instances,
            last_instance_date_key=summary.last_instance_date_key,
            next_instance_date_key=summary.next_instance_date_key,
            latest_task=LatestTaskOut(
                id=latest.id,
                status=latest.status,
                due_date=latest.due_date,
                assigned_to_id=latest.assigned_to_id,
                client_id=latest.client_id,
                space_id=latest.space_id,
            ),
        )


class TaskInstanceOut(CamelModel):
    id: str
    series_id: str | None
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    date_key: str | None
    assigned_to_id: int | None
    client_id: str | None
    space_id: str | None
    campaign_id: str | None
    checklist: list[dict]
    recurring_pattern: str | None
    recurring_interval: int
    recurring_end_date: date | None
    schedule_from: date | None
    completed_at: datetime | None

    @classmethod
    def from_instance(cls, task: TaskInstance) -> TaskInstanceOut:
        return cls(
            id=task.id,
            series_id=task.series_id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            due_date=task.due_date,
            date_key=task.date_key,
            assigned_to_id=task.assigned_to_id,
            client_id=task.client_id,
            space_id=task.space_id,
            campaign_id=task.campaign_id,
            checklist=list(task.checklist),
            recurring_pattern=task.recurring_pattern,
            recurring_interval=task.recurring_interval,
            recurring_end_date=task.recurring_end_date,
            schedule_from=task.schedule_from,
            completed_at=task.completed_at,
        )


class SeriesCreate(CamelModel):
    """Definition of a new recurring task; its first occurrence falls on ``schedule_from``."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    priority: TaskPriority = TaskPriority.NORMAL
    assigned_to_id: int | None = None
    client_id: str | None = None
    space_id: str | None = None
    campaign_id: str | None = None
    checklist: list[ChecklistItem] = Field(default_factory=list)
    recurring_pattern: RecurrencePattern
    recurring_interval: int = Field(1, ge=1)
    schedule_from: date
    recurring_end_date: date | None = None
    series_id: str | None = Field(None, max_length=64)

    def to_task_data(self) -> dict:
        data = self.model_dump(exclude={"checklist"})
        data["checklist"] = [item.model_dump() for item in self.checklist]
        return data


class StatusUpdate(CamelModel):
    status: TaskStatus


class BackfillOut(CamelModel):
    today_key: str
    series_processed: int
    tasks_created: int
    series_failed: int
    series_updated: int
    skipped: int
    dry_run: bool

    @classmethod
    def from_report(cls, report: BackfillReport) -> BackfillOut:
        return cls(
            today_key=report.as_of_date_key,
            series_processed=report.series_processed,
            tasks_created=report.tasks_created,
            series_failed=report.series_failed,
            series_updated=report.series_updated,
            skipped=report.skipped,
            dry_run=report.dry_run,
        )
