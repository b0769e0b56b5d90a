from __future__ import annotations

import logging
from datetime import datetime

from taskseries.domain.datekeys import format_date_key
from taskseries.domain.entities import TaskInstance
from taskseries.domain.enums import TaskPriority, TaskStatus
from taskseries.domain.errors import DuplicateInstanceError, ValidationError
from taskseries.domain.recurrence import RecurrenceRule, stable_series_id
from taskseries.domain.store import SeriesStore

logger = logging.getLogger(__name__)

COPIED_FIELDS = (
    "title",
    "description",
    "priority",
    "assigned_to_id",
    "client_id",
    "space_id",
    "campaign_id",
    "checklist",
)


class TaskService:
    def __init__(self, store: SeriesStore) -> None:
        self._store = store

    def get_task(self, task_id: str) -> TaskInstance | None:
        return self._store.get_task(task_id)

    def list_instances(self, series_id: str) -> list[TaskInstance]:
        return self._store.list_instances(series_id)

    def start_series(self, data: dict) -> TaskInstance:
        """Create the first occurrence of a recurring task, seeding its series id."""
        normalized = self._normalize_data(data)
        title = (normalized.get("title") or "").strip()
        if not title:
            raise ValidationError("title is required")

        rule = RecurrenceRule(
            pattern=normalized.get("recurring_pattern"),
            interval=normalized.get("recurring_interval", 1),
            schedule_from=normalized.get("schedule_from"),
            end_date=normalized.get("recurring_end_date"),
        )

        payload = {key: normalized[key] for key in COPIED_FIELDS if key in normalized}
        payload.update({
            "title": title,
            "status": TaskStatus.TODO.value,
            "recurring_pattern": rule.pattern.value,
            "recurring_interval": rule.interval,
            "recurring_end_date": rule.end_date,
            "schedule_from": rule.schedule_from,
            "date_key": format_date_key(rule.schedule_from),
        })
        payload["series_id"] = normalized.get("series_id") or stable_series_id(payload)

        try:
            task = self._store.create_task(payload)
        except DuplicateInstanceError:
            existing = self._find_instance(payload["series_id"], payload["date_key"])
            if existing is None:
                raise
            return existing

        logger.info("Started series %s (%s every %s)", task.series_id, rule.pattern, rule.interval)
        return task

    def update_status(self, task_id: str, status: TaskStatus | str) -> TaskInstance | None:
        try:
            status = TaskStatus(status)
        except ValueError as exc:
            raise ValidationError(f"unknown status: {status!r}") from exc

        data: dict = {"status": status.value}
        if status == TaskStatus.COMPLETED:
            data["completed_at"] = datetime.utcnow()
        else:
            data["completed_at"] = None
        return self._store.update_task(task_id, data)

    def mark_completed(self, task_id: str) -> TaskInstance | None:
        return self.update_status(task_id, TaskStatus.COMPLETED)

    def _find_instance(self, series_id: str, date_key: str) -> TaskInstance | None:
        return next(
            (task for task in self._store.list_instances(series_id) if task.date_key == date_key),
            None,
        )

    def _normalize_data(self, data: dict) -> dict:
        normalized = dict(data)
        priority = normalized.get("priority")
        if priority is not None:
            try:
                normalized["priority"] = TaskPriority(priority).value
            except ValueError as exc:
                raise ValidationError(f"unknown priority: {priority!r}") from exc
        return normalized
