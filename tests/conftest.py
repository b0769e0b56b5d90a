from __future__ import annotations

import itertools
import os
from dataclasses import replace
from datetime import date

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from taskseries.domain.datekeys import end_of_day_utc  # noqa: E402
from taskseries.domain.entities import TaskInstance  # noqa: E402
from taskseries.domain.enums import TaskPriority, TaskStatus  # noqa: E402
from taskseries.domain.errors import DuplicateInstanceError, StorageError  # noqa: E402


class FakeStore:
    def __init__(self) -> None:
        self.tasks: list[TaskInstance] = []
        self.failing_series: set[str] = set()
        self._ids = itertools.count(1)

    def seed(self, series_id: str, date_key: str, **overrides) -> TaskInstance:
        data = {
            "series_id": series_id,
            "title": "Post weekly report",
            "description": "Send the report to the client",
            "status": TaskStatus.TODO.value,
            "priority": TaskPriority.NORMAL.value,
            "assigned_to_id": 7,
            "client_id": "client-1",
            "space_id": "space-1",
            "campaign_id": None,
            "checklist": [],
            "recurring_pattern": "daily",
            "recurring_interval": 1,
            "recurring_end_date": None,
            "schedule_from": date(2024, 1, 1),
            "date_key": date_key,
        }
        data.update(overrides)
        return self.create_task(data)

    def list_instances(self, series_id: str) -> list[TaskInstance]:
        if series_id in self.failing_series:
            raise StorageError("connection lost")
        return sorted(
            (task for task in self.tasks if task.series_id == series_id),
            key=lambda task: task.date_key or "",
        )

    def create_instance(self, template: TaskInstance, date_key: str) -> TaskInstance:
        self._check_unique(template.series_id, date_key)
        task = replace(
            template,
            id=f"task-{next(self._ids)}",
            date_key=date_key,
            due_date=end_of_day_utc(date_key),
            status=TaskStatus.TODO,
            completed_at=None,
            checklist=tuple({**item, "completed": False} for item in template.checklist),
        )
        self.tasks.append(task)
        return task

    def list_all_series_ids(self) -> set[str]:
        return {task.series_id for task in self.tasks if task.series_id and task.recurring_pattern}

    def create_task(self, data: dict) -> TaskInstance:
        self._check_unique(data.get("series_id"), data.get("date_key"))
        date_key = data.get("date_key")
        task = TaskInstance(
            id=f"task-{next(self._ids)}",
            series_id=data.get("series_id"),
            title=data.get("title", ""),
            description=data.get("description"),
            status=TaskStatus(data.get("status", "todo")),
            priority=TaskPriority(data.get("priority", "normal")),
            due_date=data.get("due_date") or (end_of_day_utc(date_key) if date_key else None),
            date_key=date_key,
            assigned_to_id=data.get("assigned_to_id"),
            client_id=data.get("client_id"),
            space_id=data.get("space_id"),
            campaign_id=data.get("campaign_id"),
            recurring_pattern=data.get("recurring_pattern"),
            recurring_interval=data.get("recurring_interval", 1),
            recurring_end_date=data.get("recurring_end_date"),
            schedule_from=data.get("schedule_from"),
            checklist=tuple(data.get("checklist") or ()),
            created_at=data.get("created_at"),
        )
        self.tasks.append(task)
        return task

    def list_unkeyed_recurring(self) -> list[TaskInstance]:
        return [
            task
            for task in self.tasks
            if task.recurring_pattern and (not task.series_id or not task.date_key)
        ]

    def assign_series_keys(self, task_id: str, series_id: str, date_key: str) -> TaskInstance | None:
        task = self.get_task(task_id)
        if not task:
            return None
        self._check_unique(series_id, date_key)
        updated = replace(task, series_id=series_id, date_key=date_key)
        self.tasks = [updated if t.id == task_id else t for t in self.tasks]
        return updated

    def get_task(self, task_id: str) -> TaskInstance | None:
        return next((t for t in self.tasks if t.id == task_id), None)

    def update_task(self, task_id: str, data: dict) -> TaskInstance | None:
        task = self.get_task(task_id)
        if not task:
            return None
        updated = replace(
            task,
            status=TaskStatus(data.get("status", task.status.value)),
            completed_at=data.get("completed_at", task.completed_at),
        )
        self.tasks = [updated if t.id == task_id else t for t in self.tasks]
        return updated

    def _check_unique(self, series_id: str | None, date_key: str | None) -> None:
        if not series_id or not date_key:
            return
        if any(t.series_id == series_id and t.date_key == date_key for t in self.tasks):
            raise DuplicateInstanceError(series_id, date_key)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
