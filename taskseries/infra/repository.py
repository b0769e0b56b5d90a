from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskseries.domain.datekeys import DEFAULT_TIMEZONE, end_of_day_utc
from taskseries.domain.entities import TaskInstance
from taskseries.domain.enums import TaskPriority, TaskStatus
from taskseries.domain.errors import DuplicateInstanceError, StorageError

from .db import SessionLocal
from .models import TaskModel


def _to_entity(model: TaskModel) -> TaskInstance:
    return TaskInstance(
        id=model.id,
        series_id=model.series_id,
        title=model.title,
        description=model.description,
        status=TaskStatus(model.status),
        priority=TaskPriority(model.priority),
        due_date=model.due_date,
        date_key=model.date_key,
        assigned_to_id=model.assigned_to_id,
        client_id=model.client_id,
        space_id=model.space_id,
        campaign_id=model.campaign_id,
        recurring_pattern=model.recurring_pattern,
        recurring_interval=model.recurring_interval,
        recurring_end_date=model.recurring_end_date,
        schedule_from=model.schedule_from,
        checklist=tuple(model.checklist or ()),
        completed_at=model.completed_at,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def instance_data_from_template(template: TaskInstance, date_key: str, tz_name: str) -> dict:
    """Row values for a new occurrence of ``template``'s series on ``date_key``."""
    return {
        "series_id": template.series_id,
        "title": template.title,
        "description": template.description,
        "status": TaskStatus.TODO.value,
        "priority": template.priority.value,
        "assigned_to_id": template.assigned_to_id,
        "client_id": template.client_id,
        "space_id": template.space_id,
        "campaign_id": template.campaign_id,
        "checklist": [
            {**item, "completed": False} for item in template.checklist if isinstance(item, dict)
        ],
        "recurring_pattern": template.recurring_pattern,
        "recurring_interval": template.recurring_interval,
        "recurring_end_date": template.recurring_end_date,
        "schedule_from": template.schedule_from,
        "date_key": date_key,
        "due_date": end_of_day_utc(date_key, tz_name),
        "completed_at": None,
    }


class SqlSeriesStore:
    """Task rows grouped into recurring series, backed by the ``tasks`` table."""

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        tz_name: str = DEFAULT_TIMEZONE,
    ) -> None:
        self._session_factory = session_factory or SessionLocal
        self._tz_name = tz_name

    def list_instances(self, series_id: str) -> list[TaskInstance]:
        with self._session() as session:
            stmt = (
                select(TaskModel)
                .where(TaskModel.series_id == series_id)
                .order_by(TaskModel.date_key.asc(), TaskModel.created_at.asc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def list_all_series_ids(self) -> set[str]:
        with self._session() as session:
            stmt = (
                select(TaskModel.series_id)
                .where(
                    TaskModel.series_id.is_not(None),
                    TaskModel.recurring_pattern.is_not(None),
                )
                .distinct()
            )
            return set(session.scalars(stmt))

    def list_unkeyed_recurring(self) -> list[TaskInstance]:
        with self._session() as session:
            stmt = (
                select(TaskModel)
                .where(
                    TaskModel.recurring_pattern.is_not(None),
                    or_(TaskModel.series_id.is_(None), TaskModel.date_key.is_(None)),
                )
                .order_by(TaskModel.created_at.asc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def assign_series_keys(self, task_id: str, series_id: str, date_key: str) -> TaskInstance | None:
        with self._session() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None
            task.series_id = series_id
            task.date_key = date_key
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateInstanceError(series_id, date_key) from exc
            session.refresh(task)
            return _to_entity(task)

    def create_instance(self, template: TaskInstance, date_key: str) -> TaskInstance:
        return self.create_task(instance_data_from_template(template, date_key, self._tz_name))

    def get_task(self, task_id: str) -> TaskInstance | None:
        with self._session() as session:
            task = session.get(TaskModel, task_id)
            return _to_entity(task) if task else None

    def create_task(self, data: dict) -> TaskInstance:
        data = dict(data)
        if data.get("date_key") and data.get("due_date") is None:
            data["due_date"] = end_of_day_utc(data["date_key"], self._tz_name)

        with self._session() as session:
            task = TaskModel(**data)
            session.add(task)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                series_id, date_key = data.get("series_id"), data.get("date_key")
                if series_id and date_key and self._has_instance(session, series_id, date_key):
                    raise DuplicateInstanceError(series_id, date_key) from exc
                raise StorageError(f"could not create task: {exc.orig}") from exc
            session.refresh(task)
            return _to_entity(task)

    def update_task(self, task_id: str, data: dict) -> TaskInstance | None:
        with self._session() as session:
            task = session.get(TaskModel, task_id)
            if not task:
                return None
            for key, value in data.items():
                setattr(task, key, value)
            session.commit()
            session.refresh(task)
            return _to_entity(task)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    @staticmethod
    def _has_instance(session: Session, series_id: str, date_key: str) -> bool:
        stmt = select(TaskModel.id).where(
            TaskModel.series_id == series_id,
            TaskModel.date_key == date_key,
        )
        return session.scalar(stmt.limit(1)) is not None
