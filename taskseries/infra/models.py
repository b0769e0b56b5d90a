from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, Index, Integer, String, Text, UniqueConstraint

from .db import Base


def utcnow() -> datetime:
    return datetime.utcnow()


def new_id() -> str:
    return str(uuid.uuid4())


class TaskModel(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        UniqueConstraint("series_id", "date_key", name="uq_tasks_series_date_key"),
        Index("ix_tasks_series_date_key", "series_id", "date_key"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    series_id = Column(String(64), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="todo", index=True)
    priority = Column(String(20), nullable=False, default="normal")
    due_date = Column(DateTime, nullable=True, index=True)
    date_key = Column(String(10), nullable=True)
    assigned_to_id = Column(Integer, nullable=True, index=True)
    client_id = Column(String(64), nullable=True, index=True)
    space_id = Column(String(64), nullable=True, index=True)
    campaign_id = Column(String(64), nullable=True)
    checklist = Column(JSON, nullable=False, default=list)
    recurring_pattern = Column(String(20), nullable=True)
    recurring_interval = Column(Integer, nullable=False, default=1)
    recurring_end_date = Column(Date, nullable=True)
    schedule_from = Column(Date, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
