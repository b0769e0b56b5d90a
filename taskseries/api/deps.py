from __future__ import annotations

from taskseries.config import SETTINGS
from taskseries.domain.datekeys import today_date_key
from taskseries.domain.store import SeriesStore
from taskseries.infra.repository import SqlSeriesStore


def get_store() -> SeriesStore:
    return SqlSeriesStore(tz_name=SETTINGS.recurrence_timezone)


def get_today_key() -> str:
    return today_date_key(SETTINGS.recurrence_timezone)
