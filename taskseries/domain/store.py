from __future__ import annotations

from typing import Protocol

from .entities import TaskInstance


class SeriesStore(Protocol):
    def list_instances(self, series_id: str) -> list[TaskInstance]:
        """All instances of a series, ascending by date key."""
        ...

    def create_instance(self, template: TaskInstance, date_key: str) -> TaskInstance:
        """Copy ``template`` onto ``date_key`` as a fresh todo instance.

        Raises ``DuplicateInstanceError`` when the series already has that day.
        """
        ...

    def list_all_series_ids(self) -> set[str]:
        ...

    def create_task(self, data: dict) -> TaskInstance:
        ...

    def get_task(self, task_id: str) -> TaskInstance | None:
        ...

    def update_task(self, task_id: str, data: dict) -> TaskInstance | None:
        ...

    def list_unkeyed_recurring(self) -> list[TaskInstance]:
        """Recurring rows missing a series id or a date key."""
        ...

    def assign_series_keys(self, task_id: str, series_id: str, date_key: str) -> TaskInstance | None:
        """Stamp an existing row with its series and day.

        Raises ``DuplicateInstanceError`` when the series already has that day.
        """
        ...
