"""Exceptions raised by the recurring task engine."""

from __future__ import annotations


class TaskSeriesError(Exception):
    """Base class for all engine errors."""


class ValidationError(TaskSeriesError):
    """A recurrence rule or task payload is malformed."""


class StorageError(TaskSeriesError):
    """The task store failed to read or write."""


class DuplicateInstanceError(StorageError):
    """An instance for this series and date key already exists."""

    def __init__(self, series_id: str, date_key: str) -> None:
        super().__init__(f"instance {date_key} already exists in series {series_id}")
        self.series_id = series_id
        self.date_key = date_key
