from __future__ import annotations

import logging

from taskseries.domain.entities import LatestTaskSnapshot, SeriesSummary, TaskInstance
from taskseries.domain.errors import ValidationError
from taskseries.domain.recurrence import RecurrenceRule
from taskseries.domain.store import SeriesStore

from .materializer import next_occurrence_after

logger = logging.getLogger(__name__)


class SeriesSummaryBuilder:
    def __init__(self, store: SeriesStore) -> None:
        self._store = store

    def build_summary(self, series_id: str) -> SeriesSummary | None:
        instances = [task for task in self._store.list_instances(series_id) if task.date_key]
        if not instances:
            return None
        return _summarize(series_id, instances)

    def build_all_summaries(self) -> list[SeriesSummary]:
        summaries = []
        for series_id in self._store.list_all_series_ids():
            try:
                summary = self.build_summary(series_id)
            except ValidationError:
                logger.exception("Skipping series %s with a malformed recurrence rule", series_id)
                continue
            if summary is not None:
                summaries.append(summary)
        summaries.sort(key=lambda item: (item.title, item.series_id))
        return summaries


def _summarize(series_id: str, instances: list[TaskInstance]) -> SeriesSummary:
    latest = instances[-1]
    rule = RecurrenceRule.from_instance(latest)
    completed = sum(1 for task in instances if task.is_completed)

    return SeriesSummary(
        series_id=series_id,
        title=latest.title,
        recurring_pattern=rule.pattern.value,
        recurring_interval=rule.interval,
        recurring_end_date=rule.end_date,
        schedule_from=rule.schedule_from,
        total_instances=len(instances),
        open_instances=len(instances) - completed,
        completed_instances=completed,
        last_instance_date_key=latest.date_key,
        next_instance_date_key=next_occurrence_after(rule, latest.date_key),
        latest_task=LatestTaskSnapshot(
            id=latest.id,
            status=latest.status,
            due_date=latest.due_date,
            assigned_to_id=latest.assigned_to_id,
            client_id=latest.client_id,
            space_id=latest.space_id,
        ),
    )
