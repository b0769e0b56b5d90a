from __future__ import annotations

import logging
from dataclasses import asdict

from taskseries.domain.datekeys import DEFAULT_TIMEZONE, date_key_for_instant
from taskseries.domain.entities import BackfillReport, BackfillResult
from taskseries.domain.errors import DuplicateInstanceError, StorageError, ValidationError
from taskseries.domain.recurrence import RecurrenceRule, stable_series_id
from taskseries.domain.store import SeriesStore

from .materializer import occurrences_between

logger = logging.getLogger(__name__)


class BackfillEngine:
    """Creates the instances a series is missing between its newest row and a given day.

    The newest remaining instance is always the starting point: rows deleted out
    of band leave a gap that stays a gap.
    """

    def __init__(self, store: SeriesStore, tz_name: str = DEFAULT_TIMEZONE) -> None:
        self._store = store
        self._tz_name = tz_name

    def backfill_series(
        self,
        series_id: str,
        as_of_date_key: str,
        dry_run: bool = False,
    ) -> BackfillResult:
        instances = [task for task in self._store.list_instances(series_id) if task.date_key]
        if not instances:
            return BackfillResult(series_id=series_id, created=0)

        latest = instances[-1]
        rule = RecurrenceRule.from_instance(latest)
        existing = {task.date_key for task in instances}

        template = latest
        created = 0
        for date_key in occurrences_between(rule, latest.date_key, as_of_date_key):
            if date_key in existing:
                continue
            if dry_run:
                created += 1
                continue
            try:
                template = self._store.create_instance(template, date_key)
            except DuplicateInstanceError:
                logger.debug("Series %s already has %s, skipping", series_id, date_key)
                continue
            existing.add(date_key)
            created += 1

        if created:
            logger.info(
                "Backfilled series %s up to %s: %s instance(s)%s",
                series_id,
                as_of_date_key,
                created,
                " (dry run)" if dry_run else "",
            )
        return BackfillResult(series_id=series_id, created=created)

    def backfill_all(self, as_of_date_key: str, dry_run: bool = False) -> BackfillReport:
        adopted = self.adopt_unkeyed(dry_run=dry_run)

        processed = 0
        failed = 0
        skipped = 0
        tasks_created = 0

        for series_id in sorted(self._store.list_all_series_ids()):
            try:
                result = self.backfill_series(series_id, as_of_date_key, dry_run=dry_run)
            except (StorageError, ValidationError):
                logger.exception("Backfill failed for series %s", series_id)
                failed += 1
                continue
            processed += 1
            tasks_created += result.created
            if not result.created:
                skipped += 1

        logger.info(
            "Backfill as of %s: %s series processed, %s failed, %s skipped, "
            "%s adopted, %s task(s) created",
            as_of_date_key,
            processed,
            failed,
            skipped,
            len(adopted),
            tasks_created,
        )
        return BackfillReport(
            as_of_date_key=as_of_date_key,
            series_processed=processed,
            tasks_created=tasks_created,
            series_failed=failed,
            series_updated=len(adopted),
            skipped=skipped,
            dry_run=dry_run,
        )

    def adopt_unkeyed(self, dry_run: bool = False) -> set[str]:
        """Give recurring rows written without a series id or date key their keys.

        The series id is derived from the row's definition and the date key from
        its due date, falling back to completion and creation time. Returns the
        ids of the series that gained a row.
        """
        adopted: set[str] = set()
        for task in self._store.list_unkeyed_recurring():
            series_id = task.series_id or stable_series_id(asdict(task))
            instant = task.due_date or task.completed_at or task.created_at
            if task.date_key:
                date_key = task.date_key
            elif instant is not None:
                date_key = date_key_for_instant(instant, self._tz_name)
            else:
                logger.warning("Recurring task %s has no date to key it by, skipping", task.id)
                continue

            if dry_run:
                adopted.add(series_id)
                continue
            try:
                self._store.assign_series_keys(task.id, series_id, date_key)
            except DuplicateInstanceError:
                logger.warning(
                    "Recurring task %s collides with series %s on %s, leaving it unkeyed",
                    task.id,
                    series_id,
                    date_key,
                )
                continue
            except StorageError:
                logger.exception("Could not adopt recurring task %s", task.id)
                continue
            logger.info("Adopted task %s into series %s on %s", task.id, series_id, date_key)
            adopted.add(series_id)
        return adopted
