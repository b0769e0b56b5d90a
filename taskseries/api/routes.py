"""Recurring series endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from taskseries.config import SETTINGS
from taskseries.domain.store import SeriesStore
from taskseries.services.backfill import BackfillEngine
from taskseries.services.summary import SeriesSummaryBuilder
from taskseries.services.task_service import TaskService

from .deps import get_store, get_today_key
from .schemas import BackfillOut, SeriesCreate, SeriesSummaryOut, StatusUpdate, TaskInstanceOut

router = APIRouter()


@router.get("/tasks/recurring-series", response_model=list[SeriesSummaryOut])
def list_recurring_series(store: SeriesStore = Depends(get_store)) -> list[SeriesSummaryOut]:
    summaries = SeriesSummaryBuilder(store).build_all_summaries()
    return [SeriesSummaryOut.from_summary(summary) for summary in summaries]


@router.post(
    "/tasks/recurring-series",
    response_model=TaskInstanceOut,
    status_code=status.HTTP_201_CREATED,
)
def start_recurring_series(
    payload: SeriesCreate,
    store: SeriesStore = Depends(get_store),
) -> TaskInstanceOut:
    task = TaskService(store).start_series(payload.to_task_data())
    return TaskInstanceOut.from_instance(task)


@router.post("/tasks/recurring-series/backfill", response_model=BackfillOut)
def backfill_recurring_series(
    dry_run: bool = Query(False, alias="dryRun"),
    store: SeriesStore = Depends(get_store),
    today_key: str = Depends(get_today_key),
) -> BackfillOut:
    """Create every missing instance up to today. Partial failures still return 200."""
    report = BackfillEngine(store, tz_name=SETTINGS.recurrence_timezone).backfill_all(
        today_key, dry_run=dry_run
    )
    return BackfillOut.from_report(report)


@router.get("/tasks/recurring-series/{series_id}", response_model=SeriesSummaryOut)
def get_recurring_series(
    series_id: str,
    store: SeriesStore = Depends(get_store),
) -> SeriesSummaryOut:
    summary = SeriesSummaryBuilder(store).build_summary(series_id)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Series not found")
    return SeriesSummaryOut.from_summary(summary)


@router.get(
    "/tasks/recurring-series/{series_id}/instances",
    response_model=list[TaskInstanceOut],
)
def list_series_instances(
    series_id: str,
    store: SeriesStore = Depends(get_store),
) -> list[TaskInstanceOut]:
    instances = TaskService(store).list_instances(series_id)
    if not instances:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Series not found")
    return [TaskInstanceOut.from_instance(task) for task in instances]


@router.post("/tasks/{task_id}/status", response_model=TaskInstanceOut)
def update_task_status(
    task_id: str,
    payload: StatusUpdate,
    store: SeriesStore = Depends(get_store),
) -> TaskInstanceOut:
    task = TaskService(store).update_status(task_id, payload.status)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskInstanceOut.from_instance(task)
