from __future__ import annotations

from datetime import date, datetime

import pytest

from taskseries.domain.enums import TaskPriority, TaskStatus
from taskseries.domain.errors import DuplicateInstanceError, StorageError
from taskseries.infra.db import Base, make_engine, session_factory
from taskseries.infra.repository import SqlSeriesStore
from taskseries.services.backfill import BackfillEngine
from taskseries.services.summary import SeriesSummaryBuilder


@pytest.fixture
def sql_store() -> SqlSeriesStore:
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    return SqlSeriesStore(session_factory(engine))


def _seed(sql_store: SqlSeriesStore, date_key: str, **overrides):
    data = {
        "series_id": "s1",
        "title": "Monthly invoice review",
        "priority": TaskPriority.HIGH.value,
        "status": TaskStatus.TODO.value,
        "assigned_to_id": 2,
        "client_id": "client-3",
        "space_id": "space-5",
        "checklist": [{"id": "1", "text": "Check totals", "completed": True}],
        "recurring_pattern": "monthly",
        "recurring_interval": 1,
        "schedule_from": date(2024, 1, 31),
        "date_key": date_key,
    }
    data.update(overrides)
    return sql_store.create_task(data)


def test_create_task_derives_due_date_from_key(sql_store) -> None:
    task = _seed(sql_store, "2024-01-31")

    assert task.id
    assert task.due_date == datetime(2024, 2, 1, 4, 59, 59, 999999)
    assert task.priority == TaskPriority.HIGH


def test_create_instance_copies_template(sql_store) -> None:
    template = _seed(sql_store, "2024-01-31", status=TaskStatus.COMPLETED.value)

    created = sql_store.create_instance(template, "2024-02-29")

    assert created.id != template.id
    assert created.series_id == "s1"
    assert created.status == TaskStatus.TODO
    assert created.completed_at is None
    assert created.title == template.title
    assert created.client_id == "client-3"
    assert created.checklist == ({"id": "1", "text": "Check totals", "completed": False},)
    assert created.schedule_from == date(2024, 1, 31)


def test_duplicate_date_key_is_rejected(sql_store) -> None:
    template = _seed(sql_store, "2024-01-31")

    with pytest.raises(DuplicateInstanceError):
        sql_store.create_instance(template, "2024-01-31")
    assert len(sql_store.list_instances("s1")) == 1


def test_other_integrity_errors_are_storage_errors(sql_store) -> None:
    with pytest.raises(StorageError) as excinfo:
        _seed(sql_store, "2024-03-31", title=None)
    assert not isinstance(excinfo.value, DuplicateInstanceError)


def test_list_instances_orders_by_date_key(sql_store) -> None:
    _seed(sql_store, "2024-03-31")
    _seed(sql_store, "2024-01-31")
    _seed(sql_store, "2024-02-29")

    keys = [task.date_key for task in sql_store.list_instances("s1")]

    assert keys == ["2024-01-31", "2024-02-29", "2024-03-31"]


def test_series_ids_only_cover_recurring_rows(sql_store) -> None:
    _seed(sql_store, "2024-01-31")
    _seed(sql_store, "2024-01-31", series_id="s2")
    _seed(sql_store, "2024-01-31", series_id=None, recurring_pattern=None)

    assert sql_store.list_all_series_ids() == {"s1", "s2"}


def test_backfill_and_summary_against_database(sql_store) -> None:
    _seed(sql_store, "2024-01-31")

    report = BackfillEngine(sql_store).backfill_all("2024-04-15")
    summary = SeriesSummaryBuilder(sql_store).build_summary("s1")

    assert report.tasks_created == 2
    assert summary.total_instances == 3
    assert summary.last_instance_date_key == "2024-03-31"
    assert summary.next_instance_date_key == "2024-04-30"


def test_missing_table_raises_storage_error() -> None:
    store = SqlSeriesStore(session_factory(make_engine("sqlite://")))

    with pytest.raises(StorageError):
        store.list_instances("s1")


def test_checklist_is_read_back_as_tuple(sql_store) -> None:
    task = _seed(sql_store, "2024-01-31")

    assert isinstance(task.checklist, tuple)
    assert isinstance(sql_store.list_instances("s1")[0].checklist, tuple)


def test_unkeyed_recurring_rows_are_listed(sql_store) -> None:
    _seed(sql_store, "2024-01-31")
    no_series = _seed(sql_store, None, series_id=None, due_date=datetime(2024, 1, 31, 17, 0))
    no_key = _seed(sql_store, None, series_id="s2", due_date=datetime(2024, 2, 29, 17, 0))
    _seed(sql_store, None, series_id=None, recurring_pattern=None)

    ids = {task.id for task in sql_store.list_unkeyed_recurring()}

    assert ids == {no_series.id, no_key.id}


def test_assign_series_keys_rejects_taken_day(sql_store) -> None:
    _seed(sql_store, "2024-01-31")
    legacy = _seed(sql_store, None, due_date=datetime(2024, 1, 31, 17, 0))

    with pytest.raises(DuplicateInstanceError):
        sql_store.assign_series_keys(legacy.id, "s1", "2024-01-31")
    assert sql_store.get_task(legacy.id).date_key is None
    assert sql_store.assign_series_keys("missing", "s1", "2024-02-29") is None


def test_backfill_adopts_legacy_row_in_database(sql_store) -> None:
    legacy = _seed(sql_store, None, series_id=None, due_date=datetime(2024, 1, 31, 17, 0))

    report = BackfillEngine(sql_store).backfill_all("2024-03-15")

    adopted = sql_store.get_task(legacy.id)
    assert report.series_updated == 1
    assert report.tasks_created == 1
    assert adopted.series_id.startswith("rec_")
    assert adopted.date_key == "2024-01-31"
    keys = [task.date_key for task in sql_store.list_instances(adopted.series_id)]
    assert keys == ["2024-01-31", "2024-02-29"]
