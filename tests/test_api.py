from __future__ import annotations

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from taskseries.api.app import create_app
from taskseries.api.deps import get_store, get_today_key

PREFIX = "/api"


@pytest.fixture
def client(store) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_today_key] = lambda: "2024-01-15"
    return TestClient(app)


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "healthy"}


def test_start_series_and_list_summaries(client) -> None:
    response = client.post(
        f"{PREFIX}/tasks/recurring-series",
        json={
            "title": "Client newsletter",
            "recurringPattern": "weekly",
            "recurringInterval": 1,
            "scheduleFrom": "2024-01-01",
            "assignedToId": 5,
            "checklist": [{"id": "c1", "text": "Collect photos"}],
        },
    )
    assert response.status_code == 201
    first = response.json()
    assert first["dateKey"] == "2024-01-01"
    assert first["status"] == "todo"

    summaries = client.get(f"{PREFIX}/tasks/recurring-series").json()

    assert len(summaries) == 1
    item = summaries[0]
    assert item["seriesId"] == first["seriesId"]
    assert item["title"] == "Client newsletter"
    assert item["recurringPattern"] == "weekly"
    assert item["totalInstances"] == 1
    assert item["openInstances"] == 1
    assert item["lastInstanceDateKey"] == "2024-01-01"
    assert item["nextInstanceDateKey"] == "2024-01-08"
    assert item["latestTask"]["assignedToId"] == 5


def test_start_series_rejects_end_date_before_anchor(client) -> None:
    response = client.post(
        f"{PREFIX}/tasks/recurring-series",
        json={
            "title": "Broken",
            "recurringPattern": "daily",
            "scheduleFrom": "2024-01-10",
            "recurringEndDate": "2024-01-05",
        },
    )
    assert response.status_code == 422


def test_backfill_endpoint_reports_partial_failures(client, store) -> None:
    store.seed("s1", "2024-01-09", recurring_interval=2)
    store.seed("broken", "2024-01-01")
    store.failing_series.add("broken")

    response = client.post(f"{PREFIX}/tasks/recurring-series/backfill")

    assert response.status_code == 200
    assert response.json() == {
        "todayKey": "2024-01-15",
        "seriesProcessed": 1,
        "tasksCreated": 3,
        "seriesFailed": 1,
        "seriesUpdated": 0,
        "skipped": 0,
        "dryRun": False,
    }


def test_backfill_dry_run(client, store) -> None:
    store.seed("s1", "2024-01-13")

    body = client.post(f"{PREFIX}/tasks/recurring-series/backfill", params={"dryRun": "true"}).json()

    assert body["tasksCreated"] == 2
    assert body["dryRun"] is True
    assert len(store.list_instances("s1")) == 1


def test_series_detail_and_instances(client, store) -> None:
    store.seed("s1", "2024-01-14")
    store.seed("s1", "2024-01-15", status="completed")

    detail = client.get(f"{PREFIX}/tasks/recurring-series/s1").json()
    instances = client.get(f"{PREFIX}/tasks/recurring-series/s1/instances").json()

    assert detail["completedInstances"] == 1
    assert [task["dateKey"] for task in instances] == ["2024-01-14", "2024-01-15"]


def test_unknown_series_is_404(client) -> None:
    assert client.get(f"{PREFIX}/tasks/recurring-series/nope").status_code == 404
    assert client.get(f"{PREFIX}/tasks/recurring-series/nope/instances").status_code == 404


def test_update_status(client, store) -> None:
    task = store.seed("s1", "2024-01-15")

    response = client.post(f"{PREFIX}/tasks/{task.id}/status", json={"status": "completed"})

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["completedAt"] is not None
    assert client.post(f"{PREFIX}/tasks/missing/status", json={"status": "todo"}).status_code == 404


def test_storage_failure_maps_to_503(client, store) -> None:
    store.seed("s1", "2024-01-15")
    store.failing_series.add("s1")

    response = client.get(f"{PREFIX}/tasks/recurring-series/s1")

    assert response.status_code == 503


def test_summaries_listing_survives_a_malformed_series(client, store) -> None:
    store.seed("good", "2024-01-14")
    store.seed("legacy", "2024-01-14", schedule_from=None)

    response = client.get(f"{PREFIX}/tasks/recurring-series")

    assert response.status_code == 200
    assert [item["seriesId"] for item in response.json()] == ["good"]


def test_backfill_endpoint_reports_adopted_series(client, store) -> None:
    store.seed(None, None, due_date=datetime(2024, 1, 14, 17, 0))

    body = client.post(f"{PREFIX}/tasks/recurring-series/backfill").json()

    assert body["seriesUpdated"] == 1
    assert body["tasksCreated"] == 1
    assert body["skipped"] == 0
