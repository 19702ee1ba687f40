import sqlite3
from contextlib import contextmanager

import pytest

from traffic_rewards_api.app.core.codec import U64_MAX
from traffic_rewards_api.app.core.config import settings


def _create(client, **overrides):
    body = {"description": "Stalled truck", "location": "Bridge St", "severity": 3}
    body.update(overrides)
    return client.post("/api/v1/reports/", json=body)


def test_add_traffic_report(client):
    response = _create(client)
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 1
    assert data["reporter_id"] == settings.default_reporter_id
    assert data["resolved"] is False
    assert _create(client).json()["id"] == 2


def test_add_report_rewards_default_reporter(client):
    _create(client)
    response = client.get(f"/api/v1/profiles/{settings.default_reporter_id}")
    assert response.status_code == 200
    assert response.json()["points"] == 10
    assert response.json()["contributions"] == 1


def test_get_update_delete_report(client):
    report_id = _create(client).json()["id"]

    assert client.get(f"/api/v1/reports/{report_id}").json()["description"] == "Stalled truck"

    response = client.patch(f"/api/v1/reports/{report_id}", json={"severity": 5})
    assert response.status_code == 200
    assert response.json()["severity"] == 5
    assert response.json()["description"] == "Stalled truck"

    response = client.delete(f"/api/v1/reports/{report_id}")
    assert response.status_code == 200
    assert response.json()["id"] == report_id

    response = client.get(f"/api/v1/reports/{report_id}")
    assert response.status_code == 404
    assert response.json()["detail"] == {
        "error": "NotFound",
        "message": f"Report with ID {report_id} not found",
    }
    assert client.delete(f"/api/v1/reports/{report_id}").status_code == 404


def test_update_unknown_report(client):
    response = client.patch("/api/v1/reports/99", json={"description": "x"})
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "NotFound"


@pytest.mark.parametrize(
    "body",
    [
        {"description": "x" * 1000, "location": "l", "severity": 1},
        {"description": "d", "location": "l", "severity": 300},
        {"location": "l", "severity": 1},
    ],
)
def test_invalid_report_body(client, body):
    assert client.post("/api/v1/reports/", json=body).status_code == 422


@pytest.mark.parametrize("report_id", ["-1", str(U64_MAX + 1), "abc"])
def test_invalid_report_id(client, report_id):
    assert client.get(f"/api/v1/reports/{report_id}").status_code == 422


def test_profile_points_flow(client):
    assert client.get("/api/v1/profiles/42").status_code == 404

    response = client.post("/api/v1/profiles/42/points", json={"points": 10})
    assert response.status_code == 200
    assert response.json() == {
        "id": 42,
        "username": "User42",
        "points": 10,
        "contributions": 1,
        "route_tokens": 0,
    }

    response = client.post("/api/v1/profiles/42/points", json={"points": 5})
    assert (response.json()["points"], response.json()["contributions"]) == (15, 2)

    response = client.delete("/api/v1/profiles/42")
    assert response.status_code == 200
    assert response.json()["points"] == 15
    assert client.delete("/api/v1/profiles/42").status_code == 404


def test_negative_points_rejected(client):
    assert client.post("/api/v1/profiles/1/points", json={"points": -5}).status_code == 422


def test_storage_failure_maps_to_500(client, context, monkeypatch):
    from traffic_rewards_api.app.core.errors import OperationFailed

    def failing_next():
        raise OperationFailed("Failed to generate ID")

    monkeypatch.setattr(context.report_counter, "next", failing_next)
    response = _create(client)
    assert response.status_code == 500
    assert response.json()["detail"] == {
        "error": "OperationFailed",
        "message": "Failed to generate ID",
    }


def test_storage_read_failure_maps_to_500(client, context, monkeypatch):
    @contextmanager
    def broken_cursor():
        raise sqlite3.OperationalError("disk I/O error")
        yield  # pragma: no cover

    monkeypatch.setattr(context.reports.partition, "cursor", broken_cursor)
    response = client.get("/api/v1/reports/1")
    assert response.status_code == 500
    assert response.json()["detail"] == {
        "error": "OperationFailed",
        "message": "Failed to read record 1",
    }


def test_info(client):
    _create(client)
    client.post("/api/v1/profiles/7/points", json={"points": 1})
    data = client.get("/api/v1/info/").json()
    assert data["last_report_id"] == 1
    assert data["reports"] == 1
    assert data["profiles"] == 2
    assert data["name"] == settings.project_name
