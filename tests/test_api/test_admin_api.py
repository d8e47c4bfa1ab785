import logging

from sqlalchemy.exc import SQLAlchemyError

from synapse_bpm.api.routes import health
from synapse_bpm.database import get_db
from synapse_bpm.main import app


def test_metrics_on_empty_store(client):
    response = client.get("/api/admin/metrics")

    assert response.status_code == 200
    body = response.json()
    assert body["activeWorkflows"] == 0
    assert body["pendingTasks"] == 0
    assert body["systemHealth"] == 100.0
    assert body["recentActivity"] == []


def test_metrics_reflect_activity(client, workflow):
    instance = client.post("/api/workflow-instances", json={"workflowId": workflow["id"]}).json()
    client.post(
        "/api/tasks",
        json={
            "workflowInstanceId": instance["id"],
            "taskDefinitionKey": "Review",
            "name": "Review Order",
            "assignee": "ana",
        },
    )

    body = client.get("/api/admin/metrics").json()

    assert body["activeWorkflows"] == 1
    assert body["pendingTasks"] == 1
    assert body["totalWorkflows"] == 1
    assert body["totalTasks"] == 1
    assert [a["type"] for a in body["recentActivity"]] == [
        "task_assigned",
        "workflow_started",
        "workflow_deployed",
    ]
    assert all("timestamp" in a for a in body["recentActivity"])


def test_admin_workflows_include_instances(client, workflow):
    instance = client.post("/api/workflow-instances", json={"workflowId": workflow["id"]}).json()
    client.post(
        "/api/tasks",
        json={"workflowInstanceId": instance["id"], "taskDefinitionKey": "k", "name": "Open"},
    )

    rows = client.get("/api/admin/workflows").json()

    assert len(rows) == 1
    assert rows[0]["id"] == workflow["id"]
    assert rows[0]["activeTasks"] == 1
    assert [i["id"] for i in rows[0]["instances"]] == [instance["id"]]


class BrokenSession:
    """Session stand-in whose every query fails."""

    def query(self, *args, **kwargs):
        raise SQLAlchemyError("database is gone")

    def close(self):
        pass


def _broken_db():
    yield BrokenSession()


def test_metrics_store_failure_is_logged_and_reported(client, caplog):
    app.dependency_overrides[get_db] = _broken_db

    with caplog.at_level(logging.ERROR):
        response = client.get("/api/admin/metrics")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch admin metrics"}
    assert "Admin metrics query failed" in caplog.text


def test_admin_workflows_store_failure(client):
    app.dependency_overrides[get_db] = _broken_db

    response = client.get("/api/admin/workflows")

    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to fetch workflows with instances"}


def test_health_reports_degraded_database(client, monkeypatch):
    monkeypatch.setattr(health, "database_health", lambda: {"ok": False, "error": "connection refused"})

    response = client.get("/api/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["database"]["error"] == "connection refused"
