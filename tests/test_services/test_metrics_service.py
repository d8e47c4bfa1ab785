from datetime import datetime, timedelta

import pytest

from synapse_bpm.models import ActivityEvent, ApiCall, DeploymentPipeline, Task, WorkflowInstance
from synapse_bpm.services.activity_service import MAX_ACTIVITY_EVENTS, list_recent_activity, record_activity
from synapse_bpm.services.metrics_service import MetricsService, start_of_day

NOW = datetime(2024, 5, 10, 15, 30)
YESTERDAY = NOW - timedelta(days=1)


def _call(status, created_at=NOW):
    return ApiCall(integration_id=1, method="GET", endpoint="/", status=status, created_at=created_at)


def _deployment(status, created_at=NOW):
    return DeploymentPipeline(
        workflow_id=1, version="1.0.0", environment="production", status=status, created_at=created_at
    )


def test_start_of_day():
    assert start_of_day(NOW) == datetime(2024, 5, 10)


def test_empty_store_reports_full_health(db):
    metrics = MetricsService(db, now=NOW).get_admin_metrics()

    assert metrics["active_workflows"] == 0
    assert metrics["pending_tasks"] == 0
    assert metrics["system_health"] == 100.0
    assert metrics["recent_activity"] == []


def test_counts_today_only(db):
    db.add_all(
        [
            WorkflowInstance(workflow_id=1, status="running"),
            WorkflowInstance(workflow_id=1, status="running"),
            WorkflowInstance(workflow_id=1, status="completed"),
            Task(workflow_instance_id=1, task_definition_key="a", name="a", status="pending"),
            Task(workflow_instance_id=1, task_definition_key="b", name="b", status="completed", completed_at=NOW),
            Task(
                workflow_instance_id=1, task_definition_key="c", name="c",
                status="completed", completed_at=YESTERDAY,
            ),
            _call("success"),
            _call("failed"),
            _call("failed", created_at=YESTERDAY),
            _deployment("success"),
            _deployment("failed"),
            _deployment("failed", created_at=YESTERDAY),
        ]
    )
    db.commit()

    metrics = MetricsService(db, now=NOW).get_admin_metrics()

    assert metrics["active_workflows"] == 2
    assert metrics["pending_tasks"] == 1
    assert metrics["completed_today"] == 1
    assert metrics["api_calls_today"] == 2
    assert metrics["failed_api_calls"] == 2
    assert metrics["deployments_today"] == 2
    assert metrics["failed_deployments"] == 1
    assert metrics["total_tasks"] == 3
    assert metrics["system_health"] == 50.0


def test_system_health_ignores_unfinished_rows(db):
    db.add_all([_call("success"), _call("pending"), _call("retrying"), _deployment("running")])
    db.commit()

    assert MetricsService(db, now=NOW).get_system_health() == 100.0


def test_system_health_rounds_to_one_decimal(db):
    db.add_all([_call("success"), _call("success"), _call("failed")])
    db.commit()

    assert MetricsService(db, now=NOW).get_system_health() == 66.7


def test_recent_activity_is_newest_first_and_limited(db):
    for i in range(12):
        record_activity(db, "task_assigned", f"event {i}")
    db.commit()

    activity = MetricsService(db, now=NOW).get_admin_metrics(activity_limit=10)["recent_activity"]

    assert len(activity) == 10
    assert activity[0]["message"] == "event 11"
    assert activity[-1]["message"] == "event 2"


def test_activity_feed_is_capped(db):
    for i in range(MAX_ACTIVITY_EVENTS + 5):
        record_activity(db, "workflow_started", f"event {i}")
    db.commit()

    assert db.query(ActivityEvent).count() == MAX_ACTIVITY_EVENTS
    assert list_recent_activity(db, 1)[0].message == f"event {MAX_ACTIVITY_EVENTS + 4}"


def test_unknown_activity_type_is_rejected(db):
    with pytest.raises(ValueError):
        record_activity(db, "coffee_break", "nope")
