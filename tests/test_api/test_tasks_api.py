import pytest


@pytest.fixture
def instance(client, workflow):
    response = client.post(
        "/api/workflow-instances",
        json={"workflowId": workflow["id"], "currentStep": "Review", "variables": {"orderId": 7}},
    )
    assert response.status_code == 201
    return response.json()


def _task(client, instance, **overrides):
    payload = {
        "workflowInstanceId": instance["id"],
        "taskDefinitionKey": "Review",
        "name": "Review Order",
    }
    payload.update(overrides)
    response = client.post("/api/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_task_list_includes_workflow(client, workflow, instance):
    created = _task(client, instance, assignee="ana", priority="high")

    tasks = client.get("/api/tasks").json()

    assert len(tasks) == 1
    assert tasks[0]["id"] == created["id"]
    assert tasks[0]["workflowName"] == "Order Processing"
    assert tasks[0]["workflowId"] == workflow["id"]
    assert tasks[0]["priority"] == "high"


def test_task_filters(client, instance):
    _task(client, instance, assignee="ana")
    _task(client, instance, assignee="bo", status="in_progress")

    assert [t["assignee"] for t in client.get("/api/tasks", params={"assignee": "ana"}).json()] == ["ana"]
    assert [t["assignee"] for t in client.get("/api/tasks", params={"status": "in_progress"}).json()] == ["bo"]
    assert len(client.get("/api/tasks", params={"workflowInstanceId": instance["id"]}).json()) == 2
    assert client.get("/api/tasks", params={"workflowInstanceId": 999}).json() == []


def test_orphan_task_is_listed_without_workflow(client):
    response = client.post(
        "/api/tasks",
        json={"workflowInstanceId": 404, "taskDefinitionKey": "k", "name": "Orphan"},
    )
    assert response.status_code == 201

    tasks = client.get("/api/tasks").json()
    assert tasks[0]["workflowName"] is None
    assert tasks[0]["workflowId"] is None


def test_start_and_complete_task(client, instance):
    task = _task(client, instance)

    started = client.post(f"/api/tasks/{task['id']}/start")
    assert started.json()["status"] == "in_progress"

    completed = client.post(
        f"/api/tasks/{task['id']}/complete", json={"formData": {"approved": True}}
    )
    body = completed.json()
    assert body["status"] == "completed"
    assert body["formData"] == {"approved": True}
    assert body["completedAt"] is not None


def test_complete_without_body(client, instance):
    task = _task(client, instance)

    response = client.post(f"/api/tasks/{task['id']}/complete")

    assert response.status_code == 200
    assert response.json()["formData"] == {}


def test_update_task_and_unassign(client, instance):
    task = _task(client, instance, assignee="ana")

    response = client.put(f"/api/tasks/{task['id']}", json={"assignee": None, "priority": "low"})

    assert response.json()["assignee"] is None
    assert response.json()["priority"] == "low"


def test_invalid_task_status_is_rejected(client, instance):
    response = client.post(
        "/api/tasks",
        json={"workflowInstanceId": instance["id"], "taskDefinitionKey": "k", "name": "x", "status": "lost"},
    )
    assert response.status_code == 400


def test_missing_task_is_404(client):
    assert client.get("/api/tasks/1").status_code == 404
    assert client.post("/api/tasks/1/start").status_code == 404
    assert client.post("/api/tasks/1/complete").status_code == 404


def test_instance_lifecycle(client, instance):
    url = f"/api/workflow-instances/{instance['id']}"
    assert instance["status"] == "running"
    assert instance["variables"] == {"orderId": 7}
    assert instance["completedAt"] is None

    finished = client.put(url, json={"status": "completed"}).json()
    assert finished["completedAt"] is not None
    assert client.get(url).json()["status"] == "completed"
    assert [i["id"] for i in client.get("/api/workflow-instances").json()] == [instance["id"]]


def test_instance_sub_resources(client, instance):
    _task(client, instance)

    tasks = client.get(f"/api/workflow-instances/{instance['id']}/tasks").json()
    calls = client.get(f"/api/workflow-instances/{instance['id']}/api-calls").json()

    assert [t["name"] for t in tasks] == ["Review Order"]
    assert calls == []
    assert client.get("/api/workflow-instances/999").status_code == 404
