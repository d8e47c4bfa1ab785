def test_create_workflow_returns_camel_case(client, sample_bpmn):
    response = client.post(
        "/api/workflows",
        json={"name": "Hiring", "bpmnXml": sample_bpmn, "createdBy": "ana"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Hiring"
    assert body["bpmnXml"] == sample_bpmn
    assert body["version"] == "1.0.0"
    assert body["status"] == "draft"
    assert body["createdBy"] == "ana"
    assert "createdAt" in body and "updatedAt" in body


def test_create_workflow_rejects_invalid_payload(client):
    response = client.post("/api/workflows", json={"name": ""})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    assert body["errors"]


def test_get_update_delete_workflow(client, workflow):
    url = f"/api/workflows/{workflow['id']}"

    assert client.get(url).json()["name"] == "Order Processing"

    updated = client.put(url, json={"status": "active", "description": None})
    assert updated.status_code == 200
    assert updated.json()["status"] == "active"
    assert updated.json()["description"] is None
    assert updated.json()["name"] == "Order Processing"

    assert client.delete(url).status_code == 204
    assert client.get(url).status_code == 404
    assert client.delete(url).status_code == 404


def test_update_ignores_null_for_required_fields(client, workflow):
    response = client.put(f"/api/workflows/{workflow['id']}", json={"name": None})

    assert response.status_code == 200
    assert response.json()["name"] == "Order Processing"


def test_list_workflows(client, workflow):
    response = client.get("/api/workflows")

    assert response.status_code == 200
    assert [w["id"] for w in response.json()] == [workflow["id"]]


def test_unknown_workflow_is_404(client):
    assert client.get("/api/workflows/999").status_code == 404
    assert client.put("/api/workflows/999", json={"name": "x"}).status_code == 404


def test_versions_auto_number_and_publish(client, workflow, sample_bpmn):
    url = f"/api/workflows/{workflow['id']}/versions"

    first = client.post(url, json={"changeLog": "initial"})
    assert first.status_code == 201
    assert first.json()["version"] == "1.0.0"
    assert first.json()["bpmnXml"] == sample_bpmn

    new_xml = sample_bpmn.replace("Review Order", "Check Order")
    second = client.post(url, json={"bpmnXml": new_xml, "status": "published"})
    assert second.json()["version"] == "1.0.1"

    listed = client.get(url).json()
    assert [v["version"] for v in listed] == ["1.0.1", "1.0.0"]

    current = client.get(f"/api/workflows/{workflow['id']}").json()
    assert current["version"] == "1.0.1"
    assert "Check Order" in current["bpmnXml"]

    version_id = second.json()["id"]
    assert client.get(f"{url}/{version_id}").json()["status"] == "published"
    assert client.get(f"{url}/9999").status_code == 404


def test_versions_of_unknown_workflow(client):
    assert client.get("/api/workflows/42/versions").status_code == 404
    assert client.post("/api/workflows/42/versions", json={}).status_code == 404


def test_workflow_instances_and_deployments(client, workflow):
    wf_id = workflow["id"]
    client.post("/api/workflow-instances", json={"workflowId": wf_id})
    client.post("/api/deployments", json={"workflowId": wf_id, "version": "1.0.0"})

    instances = client.get(f"/api/workflows/{wf_id}/instances").json()
    deployments = client.get(f"/api/workflows/{wf_id}/deployments").json()

    assert [i["workflowId"] for i in instances] == [wf_id]
    assert [d["environment"] for d in deployments] == ["development"]
