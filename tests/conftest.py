import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['APP_ENV'] = 'test'
os.environ['SEED_SAMPLE_DATA'] = 'false'
os.environ['INTEGRATION_RETRY_BACKOFF_SECONDS'] = '0'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from synapse_bpm.database import SessionLocal, engine  # noqa: E402
from synapse_bpm.models import Base  # noqa: E402
from synapse_bpm.websockets.connection_manager import manager  # noqa: E402

SAMPLE_BPMN = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL" id="Definitions_1">
  <bpmn:process id="Process_1" name="Order Processing" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" />
    <bpmn:userTask id="Review" name="Review Order" />
    <bpmn:endEvent id="EndEvent_1" />
  </bpmn:process>
</bpmn:definitions>"""


class FakeWebSocket:
    """Records what the hub sends; optionally fails every send."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.accepted = False
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)

    def types(self):
        return [m["type"] for m in self.sent]

    def last(self, event_type):
        matching = [m for m in self.sent if m["type"] == event_type]
        return matching[-1] if matching else None


@pytest.fixture
def fake_ws():
    return FakeWebSocket


@pytest.fixture
def sample_bpmn():
    return SAMPLE_BPMN


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient

    from synapse_bpm.main import app

    manager.sessions.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    manager.sessions.clear()


@pytest.fixture
def workflow(client):
    response = client.post(
        "/api/workflows",
        json={"name": "Order Processing", "description": "Orders", "bpmnXml": SAMPLE_BPMN},
    )
    assert response.status_code == 201, response.text
    return response.json()
