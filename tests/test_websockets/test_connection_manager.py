import pytest

from synapse_bpm.api.websocket import handle_message
from synapse_bpm.websockets.connection_manager import ConnectionManager


async def _joined(hub, fake_ws, user_id, workflow_id, **kwargs):
    ws = fake_ws(**kwargs)
    await hub.connect(ws)
    await hub.join(ws, user_id, user_id.title(), workflow_id)
    return ws


@pytest.mark.asyncio
async def test_connect_sends_greeting(fake_ws):
    hub = ConnectionManager()
    ws = fake_ws()

    await hub.connect(ws)

    assert ws.accepted
    assert ws.types() == ["connection_established"]
    assert hub.active_connections == [ws]


@pytest.mark.asyncio
async def test_join_lists_peers_and_announces(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    bo = await _joined(hub, fake_ws, "bo", 1)

    assert ana.last("active_users")["data"] == []
    assert bo.last("active_users")["data"] == [{"userId": "ana", "userName": "Ana", "cursor": None}]
    assert ana.last("user_joined")["data"] == {"userId": "bo", "userName": "Bo"}
    assert bo.last("user_joined") is None


@pytest.mark.asyncio
async def test_rooms_are_isolated(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    cy = await _joined(hub, fake_ws, "cy", 2)

    await hub.move_cursor(ana, 10, 20)

    assert cy.types() == ["connection_established", "active_users"]


@pytest.mark.asyncio
async def test_cursor_and_element_updates_skip_sender(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    bo = await _joined(hub, fake_ws, "bo", 1)

    assert await hub.move_cursor(ana, 1.5, 2.5)
    assert await hub.update_element(ana, "Task_1", {"name": "Approve"}, "<xml/>")

    assert bo.last("cursor_update")["data"] == {"userId": "ana", "userName": "Ana", "x": 1.5, "y": 2.5}
    changed = bo.last("element_changed")["data"]
    assert changed["elementId"] == "Task_1"
    assert changed["changes"] == {"name": "Approve"}
    assert changed["bpmnXml"] == "<xml/>"
    assert ana.last("cursor_update") is None
    assert ana.last("element_changed") is None

    presence = hub.active_users(1, exclude=bo)
    assert presence == [{"userId": "ana", "userName": "Ana", "cursor": {"x": 1.5, "y": 2.5}}]


@pytest.mark.asyncio
async def test_room_messages_require_join(fake_ws):
    hub = ConnectionManager()
    ws = fake_ws()
    await hub.connect(ws)

    assert await hub.move_cursor(ws, 0, 0) is False
    assert await hub.update_element(ws, "x", {}, None) is False


@pytest.mark.asyncio
async def test_rejoin_moves_user_between_rooms(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    bo = await _joined(hub, fake_ws, "bo", 2)

    await hub.join(ana, "ana", "Ana", 2)

    assert hub.room(1) == []
    assert bo.last("user_joined")["data"]["userId"] == "ana"
    assert len(hub.active_users(2)) == 2


@pytest.mark.asyncio
async def test_disconnect_announces_departure(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    bo = await _joined(hub, fake_ws, "bo", 1)

    await hub.disconnect(bo)

    assert ana.last("user_left")["data"] == {"userId": "bo", "userName": "Bo"}
    assert bo not in hub.sessions


@pytest.mark.asyncio
async def test_failed_send_drops_connection(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    bo = await _joined(hub, fake_ws, "bo", 1)
    bo.fail = True

    await hub.move_cursor(ana, 3, 4)

    assert bo not in hub.sessions
    assert ana.last("user_left")["data"]["userId"] == "bo"


@pytest.mark.asyncio
async def test_broadcast_reaches_every_connection(fake_ws):
    hub = ConnectionManager()
    ana = await _joined(hub, fake_ws, "ana", 1)
    idle = fake_ws()
    await hub.connect(idle)

    await hub.broadcast("workflow_created", {"id": 1})

    for ws in (ana, idle):
        message = ws.last("workflow_created")
        assert message["data"] == {"id": 1}
        assert "timestamp" in message


@pytest.mark.asyncio
async def test_handle_message_reports_bad_input(fake_ws):
    hub = ConnectionManager()
    ws = fake_ws()
    await hub.connect(ws)

    await handle_message(hub, ws, "not json")
    assert ws.last("error")["data"]["message"] == "Invalid JSON"

    await handle_message(hub, ws, "[1, 2]")
    assert ws.last("error")["data"]["message"] == "Message must be a JSON object"

    await handle_message(hub, ws, '{"type": "dance"}')
    assert ws.last("error")["data"]["message"] == "Unknown message type: dance"

    await handle_message(hub, ws, '{"type": "join", "userId": "ana"}')
    assert ws.last("error")["data"]["message"] == "Invalid join message"

    await handle_message(hub, ws, '{"type": "cursor_move", "x": 1, "y": 2}')
    assert ws.last("error")["data"]["message"] == "Join a workflow first"


@pytest.mark.asyncio
async def test_handle_message_join_flow(fake_ws):
    hub = ConnectionManager()
    ana, bo = fake_ws(), fake_ws()
    for ws in (ana, bo):
        await hub.connect(ws)

    await handle_message(hub, ana, '{"type": "join", "userId": "ana", "userName": "Ana", "workflowId": 3}')
    await handle_message(hub, bo, '{"type": "join", "userId": "bo", "userName": "Bo", "workflowId": 3}')
    await handle_message(
        hub, bo, '{"type": "element_update", "elementId": "T1", "changes": {"name": "x"}}'
    )
    await handle_message(hub, ana, '{"type": "ping"}')

    assert ana.last("element_changed")["data"]["elementId"] == "T1"
    assert ana.last("pong")["data"] == {"status": "alive"}

    await handle_message(hub, bo, '{"type": "leave"}')
    assert ana.last("user_left")["data"]["userId"] == "bo"
    assert hub.room(3) == [ana]


@pytest.mark.asyncio
async def test_join_that_fails_to_deliver_is_not_announced(fake_ws):
    hub = ConnectionManager()
    peer = await _joined(hub, fake_ws, "peer", 1)
    ghost = fake_ws()
    await hub.connect(ghost)
    ghost.fail = True

    await hub.join(ghost, "ghost", "Ghost", 1)

    assert ghost not in hub.sessions
    assert peer.types() == ["connection_established", "active_users"]
    assert hub.active_users(1) == [{"userId": "peer", "userName": "Peer", "cursor": None}]
