"""
WebSocket API Endpoints
Real-time collaboration and entity-change notifications
"""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from synapse_bpm.schemas.collaboration import CursorMoveMessage, ElementUpdateMessage, JoinMessage
from synapse_bpm.websockets.connection_manager import ConnectionManager, manager

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_message(hub: ConnectionManager, websocket: WebSocket, raw: str):
    """Dispatch one inbound text frame."""
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        await hub.send_personal(websocket, "error", {"message": "Invalid JSON"})
        return
    if not isinstance(message, dict):
        await hub.send_personal(websocket, "error", {"message": "Message must be a JSON object"})
        return

    message_type = message.get("type")
    try:
        if message_type == "ping":
            await hub.send_personal(websocket, "pong", {"status": "alive"})
        elif message_type == "join":
            join = JoinMessage.model_validate(message)
            await hub.join(websocket, join.user_id, join.user_name, join.workflow_id)
        elif message_type == "leave":
            await hub.leave(websocket)
        elif message_type == "cursor_move":
            cursor = CursorMoveMessage.model_validate(message)
            if not await hub.move_cursor(websocket, cursor.x, cursor.y):
                await hub.send_personal(websocket, "error", {"message": "Join a workflow first"})
        elif message_type == "element_update":
            update = ElementUpdateMessage.model_validate(message)
            if not await hub.update_element(websocket, update.element_id, update.changes, update.bpmn_xml):
                await hub.send_personal(websocket, "error", {"message": "Join a workflow first"})
        else:
            await hub.send_personal(
                websocket, "error", {"message": f"Unknown message type: {message_type}"}
            )
    except ValidationError as exc:
        errors = [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()]
        await hub.send_personal(
            websocket,
            "error",
            {"message": f"Invalid {message_type} message", "errors": errors},
        )


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for collaborative editing.

    Example:
      ws://localhost:5000/ws  then send {"type": "join", "userId": "u1",
      "userName": "Ana", "workflowId": 1}
    """
    await manager.connect(websocket)
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            text = frame.get("text")
            if text is None:
                await manager.send_personal(websocket, "error", {"message": "Binary frames are not supported"})
                continue
            await handle_message(manager, websocket, text)
    except WebSocketDisconnect:
        pass
    finally:
        await manager.disconnect(websocket)
