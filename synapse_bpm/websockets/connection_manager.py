"""
WebSocket Connection Manager
Tracks collaboration sessions and fans out real-time messages.

Every connection gets a session. Once it sends ``join`` the session carries
the user and the workflow being edited; presence, cursor and element
messages go to the other sessions editing the same workflow. Entity-changed
notifications go to every connection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


@dataclass
class CollaborationSession:
    """Per-connection metadata."""

    user_id: str | None = None
    user_name: str | None = None
    workflow_id: int | None = None
    cursor: Dict[str, float] | None = None
    joined_at: datetime | None = None
    connected_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def joined(self) -> bool:
        return self.workflow_id is not None

    def presence(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "userName": self.user_name,
            "cursor": self.cursor,
        }


class ConnectionManager:
    """Manages WebSocket connections, collaboration rooms and broadcasts."""

    def __init__(self):
        self.sessions: Dict[WebSocket, CollaborationSession] = {}

    @property
    def active_connections(self) -> List[WebSocket]:
        return list(self.sessions)

    def room(self, workflow_id: int, exclude: WebSocket | None = None) -> List[WebSocket]:
        """Connections currently editing a workflow."""
        return [
            ws
            for ws, session in self.sessions.items()
            if session.workflow_id == workflow_id and ws is not exclude
        ]

    def active_users(self, workflow_id: int, exclude: WebSocket | None = None) -> List[Dict[str, Any]]:
        return [self.sessions[ws].presence() for ws in self.room(workflow_id, exclude)]

    @staticmethod
    def envelope(event_type: str, data: Any) -> Dict[str, Any]:
        return {
            "type": event_type,
            "data": data,
            "timestamp": datetime.utcnow().isoformat(),
        }

    async def connect(self, websocket: WebSocket):
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.sessions[websocket] = CollaborationSession()
        logger.info("WebSocket connected (%s open)", len(self.sessions))
        await self.send_personal(
            websocket,
            "connection_established",
            {"message": "Connected to Synapse real-time updates"},
        )

    async def disconnect(self, websocket: WebSocket):
        """Remove a connection and tell its room it has left."""
        await self._drop([websocket])

    async def join(self, websocket: WebSocket, user_id: str, user_name: str, workflow_id: int):
        session = self.sessions.get(websocket)
        if session is None:
            return

        if session.joined:
            await self.leave(websocket)

        # the room only hears about joiners that received the peer list
        await self.send_personal(websocket, "active_users", self.active_users(workflow_id, exclude=websocket))
        if websocket not in self.sessions:
            return

        session.user_id = user_id
        session.user_name = user_name
        session.workflow_id = workflow_id
        session.cursor = None
        session.joined_at = datetime.utcnow()
        logger.info("User %s joined workflow %s", user_id, workflow_id)

        await self._send_room(
            workflow_id,
            "user_joined",
            {"userId": user_id, "userName": user_name},
            exclude=websocket,
        )

    async def leave(self, websocket: WebSocket):
        session = self.sessions.get(websocket)
        if session is None or not session.joined:
            return

        workflow_id = session.workflow_id
        data = {"userId": session.user_id, "userName": session.user_name}
        session.workflow_id = None
        session.cursor = None
        session.joined_at = None
        logger.info("User %s left workflow %s", data["userId"], workflow_id)
        await self._send_room(workflow_id, "user_left", data, exclude=websocket)

    async def move_cursor(self, websocket: WebSocket, x: float, y: float) -> bool:
        session = self.sessions.get(websocket)
        if session is None or not session.joined:
            return False

        session.cursor = {"x": x, "y": y}
        await self._send_room(
            session.workflow_id,
            "cursor_update",
            {"userId": session.user_id, "userName": session.user_name, "x": x, "y": y},
            exclude=websocket,
        )
        return True

    async def update_element(
        self,
        websocket: WebSocket,
        element_id: str,
        changes: Any,
        bpmn_xml: str | None,
    ) -> bool:
        session = self.sessions.get(websocket)
        if session is None or not session.joined:
            return False

        await self._send_room(
            session.workflow_id,
            "element_changed",
            {
                "userId": session.user_id,
                "userName": session.user_name,
                "elementId": element_id,
                "changes": changes,
                "bpmnXml": bpmn_xml,
            },
            exclude=websocket,
        )
        return True

    async def broadcast(self, event_type: str, data: Any):
        """Broadcast event to every open connection."""
        await self._fan_out(self.active_connections, self.envelope(event_type, data))

    async def send_personal(self, websocket: WebSocket, event_type: str, data: Any):
        """Send message to specific connection."""
        await self._fan_out([websocket], self.envelope(event_type, data))

    async def _send_room(
        self,
        workflow_id: int | None,
        event_type: str,
        data: Any,
        exclude: WebSocket | None = None,
    ):
        if workflow_id is None:
            return
        await self._fan_out(self.room(workflow_id, exclude), self.envelope(event_type, data))

    async def _fan_out(self, recipients: Iterable[WebSocket], message: Dict[str, Any]):
        disconnected: List[WebSocket] = []
        for connection in recipients:
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.debug("Send to WebSocket failed: %s", exc)
                disconnected.append(connection)
        if disconnected:
            await self._drop(disconnected)

    async def _drop(self, websockets: Iterable[WebSocket]):
        """
        Forget connections and announce departures to their rooms.

        Sockets that fail while receiving a departure notice are dropped in
        the same pass.
        """
        pending = list(websockets)
        while pending:
            websocket = pending.pop()
            session = self.sessions.pop(websocket, None)
            if session is None:
                continue
            logger.info("WebSocket disconnected (%s open)", len(self.sessions))
            if not session.joined:
                continue

            message = self.envelope("user_left", {"userId": session.user_id, "userName": session.user_name})
            for peer in self.room(session.workflow_id):
                try:
                    await peer.send_json(message)
                except Exception as exc:
                    logger.debug("Send to WebSocket failed: %s", exc)
                    pending.append(peer)


manager = ConnectionManager()
