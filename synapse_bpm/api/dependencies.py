"""Shared API dependencies."""
from __future__ import annotations

from pydantic import BaseModel

from synapse_bpm.database import get_db
from synapse_bpm.websockets.connection_manager import ConnectionManager, manager


def get_hub() -> ConnectionManager:
    return manager


async def notify(hub: ConnectionManager, event_type: str, payload: BaseModel | dict) -> None:
    """Tell every WebSocket client that an entity changed."""
    data = payload.model_dump(mode="json", by_alias=True) if isinstance(payload, BaseModel) else payload
    await hub.broadcast(event_type, data)


__all__ = ["get_db", "get_hub", "notify"]
