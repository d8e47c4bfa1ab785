from __future__ import annotations

from typing import Any

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel


class JoinMessage(CamelModel):
    user_id: str = Field(min_length=1, max_length=255)
    user_name: str = Field(min_length=1, max_length=255)
    workflow_id: int


class CursorMoveMessage(CamelModel):
    x: float
    y: float


class ElementUpdateMessage(CamelModel):
    element_id: str = Field(min_length=1)
    changes: Any = None
    bpmn_xml: str | None = None
