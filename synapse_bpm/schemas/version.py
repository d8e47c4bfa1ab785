from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel

VersionStatus = Literal["draft", "published", "archived"]


class WorkflowVersionCreate(CamelModel):
    """New version snapshot; version and XML default from the workflow."""

    version: str | None = Field(default=None, min_length=1, max_length=32)
    bpmn_xml: str | None = Field(default=None, min_length=1)
    change_log: str | None = None
    status: VersionStatus = "draft"
    created_by: str | None = None


class WorkflowVersionOut(CamelModel):
    id: int
    workflow_id: int
    version: str
    bpmn_xml: str
    change_log: str | None = None
    status: str
    created_by: str | None = None
    created_at: datetime
