from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Literal

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel, PartialUpdate
from synapse_bpm.schemas.instance import WorkflowInstanceOut

WorkflowStatus = Literal["draft", "active", "inactive", "archived"]


class WorkflowCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    bpmn_xml: str = Field(min_length=1)
    version: str = Field(default="1.0.0", min_length=1, max_length=32)
    status: WorkflowStatus = "draft"
    created_by: str | None = None


class WorkflowUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"description", "created_by"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    bpmn_xml: str | None = Field(default=None, min_length=1)
    version: str | None = Field(default=None, min_length=1, max_length=32)
    status: WorkflowStatus | None = None
    created_by: str | None = None


class WorkflowOut(CamelModel):
    id: int
    name: str
    description: str | None = None
    bpmn_xml: str
    version: str
    status: str
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class WorkflowWithInstances(WorkflowOut):
    instances: list[WorkflowInstanceOut] = Field(default_factory=list)
    active_tasks: int = 0
