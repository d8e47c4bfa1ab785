from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Literal

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel, PartialUpdate

InstanceStatus = Literal["running", "completed", "failed", "paused"]


class WorkflowInstanceCreate(CamelModel):
    workflow_id: int
    status: InstanceStatus = "running"
    current_step: str | None = None
    variables: dict[str, Any] = Field(default_factory=dict)


class WorkflowInstanceUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"current_step"})

    workflow_id: int | None = None
    status: InstanceStatus | None = None
    current_step: str | None = None
    variables: dict[str, Any] | None = None


class WorkflowInstanceOut(CamelModel):
    id: int
    workflow_id: int
    status: str
    current_step: str | None = None
    variables: dict[str, Any] | None = None
    started_at: datetime
    completed_at: datetime | None = None
