from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Literal

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel, PartialUpdate, UtcDatetime

TaskStatus = Literal["pending", "in_progress", "completed", "failed"]
TaskPriority = Literal["low", "medium", "high"]


class TaskCreate(CamelModel):
    workflow_instance_id: int
    task_definition_key: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    assignee: str | None = None
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: UtcDatetime | None = None
    form_data: dict[str, Any] = Field(default_factory=dict)


class TaskUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"description", "assignee", "due_date"})

    workflow_instance_id: int | None = None
    task_definition_key: str | None = Field(default=None, min_length=1)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    assignee: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: UtcDatetime | None = None
    form_data: dict[str, Any] | None = None


class TaskComplete(CamelModel):
    form_data: dict[str, Any] | None = None


class TaskOut(CamelModel):
    id: int
    workflow_instance_id: int
    task_definition_key: str
    name: str
    description: str | None = None
    assignee: str | None = None
    status: str
    priority: str
    due_date: datetime | None = None
    form_data: dict[str, Any] | None = None
    created_at: datetime
    completed_at: datetime | None = None


class TaskWithWorkflow(TaskOut):
    workflow_name: str | None = None
    workflow_id: int | None = None
