from __future__ import annotations

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel


class BpmnDocument(CamelModel):
    bpmn_xml: str = Field(min_length=1)


class BpmnValidation(CamelModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class UserTaskOut(CamelModel):
    id: str | None = None
    name: str | None = None
    assignee: str | None = None


class BpmnSummary(CamelModel):
    workflow_name: str
    user_tasks: list[UserTaskOut] = Field(default_factory=list)
