from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Literal

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel, PartialUpdate, UtcDatetime

Environment = Literal["development", "staging", "production"]
DeploymentStatus = Literal["pending", "running", "success", "failed"]


class DeploymentCreate(CamelModel):
    workflow_id: int
    version: str = Field(min_length=1, max_length=32)
    environment: Environment = "development"
    status: DeploymentStatus = "pending"
    deployed_by: str | None = None
    deployment_logs: str | None = None


class DeploymentUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"deployment_logs", "deployed_by", "completed_at"})

    environment: Environment | None = None
    status: DeploymentStatus | None = None
    deployed_by: str | None = None
    deployment_logs: str | None = None
    completed_at: UtcDatetime | None = None


class DeploymentOut(CamelModel):
    id: int
    workflow_id: int
    version: str
    environment: str
    status: str
    deployed_by: str | None = None
    deployment_logs: str | None = None
    created_at: datetime
    completed_at: datetime | None = None
