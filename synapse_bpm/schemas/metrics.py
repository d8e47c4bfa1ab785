from __future__ import annotations

from datetime import datetime

from pydantic import Field

from synapse_bpm.schemas.common import CamelModel


class ActivityOut(CamelModel):
    type: str
    message: str
    timestamp: datetime


class AdminMetrics(CamelModel):
    active_workflows: int = 0
    pending_tasks: int = 0
    completed_today: int = 0
    system_health: float = 100.0
    api_calls_today: int = 0
    failed_api_calls: int = 0
    deployments_today: int = 0
    failed_deployments: int = 0
    total_workflows: int = 0
    total_tasks: int = 0
    recent_activity: list[ActivityOut] = Field(default_factory=list)
