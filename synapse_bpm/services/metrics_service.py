from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from synapse_bpm.models import ApiCall, DeploymentPipeline, Task, Workflow, WorkflowInstance
from synapse_bpm.services.activity_service import list_recent_activity


def start_of_day(now: datetime | None = None) -> datetime:
    now = now or datetime.utcnow()
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


class MetricsService:
    """Derives the admin dashboard figures from stored rows."""

    def __init__(self, db: Session, now: datetime | None = None):
        self.db = db
        self.today = start_of_day(now)

    def _count(self, column, *criteria) -> int:
        query = self.db.query(func.count(column))
        if criteria:
            query = query.filter(*criteria)
        return int(query.scalar() or 0)

    def get_admin_metrics(self, activity_limit: int = 10) -> dict[str, Any]:
        calls_today = self._count(ApiCall.id, ApiCall.created_at >= self.today)
        deployments_today = self._count(
            DeploymentPipeline.id, DeploymentPipeline.created_at >= self.today
        )
        failed_deployments = self._count(
            DeploymentPipeline.id,
            DeploymentPipeline.created_at >= self.today,
            DeploymentPipeline.status == "failed",
        )
        return {
            "active_workflows": self._count(WorkflowInstance.id, WorkflowInstance.status == "running"),
            "pending_tasks": self._count(Task.id, Task.status == "pending"),
            "completed_today": self._count(
                Task.id, Task.status == "completed", Task.completed_at >= self.today
            ),
            "system_health": self.get_system_health(),
            "api_calls_today": calls_today,
            "failed_api_calls": self._count(ApiCall.id, ApiCall.status == "failed"),
            "deployments_today": deployments_today,
            "failed_deployments": failed_deployments,
            "total_workflows": self._count(Workflow.id),
            "total_tasks": self._count(Task.id),
            "recent_activity": [
                {"type": event.type, "message": event.message, "timestamp": event.created_at}
                for event in list_recent_activity(self.db, activity_limit)
            ],
        }

    def get_system_health(self) -> float:
        """
        Share of today's finished API calls and deployments that succeeded.

        Reports 100.0 when nothing has finished today.
        """
        finished = ("success", "failed")
        calls = (
            self.db.query(ApiCall.status, func.count(ApiCall.id))
            .filter(ApiCall.created_at >= self.today, ApiCall.status.in_(finished))
            .group_by(ApiCall.status)
            .all()
        )
        deployments = (
            self.db.query(DeploymentPipeline.status, func.count(DeploymentPipeline.id))
            .filter(
                DeploymentPipeline.created_at >= self.today,
                DeploymentPipeline.status.in_(finished),
            )
            .group_by(DeploymentPipeline.status)
            .all()
        )
        totals: dict[str, int] = {"success": 0, "failed": 0}
        for status, count in [*calls, *deployments]:
            totals[status] += int(count)

        finished_total = totals["success"] + totals["failed"]
        if not finished_total:
            return 100.0
        return round(totals["success"] / finished_total * 100, 1)
