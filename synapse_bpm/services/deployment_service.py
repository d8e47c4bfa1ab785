from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from synapse_bpm.models import DeploymentPipeline, Workflow
from synapse_bpm.services.activity_service import record_activity

FINISHED_STATUSES = ("success", "failed")


def list_deployments(db: Session, workflow_id: int | None = None) -> list[DeploymentPipeline]:
    query = db.query(DeploymentPipeline)
    if workflow_id is not None:
        query = query.filter(DeploymentPipeline.workflow_id == workflow_id)
    return query.order_by(DeploymentPipeline.created_at.desc(), DeploymentPipeline.id.desc()).all()


def get_deployment(db: Session, deployment_id: int) -> DeploymentPipeline | None:
    return db.query(DeploymentPipeline).filter(DeploymentPipeline.id == deployment_id).first()


def _record_outcome(db: Session, row: DeploymentPipeline) -> None:
    workflow = db.query(Workflow.name).filter(Workflow.id == row.workflow_id).first()
    label = f'"{workflow[0]}" v{row.version}' if workflow else f"workflow {row.workflow_id} v{row.version}"
    if row.status == "success":
        record_activity(db, "workflow_deployed", f"{label} deployed to {row.environment}")
    elif row.status == "failed":
        record_activity(db, "deployment_failed", f"Deployment of {label} to {row.environment} failed")


def create_deployment(db: Session, payload: dict[str, Any]) -> DeploymentPipeline:
    row = DeploymentPipeline(**payload)
    if row.status in FINISHED_STATUSES:
        if row.completed_at is None:
            row.completed_at = datetime.utcnow()
        _record_outcome(db, row)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_deployment(db: Session, deployment_id: int, changes: dict[str, Any]) -> DeploymentPipeline | None:
    row = get_deployment(db, deployment_id)
    if not row:
        return None

    previous_status = row.status
    for key, value in changes.items():
        setattr(row, key, value)

    if row.status in FINISHED_STATUSES and row.status != previous_status:
        if row.completed_at is None:
            row.completed_at = datetime.utcnow()
        _record_outcome(db, row)

    db.commit()
    db.refresh(row)
    return row
