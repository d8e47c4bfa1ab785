from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from synapse_bpm.models import Workflow, WorkflowInstance
from synapse_bpm.services.activity_service import record_activity

TERMINAL_STATUSES = ("completed", "failed")


def list_instances(db: Session, workflow_id: int | None = None) -> list[WorkflowInstance]:
    query = db.query(WorkflowInstance)
    if workflow_id is not None:
        query = query.filter(WorkflowInstance.workflow_id == workflow_id)
    return query.order_by(WorkflowInstance.started_at.desc(), WorkflowInstance.id.desc()).all()


def get_instance(db: Session, instance_id: int) -> WorkflowInstance | None:
    return db.query(WorkflowInstance).filter(WorkflowInstance.id == instance_id).first()


def _workflow_name(db: Session, workflow_id: int) -> str | None:
    row = db.query(Workflow.name).filter(Workflow.id == workflow_id).first()
    return row[0] if row else None


def create_instance(db: Session, payload: dict[str, Any]) -> WorkflowInstance:
    row = WorkflowInstance(**payload)
    if row.status in TERMINAL_STATUSES:
        row.completed_at = datetime.utcnow()
    db.add(row)

    name = _workflow_name(db, row.workflow_id)
    if name:
        record_activity(db, "workflow_started", f'Workflow "{name}" instance started')

    db.commit()
    db.refresh(row)
    return row


def update_instance(db: Session, instance_id: int, changes: dict[str, Any]) -> WorkflowInstance | None:
    row = get_instance(db, instance_id)
    if not row:
        return None

    previous_status = row.status
    for key, value in changes.items():
        setattr(row, key, value)

    new_status = changes.get("status")
    if new_status in TERMINAL_STATUSES and new_status != previous_status:
        row.completed_at = datetime.utcnow()
        name = _workflow_name(db, row.workflow_id)
        if name:
            if new_status == "completed":
                record_activity(db, "workflow_completed", f'Workflow "{name}" completed')
            else:
                record_activity(db, "workflow_failed", f'Workflow "{name}" failed')

    db.commit()
    db.refresh(row)
    return row
