from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from synapse_bpm.models import Task, Workflow, WorkflowInstance
from synapse_bpm.services.activity_service import record_activity


def list_tasks(
    db: Session,
    assignee: str | None = None,
    status: str | None = None,
    workflow_instance_id: int | None = None,
) -> list[tuple[Task, str | None, int | None]]:
    """
    Tasks with the name and id of the workflow they belong to.

    The workflow is resolved through the task's instance with outer joins,
    so tasks whose instance or workflow is gone are still listed.
    """
    query = (
        db.query(Task, Workflow.name, Workflow.id)
        .outerjoin(WorkflowInstance, Task.workflow_instance_id == WorkflowInstance.id)
        .outerjoin(Workflow, WorkflowInstance.workflow_id == Workflow.id)
    )
    if assignee:
        query = query.filter(Task.assignee == assignee)
    if status:
        query = query.filter(Task.status == status)
    if workflow_instance_id is not None:
        query = query.filter(Task.workflow_instance_id == workflow_instance_id)
    return [tuple(row) for row in query.order_by(Task.created_at.desc(), Task.id.desc()).all()]


def get_task(db: Session, task_id: int) -> Task | None:
    return db.query(Task).filter(Task.id == task_id).first()


def create_task(db: Session, payload: dict[str, Any]) -> Task:
    row = Task(**payload)
    if row.status == "completed":
        row.completed_at = datetime.utcnow()
    db.add(row)
    if row.assignee:
        record_activity(db, "task_assigned", f'Task "{row.name}" assigned to {row.assignee}')
    db.commit()
    db.refresh(row)
    return row


def update_task(db: Session, task_id: int, changes: dict[str, Any]) -> Task | None:
    row = get_task(db, task_id)
    if not row:
        return None

    previous_assignee = row.assignee
    previous_status = row.status
    for key, value in changes.items():
        setattr(row, key, value)

    if changes.get("status") == "completed" and previous_status != "completed":
        row.completed_at = datetime.utcnow()
    if row.assignee and row.assignee != previous_assignee:
        record_activity(db, "task_assigned", f'Task "{row.name}" assigned to {row.assignee}')

    db.commit()
    db.refresh(row)
    return row


def start_task(db: Session, task_id: int) -> Task | None:
    return update_task(db, task_id, {"status": "in_progress"})


def complete_task(db: Session, task_id: int, form_data: dict[str, Any] | None) -> Task | None:
    return update_task(db, task_id, {"status": "completed", "form_data": form_data or {}})
