from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from synapse_bpm.models import Task, Workflow, WorkflowInstance, WorkflowVersion
from synapse_bpm.services.activity_service import record_activity

OPEN_TASK_STATUSES = ("pending", "in_progress")


def list_workflows(db: Session) -> list[Workflow]:
    return db.query(Workflow).order_by(Workflow.updated_at.desc(), Workflow.id.desc()).all()


def get_workflow(db: Session, workflow_id: int) -> Workflow | None:
    return db.query(Workflow).filter(Workflow.id == workflow_id).first()


def create_workflow(db: Session, payload: dict[str, Any]) -> Workflow:
    row = Workflow(**payload)
    db.add(row)
    db.flush()
    record_activity(db, "workflow_deployed", f'New workflow "{row.name}" deployed')
    db.commit()
    db.refresh(row)
    return row


def update_workflow(db: Session, workflow_id: int, changes: dict[str, Any]) -> Workflow | None:
    row = get_workflow(db, workflow_id)
    if not row:
        return None
    for key, value in changes.items():
        setattr(row, key, value)
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return row


def delete_workflow(db: Session, workflow_id: int) -> bool:
    deleted = db.query(Workflow).filter(Workflow.id == workflow_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def list_workflows_with_instances(db: Session) -> list[dict[str, Any]]:
    """Every workflow with its instances and the count of its open tasks."""
    workflows = list_workflows(db)
    instances = db.query(WorkflowInstance).order_by(WorkflowInstance.started_at.desc()).all()
    by_workflow: dict[int, list[WorkflowInstance]] = {}
    for instance in instances:
        by_workflow.setdefault(instance.workflow_id, []).append(instance)

    open_counts = dict(
        db.query(WorkflowInstance.workflow_id, func.count(Task.id))
        .join(Task, Task.workflow_instance_id == WorkflowInstance.id)
        .filter(Task.status.in_(OPEN_TASK_STATUSES))
        .group_by(WorkflowInstance.workflow_id)
        .all()
    )
    return [
        {
            "workflow": workflow,
            "instances": by_workflow.get(workflow.id, []),
            "active_tasks": int(open_counts.get(workflow.id, 0)),
        }
        for workflow in workflows
    ]


# Versions


def _version_key(version: str) -> tuple[int, ...] | None:
    try:
        return tuple(int(part) for part in version.split("."))
    except (AttributeError, ValueError):
        return None


def next_version(existing: Iterable[str]) -> str:
    """
    Suggest the next version string after the highest existing one.

    The patch component is incremented; shorter versions are padded first
    ("1.2" -> "1.2.1", "1" -> "1.0.1"). Non-numeric versions are ignored.
    """
    keys = [key for key in (_version_key(v) for v in existing) if key]
    if not keys:
        return "1.0.0"

    # compare as if missing trailing parts were zero
    latest = list(max(keys, key=lambda k: k + (0,) * max(0, 3 - len(k))))
    if len(latest) >= 3:
        latest[2] += 1
    elif len(latest) == 2:
        latest.append(1)
    else:
        latest.extend([0, 1])
    return ".".join(str(part) for part in latest)


def list_versions(db: Session, workflow_id: int) -> list[WorkflowVersion]:
    return (
        db.query(WorkflowVersion)
        .filter(WorkflowVersion.workflow_id == workflow_id)
        .order_by(WorkflowVersion.created_at.desc(), WorkflowVersion.id.desc())
        .all()
    )


def get_version(db: Session, workflow_id: int, version_id: int) -> WorkflowVersion | None:
    return (
        db.query(WorkflowVersion)
        .filter(WorkflowVersion.id == version_id, WorkflowVersion.workflow_id == workflow_id)
        .first()
    )


def create_version(db: Session, workflow: Workflow, payload: dict[str, Any]) -> WorkflowVersion:
    """
    Snapshot a workflow as a new version.

    Missing version strings are derived from the existing versions; missing
    XML is taken from the workflow. A published version becomes the
    workflow's current definition.
    """
    data = dict(payload)
    if not data.get("version"):
        existing = [v for (v,) in db.query(WorkflowVersion.version).filter(WorkflowVersion.workflow_id == workflow.id)]
        data["version"] = next_version(existing)
    if not data.get("bpmn_xml"):
        data["bpmn_xml"] = workflow.bpmn_xml

    row = WorkflowVersion(workflow_id=workflow.id, **data)
    db.add(row)

    if row.status == "published":
        workflow.bpmn_xml = row.bpmn_xml
        workflow.version = row.version
        workflow.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(row)
    return row
