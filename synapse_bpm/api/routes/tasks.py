"""
Task API Routes
Human task list, assignment and completion
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db, get_hub, notify
from synapse_bpm.models import Task
from synapse_bpm.schemas.task import TaskComplete, TaskCreate, TaskOut, TaskUpdate, TaskWithWorkflow
from synapse_bpm.services import task_service
from synapse_bpm.websockets.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _with_workflow(task: Task, workflow_name: str | None, workflow_id: int | None) -> TaskWithWorkflow:
    return TaskWithWorkflow.model_validate(task).model_copy(
        update={"workflow_name": workflow_name, "workflow_id": workflow_id}
    )


@router.get("", response_model=List[TaskWithWorkflow])
async def list_tasks(
    assignee: Optional[str] = None,
    task_status: Optional[str] = Query(default=None, alias="status"),
    workflow_instance_id: Optional[int] = Query(default=None, alias="workflowInstanceId"),
    db: Session = Depends(get_db),
):
    rows = task_service.list_tasks(
        db,
        assignee=assignee,
        status=task_status,
        workflow_instance_id=workflow_instance_id,
    )
    return [_with_workflow(*row) for row in rows]


@router.get("/{task_id}", response_model=TaskOut)
async def get_task(task_id: int, db: Session = Depends(get_db)):
    task = task_service.get_task(db, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskOut.model_validate(task)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    task = TaskOut.model_validate(task_service.create_task(db, payload.model_dump()))
    await notify(hub, "task_created", task)
    return task


@router.put("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = task_service.update_task(db, task_id, payload.changes())
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    task = TaskOut.model_validate(row)
    await notify(hub, "task_updated", task)
    return task


@router.post("/{task_id}/start", response_model=TaskOut)
async def start_task(
    task_id: int,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = task_service.start_task(db, task_id)
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    task = TaskOut.model_validate(row)
    await notify(hub, "task_started", task)
    return task


@router.post("/{task_id}/complete", response_model=TaskOut)
async def complete_task(
    task_id: int,
    payload: Optional[TaskComplete] = Body(default=None),
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    form_data = payload.form_data if payload else None
    row = task_service.complete_task(db, task_id, form_data)
    if not row:
        raise HTTPException(status_code=404, detail="Task not found")
    task = TaskOut.model_validate(row)
    logger.info("Task %s completed", task_id)
    await notify(hub, "task_completed", task)
    return task
