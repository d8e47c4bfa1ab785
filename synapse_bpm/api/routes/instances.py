"""
Workflow Instance API Routes
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db, get_hub, notify
from synapse_bpm.schemas.instance import WorkflowInstanceCreate, WorkflowInstanceOut, WorkflowInstanceUpdate
from synapse_bpm.schemas.integration import ApiCallOut
from synapse_bpm.schemas.task import TaskWithWorkflow
from synapse_bpm.services import instance_service, integration_service, task_service
from synapse_bpm.websockets.connection_manager import ConnectionManager

router = APIRouter()


@router.get("", response_model=List[WorkflowInstanceOut])
async def list_instances(db: Session = Depends(get_db)):
    return [WorkflowInstanceOut.model_validate(i) for i in instance_service.list_instances(db)]


@router.get("/{instance_id}", response_model=WorkflowInstanceOut)
async def get_instance(instance_id: int, db: Session = Depends(get_db)):
    instance = instance_service.get_instance(db, instance_id)
    if not instance:
        raise HTTPException(status_code=404, detail="Workflow instance not found")
    return WorkflowInstanceOut.model_validate(instance)


@router.post("", response_model=WorkflowInstanceOut, status_code=status.HTTP_201_CREATED)
async def create_instance(
    payload: WorkflowInstanceCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    instance = WorkflowInstanceOut.model_validate(instance_service.create_instance(db, payload.model_dump()))
    await notify(hub, "instance_created", instance)
    return instance


@router.put("/{instance_id}", response_model=WorkflowInstanceOut)
async def update_instance(
    instance_id: int,
    payload: WorkflowInstanceUpdate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = instance_service.update_instance(db, instance_id, payload.changes())
    if not row:
        raise HTTPException(status_code=404, detail="Workflow instance not found")
    instance = WorkflowInstanceOut.model_validate(row)
    await notify(hub, "instance_updated", instance)
    return instance


@router.get("/{instance_id}/tasks", response_model=List[TaskWithWorkflow])
async def list_instance_tasks(instance_id: int, db: Session = Depends(get_db)):
    return [
        TaskWithWorkflow.model_validate(task).model_copy(
            update={"workflow_name": workflow_name, "workflow_id": workflow_id}
        )
        for task, workflow_name, workflow_id in task_service.list_tasks(db, workflow_instance_id=instance_id)
    ]


@router.get("/{instance_id}/api-calls", response_model=List[ApiCallOut])
async def list_instance_api_calls(instance_id: int, db: Session = Depends(get_db)):
    return [
        ApiCallOut.model_validate(c)
        for c in integration_service.list_api_calls(db, workflow_instance_id=instance_id)
    ]
