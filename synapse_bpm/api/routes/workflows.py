"""
Workflow API Routes
Workflow definitions, their versions, instances and deployments
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db, get_hub, notify
from synapse_bpm.schemas.deployment import DeploymentOut
from synapse_bpm.schemas.instance import WorkflowInstanceOut
from synapse_bpm.schemas.version import WorkflowVersionCreate, WorkflowVersionOut
from synapse_bpm.schemas.workflow import WorkflowCreate, WorkflowOut, WorkflowUpdate
from synapse_bpm.services import deployment_service, instance_service, workflow_service
from synapse_bpm.websockets.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_workflow(db: Session, workflow_id: int):
    workflow = workflow_service.get_workflow(db, workflow_id)
    if not workflow:
        raise HTTPException(status_code=404, detail="Workflow not found")
    return workflow


@router.get("", response_model=List[WorkflowOut])
async def list_workflows(db: Session = Depends(get_db)):
    return [WorkflowOut.model_validate(w) for w in workflow_service.list_workflows(db)]


@router.get("/{workflow_id}", response_model=WorkflowOut)
async def get_workflow(workflow_id: int, db: Session = Depends(get_db)):
    return WorkflowOut.model_validate(_require_workflow(db, workflow_id))


@router.post("", response_model=WorkflowOut, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    payload: WorkflowCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    workflow = WorkflowOut.model_validate(workflow_service.create_workflow(db, payload.model_dump()))
    logger.info("Created workflow %s (%s)", workflow.id, workflow.name)
    await notify(hub, "workflow_created", workflow)
    return workflow


@router.put("/{workflow_id}", response_model=WorkflowOut)
async def update_workflow(
    workflow_id: int,
    payload: WorkflowUpdate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = workflow_service.update_workflow(db, workflow_id, payload.changes())
    if not row:
        raise HTTPException(status_code=404, detail="Workflow not found")
    workflow = WorkflowOut.model_validate(row)
    await notify(hub, "workflow_updated", workflow)
    return workflow


@router.delete("/{workflow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workflow(
    workflow_id: int,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    if not workflow_service.delete_workflow(db, workflow_id):
        raise HTTPException(status_code=404, detail="Workflow not found")
    logger.info("Deleted workflow %s", workflow_id)
    await notify(hub, "workflow_deleted", {"id": workflow_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{workflow_id}/instances", response_model=List[WorkflowInstanceOut])
async def list_workflow_instances(workflow_id: int, db: Session = Depends(get_db)):
    return [
        WorkflowInstanceOut.model_validate(i)
        for i in instance_service.list_instances(db, workflow_id=workflow_id)
    ]


@router.get("/{workflow_id}/deployments", response_model=List[DeploymentOut])
async def list_workflow_deployments(workflow_id: int, db: Session = Depends(get_db)):
    return [
        DeploymentOut.model_validate(d)
        for d in deployment_service.list_deployments(db, workflow_id=workflow_id)
    ]


@router.get("/{workflow_id}/versions", response_model=List[WorkflowVersionOut])
async def list_versions(workflow_id: int, db: Session = Depends(get_db)):
    _require_workflow(db, workflow_id)
    return [WorkflowVersionOut.model_validate(v) for v in workflow_service.list_versions(db, workflow_id)]


@router.post(
    "/{workflow_id}/versions",
    response_model=WorkflowVersionOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_version(
    workflow_id: int,
    payload: WorkflowVersionCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    workflow = _require_workflow(db, workflow_id)
    version = WorkflowVersionOut.model_validate(
        workflow_service.create_version(db, workflow, payload.model_dump())
    )
    logger.info("Workflow %s version %s created (%s)", workflow_id, version.version, version.status)
    await notify(hub, "version_created", version)
    if version.status == "published":
        await notify(hub, "workflow_updated", WorkflowOut.model_validate(workflow))
    return version


@router.get("/{workflow_id}/versions/{version_id}", response_model=WorkflowVersionOut)
async def get_version(workflow_id: int, version_id: int, db: Session = Depends(get_db)):
    version = workflow_service.get_version(db, workflow_id, version_id)
    if not version:
        raise HTTPException(status_code=404, detail="Workflow version not found")
    return WorkflowVersionOut.model_validate(version)
