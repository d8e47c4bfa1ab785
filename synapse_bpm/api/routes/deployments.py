"""
Deployment Pipeline API Routes
Promotion of workflow versions to environments
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db, get_hub, notify
from synapse_bpm.schemas.deployment import DeploymentCreate, DeploymentOut, DeploymentUpdate
from synapse_bpm.services import deployment_service, workflow_service
from synapse_bpm.websockets.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[DeploymentOut])
async def list_deployments(
    workflow_id: Optional[int] = Query(default=None, alias="workflowId"),
    db: Session = Depends(get_db),
):
    return [DeploymentOut.model_validate(d) for d in deployment_service.list_deployments(db, workflow_id)]


@router.get("/{deployment_id}", response_model=DeploymentOut)
async def get_deployment(deployment_id: int, db: Session = Depends(get_db)):
    deployment = deployment_service.get_deployment(db, deployment_id)
    if not deployment:
        raise HTTPException(status_code=404, detail="Deployment not found")
    return DeploymentOut.model_validate(deployment)


@router.post("", response_model=DeploymentOut, status_code=status.HTTP_201_CREATED)
async def create_deployment(
    payload: DeploymentCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    if not workflow_service.get_workflow(db, payload.workflow_id):
        raise HTTPException(status_code=404, detail="Workflow not found")
    deployment = DeploymentOut.model_validate(deployment_service.create_deployment(db, payload.model_dump()))
    logger.info(
        "Deployment %s: workflow %s v%s to %s",
        deployment.id, deployment.workflow_id, deployment.version, deployment.environment,
    )
    await notify(hub, "deployment_created", deployment)
    return deployment


@router.patch("/{deployment_id}", response_model=DeploymentOut)
async def update_deployment(
    deployment_id: int,
    payload: DeploymentUpdate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = deployment_service.update_deployment(db, deployment_id, payload.changes())
    if not row:
        raise HTTPException(status_code=404, detail="Deployment not found")
    deployment = DeploymentOut.model_validate(row)
    await notify(hub, "deployment_updated", deployment)
    return deployment
