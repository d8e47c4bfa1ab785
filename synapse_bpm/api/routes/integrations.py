"""
API Integration Routes
Connection descriptors for external systems and their invocation
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db, get_hub, notify
from synapse_bpm.schemas.integration import (
    ApiCallOut,
    ApiCallRequest,
    ApiIntegrationCreate,
    ApiIntegrationOut,
    ApiIntegrationUpdate,
)
from synapse_bpm.services import integration_service
from synapse_bpm.services.integration_client import IntegrationClient, get_integration_client
from synapse_bpm.websockets.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ApiIntegrationOut])
async def list_integrations(db: Session = Depends(get_db)):
    return [ApiIntegrationOut.model_validate(i) for i in integration_service.list_integrations(db)]


@router.get("/{integration_id}", response_model=ApiIntegrationOut)
async def get_integration(integration_id: int, db: Session = Depends(get_db)):
    integration = integration_service.get_integration(db, integration_id)
    if not integration:
        raise HTTPException(status_code=404, detail="Integration not found")
    return ApiIntegrationOut.model_validate(integration)


@router.post("", response_model=ApiIntegrationOut, status_code=status.HTTP_201_CREATED)
async def create_integration(
    payload: ApiIntegrationCreate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    integration = ApiIntegrationOut.model_validate(
        integration_service.create_integration(db, payload.model_dump())
    )
    logger.info("Created integration %s (%s)", integration.id, integration.base_url)
    await notify(hub, "integration_created", integration)
    return integration


@router.put("/{integration_id}", response_model=ApiIntegrationOut)
async def update_integration(
    integration_id: int,
    payload: ApiIntegrationUpdate,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    row = integration_service.update_integration(db, integration_id, payload.changes())
    if not row:
        raise HTTPException(status_code=404, detail="Integration not found")
    integration = ApiIntegrationOut.model_validate(row)
    await notify(hub, "integration_updated", integration)
    return integration


@router.delete("/{integration_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_integration(
    integration_id: int,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
):
    if not integration_service.delete_integration(db, integration_id):
        raise HTTPException(status_code=404, detail="Integration not found")
    await notify(hub, "integration_deleted", {"id": integration_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{integration_id}/execute", response_model=ApiCallOut)
async def execute_integration(
    integration_id: int,
    payload: ApiCallRequest,
    db: Session = Depends(get_db),
    hub: ConnectionManager = Depends(get_hub),
    client: IntegrationClient = Depends(get_integration_client),
):
    integration = integration_service.get_integration(db, integration_id)
    if not integration:
        raise HTTPException(status_code=404, detail="Integration not found")
    call = await client.execute(db, integration, payload.model_dump())
    result = ApiCallOut.model_validate(call)
    await notify(hub, "api_call_completed", result)
    return result
