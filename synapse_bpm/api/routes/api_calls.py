"""
API Call Log Routes
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db
from synapse_bpm.schemas.integration import ApiCallOut
from synapse_bpm.services import integration_service

router = APIRouter()


@router.get("", response_model=List[ApiCallOut])
async def list_api_calls(
    workflow_instance_id: Optional[int] = Query(default=None, alias="workflowInstanceId"),
    db: Session = Depends(get_db),
):
    return [
        ApiCallOut.model_validate(c)
        for c in integration_service.list_api_calls(db, workflow_instance_id=workflow_instance_id)
    ]


@router.get("/{api_call_id}", response_model=ApiCallOut)
async def get_api_call(api_call_id: int, db: Session = Depends(get_db)):
    call = integration_service.get_api_call(db, api_call_id)
    if not call:
        raise HTTPException(status_code=404, detail="API call not found")
    return ApiCallOut.model_validate(call)
