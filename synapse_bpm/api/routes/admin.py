"""
Admin Dashboard Routes
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from synapse_bpm.api.dependencies import get_db
from synapse_bpm.config import settings
from synapse_bpm.schemas.instance import WorkflowInstanceOut
from synapse_bpm.schemas.metrics import AdminMetrics
from synapse_bpm.schemas.workflow import WorkflowOut, WorkflowWithInstances
from synapse_bpm.services import workflow_service
from synapse_bpm.services.metrics_service import MetricsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/metrics", response_model=AdminMetrics)
async def admin_metrics(db: Session = Depends(get_db)):
    try:
        service = MetricsService(db)
        return AdminMetrics.model_validate(service.get_admin_metrics(settings.activity_feed_limit))
    except SQLAlchemyError as exc:
        logger.exception("Admin metrics query failed")
        raise HTTPException(status_code=500, detail="Failed to fetch admin metrics") from exc


@router.get("/workflows", response_model=List[WorkflowWithInstances])
async def admin_workflows(db: Session = Depends(get_db)):
    try:
        rows = workflow_service.list_workflows_with_instances(db)
    except SQLAlchemyError as exc:
        logger.exception("Admin workflow listing failed")
        raise HTTPException(status_code=500, detail="Failed to fetch workflows with instances") from exc

    return [
        WorkflowWithInstances(
            **WorkflowOut.model_validate(row["workflow"]).model_dump(),
            instances=[WorkflowInstanceOut.model_validate(i) for i in row["instances"]],
            active_tasks=row["active_tasks"],
        )
        for row in rows
    ]
