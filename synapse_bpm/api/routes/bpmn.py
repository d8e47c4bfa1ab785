"""
BPMN Utility Routes
"""
from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from synapse_bpm.core.exceptions import BpmnError
from synapse_bpm.schemas.bpmn import BpmnDocument, BpmnSummary, BpmnValidation
from synapse_bpm.services.bpmn import blank_diagram, parse_bpmn_xml, validate_bpmn_xml

router = APIRouter()


@router.post("/validate", response_model=BpmnValidation)
async def validate_diagram(payload: BpmnDocument):
    is_valid, errors = validate_bpmn_xml(payload.bpmn_xml)
    return BpmnValidation(is_valid=is_valid, errors=errors)


@router.post("/parse", response_model=BpmnSummary)
async def parse_diagram(payload: BpmnDocument):
    summary = parse_bpmn_xml(payload.bpmn_xml)
    if summary is None:
        raise BpmnError("Invalid XML format")
    return BpmnSummary.model_validate(summary)


@router.get("/template", response_class=PlainTextResponse)
async def diagram_template():
    """Blank start / user task / end diagram for new workflows."""
    return PlainTextResponse(blank_diagram(), media_type="application/xml")
