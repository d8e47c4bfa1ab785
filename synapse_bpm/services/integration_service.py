from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy.orm import Session

from synapse_bpm.models import ApiCall, ApiIntegration
from synapse_bpm.schemas.integration import REDACTED
from synapse_bpm.services.activity_service import record_activity


def list_integrations(db: Session) -> list[ApiIntegration]:
    return db.query(ApiIntegration).order_by(ApiIntegration.id.asc()).all()


def get_integration(db: Session, integration_id: int) -> ApiIntegration | None:
    return db.query(ApiIntegration).filter(ApiIntegration.id == integration_id).first()


def create_integration(db: Session, payload: dict[str, Any]) -> ApiIntegration:
    row = ApiIntegration(**payload)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_integration(db: Session, integration_id: int, changes: dict[str, Any]) -> ApiIntegration | None:
    row = get_integration(db, integration_id)
    if not row:
        return None
    if changes.get("auth_config"):
        # masked values echoed back from a GET keep the stored secret
        stored = row.auth_config or {}
        changes = {
            **changes,
            "auth_config": {
                key: stored.get(key, value) if value == REDACTED else value
                for key, value in changes["auth_config"].items()
            },
        }
    for key, value in changes.items():
        setattr(row, key, value)
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return row


def delete_integration(db: Session, integration_id: int) -> bool:
    deleted = (
        db.query(ApiIntegration)
        .filter(ApiIntegration.id == integration_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


# Call log


def list_api_calls(db: Session, workflow_instance_id: int | None = None) -> list[ApiCall]:
    query = db.query(ApiCall)
    if workflow_instance_id is not None:
        query = query.filter(ApiCall.workflow_instance_id == workflow_instance_id)
    return query.order_by(ApiCall.created_at.desc(), ApiCall.id.desc()).all()


def get_api_call(db: Session, api_call_id: int) -> ApiCall | None:
    return db.query(ApiCall).filter(ApiCall.id == api_call_id).first()


def create_api_call(db: Session, payload: dict[str, Any]) -> ApiCall:
    data = {"status": "pending", "attempts": 1, **payload}
    row = ApiCall(**data)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_api_call(db: Session, api_call_id: int, changes: dict[str, Any]) -> ApiCall | None:
    row = get_api_call(db, api_call_id)
    if not row:
        return None

    previous_status = row.status
    for key, value in changes.items():
        setattr(row, key, value)

    status = changes.get("status")
    if status in ("success", "failed") and row.completed_at is None:
        row.completed_at = datetime.utcnow()
    if status != previous_status:
        if status == "success":
            record_activity(db, "api_call_success", f"API call to {row.endpoint} succeeded")
        elif status == "failed":
            record_activity(db, "api_call_failed", f"API call to {row.endpoint} failed")

    db.commit()
    db.refresh(row)
    return row
