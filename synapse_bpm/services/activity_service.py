from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from synapse_bpm.models import ActivityEvent

logger = logging.getLogger(__name__)

MAX_ACTIVITY_EVENTS = 50

ACTIVITY_TYPES = frozenset(
    {
        "workflow_deployed",
        "workflow_started",
        "workflow_completed",
        "workflow_failed",
        "task_assigned",
        "api_call_success",
        "api_call_failed",
        "deployment_failed",
    }
)


def record_activity(db: Session, event_type: str, message: str) -> ActivityEvent:
    """Add an activity event to the session; the caller commits."""
    if event_type not in ACTIVITY_TYPES:
        raise ValueError(f"Unknown activity type: {event_type}")
    event = ActivityEvent(type=event_type, message=message)
    db.add(event)
    db.flush()
    _prune(db)
    logger.debug("Activity %s: %s", event_type, message)
    return event


def _prune(db: Session) -> None:
    stale_ids = [
        row_id
        for (row_id,) in db.query(ActivityEvent.id)
        .order_by(ActivityEvent.id.desc())
        .offset(MAX_ACTIVITY_EVENTS)
        .all()
    ]
    if stale_ids:
        db.query(ActivityEvent).filter(ActivityEvent.id.in_(stale_ids)).delete(synchronize_session=False)


def list_recent_activity(db: Session, limit: int = 10) -> list[ActivityEvent]:
    return (
        db.query(ActivityEvent)
        .order_by(ActivityEvent.id.desc())
        .limit(limit)
        .all()
    )
