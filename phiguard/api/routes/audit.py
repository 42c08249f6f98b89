"""Audit trail routes — GET /audit/recent."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from phiguard.api.deps import get_db
from phiguard.audit.audit_log import get_recent_events
from phiguard.core.logging import redact
from phiguard.db.models import AuditEvent

router = APIRouter(prefix="/audit", tags=["audit"])


def _serialize_event(ev: AuditEvent) -> dict:
    return {
        "event_type": ev.event_type,
        "actor": redact(ev.actor),
        "findings_count": ev.findings_count,
        "content_length": ev.content_length,
        "context": ev.scan_context,
        "strict_mode": ev.strict_mode,
        "timestamp": ev.timestamp.isoformat() if ev.timestamp else None,
    }


@router.get("/recent", summary="Get most recent scan audit events")
def get_recent(limit: int = Query(default=10, ge=1, le=500), db: Session = Depends(get_db)):
    return [_serialize_event(ev) for ev in get_recent_events(db, limit)]
