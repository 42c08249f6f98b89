"""Append-only audit trail for PHI scans.

One ``AuditEvent`` row per completed scan.  Rows hold scan metadata and a
salted SHA-256 of the scanned content, so repeat scans of the same text
can be correlated without the text ever being stored.  Rows are written
with ``immutable=True`` and are never updated.

Actors are stored with PII-shaped text redacted and source names are
stored masked.  Safety: source names and fingerprints are never logged.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from phiguard.audit.events import VALID_EVENT_TYPES
from phiguard.core.logging import redact
from phiguard.core.security import SecurityService
from phiguard.db.models import AuditEvent
from phiguard.phi.formatter import mask_value
from phiguard.phi.models import ScanResult

logger = logging.getLogger(__name__)


def _require_known_type(event_type: str) -> None:
    if event_type not in VALID_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type {event_type!r}; expected one of {sorted(VALID_EVENT_TYPES)}"
        )


def record_event(
    db_session: Session,
    event_type: str,
    actor: str,
    *,
    findings_count: int,
    content_length: int,
    scan_context: str,
    strict_mode: bool,
    content_sha256: str | None = None,
    source_name: str | None = None,
) -> AuditEvent:
    """Add one immutable scan event to *db_session* and flush it.

    The caller owns the transaction; nothing is committed here.

    Raises ``ValueError`` for an unknown event type, a blank actor, or a
    negative count.
    """
    _require_known_type(event_type)
    if not actor or not actor.strip():
        raise ValueError("actor must be a non-empty string")
    if findings_count < 0 or content_length < 0:
        raise ValueError("findings_count and content_length must be non-negative")

    event = AuditEvent(
        event_type=event_type,
        actor=redact(actor),
        source_name=source_name,
        findings_count=findings_count,
        content_length=content_length,
        scan_context=scan_context,
        strict_mode=strict_mode,
        content_sha256=content_sha256,
        immutable=True,
    )
    db_session.add(event)
    db_session.flush()

    logger.info(
        "Audit event recorded: type=%s actor=%s findings=%d context=%s",
        event_type, event.actor, findings_count, scan_context,
    )
    return event


def record_scan(
    db_session: Session,
    event_type: str,
    actor: str,
    content: str,
    result: ScanResult,
    security: SecurityService,
    source_name: str | None = None,
) -> AuditEvent:
    """Record *result* for *content* without storing the content itself.

    *source_name* is stored masked, never as given.
    """
    return record_event(
        db_session,
        event_type,
        actor,
        findings_count=len(result.findings),
        content_length=result.scanned_length,
        scan_context=result.context.value,
        strict_mode=result.strict_mode,
        content_sha256=security.hash_with_salt(content),
        source_name=mask_value(source_name) if source_name is not None else None,
    )


def get_recent_events(db_session: Session, limit: int = 10) -> list[AuditEvent]:
    """Newest *limit* events, newest first."""
    newest_first = select(AuditEvent).order_by(AuditEvent.timestamp.desc()).limit(limit)
    return list(db_session.scalars(newest_first))


def get_events_by_type(db_session: Session, event_type: str) -> list[AuditEvent]:
    """Every event of *event_type*, oldest first."""
    _require_known_type(event_type)
    oldest_first = (
        select(AuditEvent)
        .where(AuditEvent.event_type == event_type)
        .order_by(AuditEvent.timestamp.asc())
    )
    return list(db_session.scalars(oldest_first))
