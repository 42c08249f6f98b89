from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Integer, String, func, text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from phiguard.db.base import Base


class AuditEvent(Base):
    """Append-only record of a PHI scan.

    Scanned content is never stored; ``content_sha256`` is a salted
    fingerprint so repeat scans of the same text can be correlated.
    Rows are immutable by default — ``immutable=True``.
    """

    __tablename__ = "audit_events"

    audit_event_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    actor: Mapped[str] = mapped_column(
        String(128), nullable=False, default="system", server_default=sql_text("'system'"),
    )
    source_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    findings_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content_length: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    scan_context: Mapped[str] = mapped_column(String(32), nullable=False)
    strict_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    content_sha256: Mapped[str | None] = mapped_column(String(64), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    immutable: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sql_text("true"),
    )
