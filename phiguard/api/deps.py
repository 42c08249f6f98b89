"""FastAPI dependency injection — database sessions and service factories."""
from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from phiguard.core.security import SecurityService
from phiguard.core.settings import get_settings
from phiguard.db.session import get_db_session


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    yield from get_db_session()


def get_security_service() -> SecurityService:
    """Return a SecurityService salted for audit fingerprints."""
    return SecurityService(salt=get_settings().audit_salt)
