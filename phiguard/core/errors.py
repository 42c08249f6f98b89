"""Exception types raised by the PHI scanner.

Every error carries a ``details`` dict so the API layer can report the
failing rule or argument without ever echoing scanned text.
"""
from __future__ import annotations

from typing import Any


class PhiGuardError(Exception):
    """Base class for all PHIGuard errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidScanInputError(PhiGuardError, TypeError):
    """Raised when scan arguments have the wrong type or an unknown context."""


class PatternMatchError(PhiGuardError):
    """Raised when a catalog matcher fails while scanning.

    The original exception is chained via ``__cause__``.
    """

    def __init__(self, rule_id: str, message: str) -> None:
        self.rule_id = rule_id
        super().__init__(
            f"Pattern {rule_id!r} failed during matching: {message}",
            {"rule_id": rule_id},
        )
