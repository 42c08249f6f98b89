"""Logging setup with PHI redaction.

Every handler installed by ``setup_logging`` carries ``PIISafeFilter``,
which rewrites the message and its arguments before formatting.  The
same patterns back ``PIIFilterMiddleware``, so anything that would be
redacted in a log line is also refused in a JSON response.
"""
import logging
import logging.config
import re

# (name, pattern); a pattern with groups keeps group 1 and redacts the rest
REDACTION_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("email", re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")),
    ("ssn", re.compile(r"\b\d{3}-?\d{2}-?\d{4}\b")),
    ("card", re.compile(r"\b(?:\d[ -]*?){13,16}\b")),
    ("phone", re.compile(r"\b(?:\+1[-.\s]?)?(?:\(?\d{3}\)?[-.\s]?)\d{3}[-.\s]?\d{4}\b")),
    ("keyed_identifier", re.compile(r"(?i)(\b(?:mrn|dob)\s*[:#=]\s*)([\w/-]*\d[\w/-]*)")),
    ("scanned_text", re.compile(r"(?i)((?:matched_text|content)\s*[=:]\s*)([^,\s]+)")),
)


REDACTED = "[REDACTED]"


def redact(value: str) -> str:
    for _, pattern in REDACTION_RULES:
        replacement = rf"\1{REDACTED}" if pattern.groups else REDACTED
        value = pattern.sub(replacement, value)
    return value


class PIISafeFilter(logging.Filter):
    """Redact PHI-shaped values from a record's message and arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        elif isinstance(record.args, dict):
            record.args = {
                key: redact(a) if isinstance(a, str) else a for key, a in record.args.items()
            }

        return True


def _logging_config(level: str) -> dict:
    quiet = {"level": "WARNING", "handlers": ["console"], "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"phi_redaction": {"()": "phiguard.core.logging.PIISafeFilter"}},
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["phi_redaction"],
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            "uvicorn.access": quiet,
            "sqlalchemy.engine": dict(quiet),
        },
    }


def setup_logging() -> None:
    from phiguard.core.settings import get_settings

    logging.config.dictConfig(_logging_config(get_settings().log_level.upper()))
