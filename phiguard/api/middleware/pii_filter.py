"""Response middleware: refuse JSON bodies that still carry raw PHI.

Scan routes mask every matched value before they respond; this
middleware checks the rendered body against the log redaction rules as
a final gate.  A hit replaces the response with HTTP 500 and logs the
name of the rule that fired together with the request path.

Safety note: the offending span is never logged.
"""
from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from phiguard.core.logging import REDACTION_RULES
from phiguard.core.settings import get_settings

logger = logging.getLogger(__name__)

# Recomputed by Response once the body is re-buffered
_SKIP_HEADERS = frozenset({"content-length", "transfer-encoding"})

BLOCKED_DETAIL = "Internal error: response blocked by PII filter."


def find_blocking_rule(text: str) -> str | None:
    """Return the name of the first redaction rule that fires on *text*."""
    for name, pattern in REDACTION_RULES:
        if pattern.search(text):
            return name
    return None


async def _read_body(response: Response) -> bytes:
    chunks: list[bytes] = []
    async for chunk in response.body_iterator:
        chunks.append(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
    return b"".join(chunks)


class PIIFilterMiddleware(BaseHTTPMiddleware):
    """Block JSON responses that contain an unmasked identifier.

    Non-JSON responses pass through untouched, as does everything when
    ``PHI_MASKING_ENABLED`` is off.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        if not get_settings().phi_masking_enabled:
            return response
        if "application/json" not in response.headers.get("content-type", ""):
            return response

        body = await _read_body(response)
        rule = find_blocking_rule(body.decode("utf-8", errors="replace"))
        if rule is not None:
            # SAFETY: rule name and path only
            logger.error("Response blocked by PII filter: rule=%s path=%s", rule, request.url.path)
            return JSONResponse(status_code=500, content={"detail": BLOCKED_DETAIL})

        headers = {k: v for k, v in response.headers.items() if k.lower() not in _SKIP_HEADERS}
        return Response(
            content=body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type,
        )
