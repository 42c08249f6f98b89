"""PHI detection routes.

POST /phi/detect     JSON body, scans the supplied text.
POST /phi/scan-file  multipart upload; context inferred from the file name.

Safety: matched values leave this module masked (unless masking is
disabled in settings), and only scan metadata is written to the audit
trail.  A zero-finding scan returns the explicit "No PHI Detected"
report, never an empty body.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from phiguard.api.deps import get_db, get_security_service
from phiguard.audit.audit_log import record_scan
from phiguard.audit.events import (
    EVENT_PHI_DETECTION_COMPLETED,
    EVENT_PHI_SCAN_FILE,
    EVENT_PHI_SCAN_SELECTION,
)
from phiguard.core.errors import InvalidScanInputError
from phiguard.core.security import SecurityService
from phiguard.core.settings import get_settings
from phiguard.phi.context import context_for_filename
from phiguard.phi.engine import scan_for_phi
from phiguard.phi.formatter import format_report, mask_value, masked_finding, summarize_findings
from phiguard.phi.models import ScanResult
from phiguard.phi.patterns import ScanContext

router = APIRouter(prefix="/phi", tags=["phi"])

_DEFAULT_ACTOR = "api"


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class DetectBody(BaseModel):
    content: str = ""
    context: ScanContext = ScanContext.GENERAL
    strict_mode: bool | None = None
    selection: bool = False
    actor: str = _DEFAULT_ACTOR


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_content(content: str) -> None:
    if not content:
        raise HTTPException(status_code=400, detail="Content is required for PHI detection.")
    limit = get_settings().phi_max_content_chars
    if len(content) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"Content exceeds the {limit} character scan limit.",
        )


def _run_scan(content: str, context: ScanContext, strict_mode: bool | None) -> ScanResult:
    strict = get_settings().phi_strict_mode if strict_mode is None else strict_mode
    try:
        return scan_for_phi(content, context, strict)
    except InvalidScanInputError as exc:
        raise HTTPException(status_code=422, detail=exc.message) from exc


def _serialize_result(result: ScanResult, source_name: str | None = None) -> dict:
    if get_settings().phi_masking_enabled:
        findings = [masked_finding(f) for f in result.findings]
    else:
        findings = [
            {**masked_finding(f), "match": f.matched_text} for f in result.findings
        ]
    body = {
        "findings": findings,
        "scanned_length": result.scanned_length,
        "context": result.context.value,
        "strict_mode": result.strict_mode,
        "has_phi": result.has_phi,
        "summary": summarize_findings(result),
        "report": format_report(result),
    }
    if source_name is not None:
        body["source_name"] = source_name
    return body


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/detect", summary="Scan text for PHI")
def detect(
    body: DetectBody,
    db: Session = Depends(get_db),
    security: SecurityService = Depends(get_security_service),
):
    _check_content(body.content)
    result = _run_scan(body.content, body.context, body.strict_mode)

    event_type = EVENT_PHI_SCAN_SELECTION if body.selection else EVENT_PHI_DETECTION_COMPLETED
    record_scan(db, event_type, body.actor, body.content, result, security)
    return _serialize_result(result)


@router.post("/scan-file", summary="Scan an uploaded file for PHI")
async def scan_file(
    file: UploadFile = File(...),
    strict_mode: bool | None = None,
    db: Session = Depends(get_db),
    security: SecurityService = Depends(get_security_service),
):
    filename = file.filename or "unknown"
    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=415, detail="Only UTF-8 text files can be scanned.")

    _check_content(content)
    context = context_for_filename(filename)
    result = _run_scan(content, context, strict_mode)

    record_scan(db, EVENT_PHI_SCAN_FILE, _DEFAULT_ACTOR, content, result, security, source_name=filename)
    shown_name = mask_value(filename) if get_settings().phi_masking_enabled else filename
    return _serialize_result(result, source_name=shown_name)
