"""GET /health — liveness check plus the scanner defaults in effect."""
from __future__ import annotations

from fastapi import APIRouter

from phiguard.core.settings import get_settings
from phiguard.phi.patterns import PHI_PATTERNS

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and scanner defaults")
def health_check() -> dict[str, str | int | bool]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
        "pattern_count": len(PHI_PATTERNS),
        "strict_mode_default": settings.phi_strict_mode,
        "masking_enabled": settings.phi_masking_enabled,
    }
