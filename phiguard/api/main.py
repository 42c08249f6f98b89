"""FastAPI application for the PHI scanner.

``create_app`` wires CORS, the PII response filter, error handlers and
the health, scan and audit routers.  ``app`` is the instance served by
uvicorn; phiguard/main.py re-exports it.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from phiguard.api.middleware.pii_filter import PIIFilterMiddleware
from phiguard.api.routes.audit import router as audit_router
from phiguard.api.routes.health import router as health_router
from phiguard.api.routes.phi import router as phi_router
from phiguard.core.errors import InvalidScanInputError, PatternMatchError
from phiguard.core.logging import setup_logging
from phiguard.core.settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    logger.info("PHI scanner starting: environment=%s", get_settings().app_env)
    yield


async def _pattern_match_error(request: Request, exc: PatternMatchError) -> JSONResponse:
    logger.error("PHI scan failed: rule_id=%s path=%s", exc.rule_id, request.url.path)
    return JSONResponse(status_code=500, content=exc.to_dict())


async def _invalid_scan_input(request: Request, exc: InvalidScanInputError) -> JSONResponse:
    return JSONResponse(status_code=422, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    # Last added runs outermost, so every JSON body passes through it
    application.add_middleware(PIIFilterMiddleware)

    application.add_exception_handler(PatternMatchError, _pattern_match_error)
    application.add_exception_handler(InvalidScanInputError, _invalid_scan_input)

    for router in (health_router, phi_router, audit_router):
        application.include_router(router)
    return application


app = create_app()
