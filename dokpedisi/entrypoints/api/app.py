"""FastAPI application

Dokpedisi backend API for the incoming-letter agenda. Runs as a Cloud Run
service; there is no authentication layer.

Endpoints:
  GET    /health
  GET    /api/documents
  GET    /api/documents/{id}
  POST   /api/documents
  POST   /api/expeditions
  POST   /api/signatures
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

from dokpedisi.entrypoints.api.routes import documents, expeditions, signatures
from dokpedisi.logging_config import setup_logging

# ── Logging ─────────────────────────────────────────────────────────────────
setup_logging()
logger = logging.getLogger(__name__)

# ── FastAPI app ─────────────────────────────────────────────────────────────
app = FastAPI(
    title="Dokpedisi API",
    description="Document expedition tracking for the incoming-letter agenda",
    version="1.0.0",
)

# ── Global exception middleware ─────────────────────────────────────────────
# add_middleware puts later registrations outside earlier ones. This
# middleware is registered before CORSMiddleware so that it sits inside it
# and 500 responses still get CORS headers.
#
# Stack: ServerErrorMiddleware → CORSMiddleware → this → ExceptionMiddleware → Routes


@app.middleware("http")
async def _catch_unhandled_exceptions(
    request: Request, call_next: Callable[[Request], Response]
) -> Response:
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(
            "Unhandled exception: %s %s - %s",
            request.method,
            request.url.path,
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


# ── CORS ────────────────────────────────────────────────────────────────────
# CORS_ORIGINS: comma-separated list of allowed origins
_extra_origins = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_extra_origins if _extra_origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# ── Routers ─────────────────────────────────────────────────────────────────
_PREFIX = "/api"

app.include_router(documents.router, prefix=_PREFIX)
app.include_router(expeditions.router, prefix=_PREFIX)
app.include_router(signatures.router, prefix=_PREFIX)


@app.get("/health")
async def health() -> dict:
    """Health check (Cloud Run startup probe)"""
    return {"status": "ok"}


logger.info("Dokpedisi API started")
