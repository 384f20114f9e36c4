"""
FastAPI application factory for docsnap.

This module creates the FastAPI app with:
- Backup service lifecycle management (source store opened on startup)
- CORS configuration
- Exception handlers mapping DocSnapError types to HTTP statuses
- The browsable backup API routes
- Static serving of snapshot files for download

Invariants:
    - Every error response has the shape {"error", "error_code", "details"}
    - Raw exception text reaches clients only when debug is enabled
    - The static mount is registered last so it never shadows a route
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .._version import __version__
from ..config import Settings
from ..errors import (
    ConnectivityError,
    CorruptSnapshotError,
    DocSnapError,
    DuplicateKeyError,
    InvalidIdentifierError,
    InvalidNamespaceError,
    NamespaceNotFoundError,
    NotFoundError,
    SnapshotNotFoundError,
    StorageWriteError,
)
from ..service import BackupService
from .links import LinkPresenter
from .routes import router

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DocSnapError], int]] = [
    (ConnectivityError, 503),
    (NamespaceNotFoundError, 404),
    (NotFoundError, 404),
    (SnapshotNotFoundError, 404),
    (InvalidIdentifierError, 400),
    (InvalidNamespaceError, 400),
    (CorruptSnapshotError, 422),
    (StorageWriteError, 507),
    (DuplicateKeyError, 409),
]


def status_for(error: DocSnapError) -> int:
    """HTTP status for a docsnap error."""
    if getattr(error, "timeout", False):
        return 504
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def _error_body(message: str, code: str, details: dict | None = None) -> dict:
    return {"error": message, "error_code": code, "details": details or {}}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage backup service lifecycle."""
    service: BackupService = app.state.service
    await service.start()

    yield

    await service.stop()


def create_app(
    settings: Settings | None = None,
    service: BackupService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Loaded settings (read from the environment if omitted)
        service: Pre-built service, e.g. one wired to in-memory stores

    Returns:
        Configured application; stores are connected when its lifespan starts
    """
    settings = settings or Settings()
    service = service or BackupService.from_settings(settings)

    app = FastAPI(
        title="docsnap",
        description=(
            "Browse a MongoDB deployment, snapshot collections to dated JSON "
            "files and restore them into another instance."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.state.presenter = LinkPresenter(settings.base_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(DocSnapError)
    async def docsnap_error_handler(request: Request, exc: DocSnapError) -> JSONResponse:
        status = status_for(exc)
        log = logger.error if status >= 500 else logger.info
        log(
            f"Request failed: {exc.message}",
            extra={"path": request.url.path, "status": status, "error_code": exc.code},
        )
        return JSONResponse(
            status_code=status,
            content=_error_body(exc.message, exc.code, exc.details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail), f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", extra={"path": request.url.path})
        details = {"exception": repr(exc)} if settings.debug else {}
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", "INTERNAL", details),
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": "docsnap"}

    app.include_router(router)

    # Snapshot downloads: /{db}-{col}/{file}
    app.mount(
        "/",
        StaticFiles(directory=str(service.snapshot_store.root_dir)),
        name="backups",
    )

    return app
