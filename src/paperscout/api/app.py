"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from paperscout import __version__
from paperscout.api.deps import set_engine
from paperscout.api.v1.router import router as v1_router
from paperscout.config.settings import Settings, load_settings
from paperscout.core.engine import PaperScoutEngine
from paperscout.core.exceptions import (
    AdapterNotRegisteredError,
    DownloadError,
    PaperScoutError,
    PlatformError,
    PluginDisabledError,
    TransientNetworkError,
    ValidationError,
    serialize_error,
)
from paperscout.models.response import ErrorPayload
from paperscout.observability.logging import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("paperscout-config.yaml")


def status_code_for(error: BaseException) -> int:
    """HTTP status for an error crossing the API boundary."""
    if isinstance(error, AdapterNotRegisteredError | PluginDisabledError):
        return 404
    if isinstance(error, PlatformError):
        return 400
    if isinstance(error, ValidationError):
        return 422
    if isinstance(error, TransientNetworkError):
        return 503
    if isinstance(error, DownloadError):
        return 502
    return 500


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads the file named by
            ``PAPERSCOUT_CONFIG_FILE``, else ``paperscout-config.yaml`` when
            present, else the environment only.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        config_file = os.environ.get("PAPERSCOUT_CONFIG_FILE")
        config_path = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
        if config_file or config_path.exists():
            logger.info("Loading configuration from %s", config_path)
            settings = load_settings(config_path)
        else:
            settings = load_settings()

    include_stack = settings.log_level == "debug"

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        setup_logging(settings)
        logger.info("Starting PaperScout v%s", __version__)

        engine = PaperScoutEngine(settings)
        await engine.initialize()
        set_engine(engine)

        app.state.settings = settings
        app.state.engine = engine

        logger.info("PaperScout is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down PaperScout...")
        await engine.shutdown()
        set_engine(None)
        logger.info("PaperScout shutdown complete")

    app = FastAPI(
        title="PaperScout",
        description="Uniform search, download and full-text access across academic paper sources.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Error handlers ────────────────────────────────────────────────────

    @app.exception_handler(PaperScoutError)
    async def paperscout_error_handler(request: Request, exc: PaperScoutError) -> JSONResponse:
        status = status_code_for(exc)
        log = logger.error if status >= 500 else logger.info
        log("%s %s failed: %s: %s", request.method, request.url.path, type(exc).__name__, exc)
        payload = serialize_error(exc, include_stack=include_stack)
        return JSONResponse(status_code=status, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        payload = ErrorPayload(
            name="ValidationError",
            message="Invalid request",
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=422, content=payload.model_dump(exclude_none=True))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        payload = serialize_error(exc, include_stack=include_stack)
        return JSONResponse(status_code=500, content=payload.model_dump(exclude_none=True))

    app.include_router(v1_router, prefix="/v1")

    return app
