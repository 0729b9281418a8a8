"""FastAPI application factory for xcontrol-lint."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from xcontrol import __version__
from xcontrol.api.deps import init_document_store, reset_document_store
from xcontrol.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from xcontrol.api.routers import documents, validation
from xcontrol.api.schemas import HealthResponse
from xcontrol.service.document_store import DocumentStore
from xcontrol.settings import Settings

logger = logging.getLogger("xcontrol.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Create the DocumentStore alongside the application."""
    settings: Settings = app.state.settings
    init_document_store(DocumentStore.from_settings(settings))
    try:
        yield
    finally:
        reset_document_store()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="xcontrol-lint",
        description="Parses xTB xcontrol input files and reports diagnostics.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestBodyLimitMiddleware, max_bytes=settings.max_document_size)
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(validation.router, tags=["validation"])
    app.include_router(documents.router, prefix="/documents", tags=["documents"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "xcontrol-lint API Server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "xcontrol.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
