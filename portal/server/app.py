"""FastAPI application exposing the proxy routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from portal.client.api_client import ApiClient
from portal.config import PortalSettings, get_settings
from portal.errors import ApiError

from .routes import ROUTERS

logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Relay a backend error status and message to the caller."""
    # Undecodable 2xx bodies are the backend's fault
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    logger.warning("Backend error on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"message": exc.message})


async def transport_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    """Backend unreachable or timed out."""
    logger.error("Backend unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"message": "Backend unavailable"})


def create_app(
    settings: Optional[PortalSettings] = None,
    api_client: Optional[ApiClient] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Portal settings (default: `get_settings()`)
        api_client: Backend client to share across requests; when omitted one
            is created at startup and closed at shutdown

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = None
        if getattr(app.state, "api_client", None) is None:
            owned = ApiClient.from_settings(settings)
            app.state.api_client = owned
        logger.info("Proxying to backend at %s", settings.backend_url)
        try:
            yield
        finally:
            if owned is not None:
                await owned.aclose()
                app.state.api_client = None

    app = FastAPI(title="Timetable Portal", lifespan=lifespan)
    app.state.settings = settings
    app.state.api_client = api_client

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(httpx.HTTPError, transport_error_handler)

    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app
