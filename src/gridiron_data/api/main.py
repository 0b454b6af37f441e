"""
FastAPI application for Gridiron Data.

Thin HTTP surface over the snapshot cache and the ESPN team/athlete
clients, with:
- msgspec JSON serialization
- GZip compression
- HTTP cache headers per route family
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import msgspec
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..core.config import get_settings
from ..core.http import UpstreamAPIError
from .dependencies import close_espn_client
from .errors import APIError, api_error_handler, unhandled_error_handler, upstream_error_handler
from .routers import athletes, teams

logger = logging.getLogger(__name__)

# Route prefix -> max-age (seconds) for successful GET responses.
# Longest prefix first; the first match wins.
ROUTE_MAX_AGE: tuple[tuple[str, int], ...] = (
    ("/api/athletes", 60 * 60 * 6),
    ("/api/teams/", 60 * 5),
    ("/api/teams", 60 * 60),
)
DEFAULT_MAX_AGE = 60 * 5


class MSGSpecResponse(Response):
    """Custom response class using msgspec for fast JSON serialization."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        """
        Serialize content using msgspec.

        Args:
            content: Content to serialize

        Returns:
            Serialized JSON bytes
        """
        if content is None:
            return b""
        return msgspec.json.encode(content)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle.

    Shutdown:
    - Close the shared ESPN client
    """
    logger.info("Starting Gridiron Data API...")

    yield

    logger.info("Shutting down Gridiron Data API...")
    try:
        await close_espn_client()
    except Exception as e:
        logger.warning(f"Error closing ESPN client: {e}")


def get_cache_control_header(path: str) -> str:
    """
    Generate Cache-Control header value for an API path.

    Args:
        path: Request path

    Returns:
        Cache-Control header value
    """
    max_age = DEFAULT_MAX_AGE
    for prefix, age in ROUTE_MAX_AGE:
        if path.startswith(prefix):
            max_age = age
            break

    # stale-while-revalidate allows serving stale content while fetching fresh
    return f"public, max-age={max_age}, stale-while-revalidate={max_age // 2}"


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="JSON API for NFL player snapshots and team data",
        version=settings.app_version,
        default_response_class=MSGSpecResponse,
        lifespan=lifespan,
    )

    # CORS middleware - allows web clients to access the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["X-Process-Time"],
    )

    # GZip compression middleware - compresses responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def add_performance_headers(request: Request, call_next):
        """Add timing header and cache headers to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        response.headers["X-Process-Time"] = f"{process_time:.2f}ms"

        path = request.url.path
        if request.method == "GET" and path.startswith("/api/") and "Cache-Control" not in response.headers:
            if response.status_code >= 400:
                response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            else:
                response.headers["Cache-Control"] = get_cache_control_header(path)

        response.headers["Vary"] = "Accept-Encoding"
        return response

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(UpstreamAPIError, upstream_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(tz=timezone.utc).isoformat()}

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "docs": "/docs",
        }

    app.include_router(athletes.router, prefix="/api/athletes", tags=["athletes"])
    app.include_router(teams.router, prefix="/api/teams", tags=["teams"])

    return app


app = create_app()
