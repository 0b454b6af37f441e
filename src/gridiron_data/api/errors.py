"""
Unified error handling for consistent API error responses.

All API errors use this format:
{
    "error": "Human-readable message",
    "details": "Optional additional context"
}
"""

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from ..core.http import UpstreamAPIError

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """Base API error class for consistent error responses."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: Any = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.details = details
        super().__init__(
            status_code=status_code,
            detail={"error": message, "details": details},
            headers=headers,
        )


class ExternalServiceError(APIError):
    """Upstream provider error, relayed with the upstream status code."""

    def __init__(self, message: str, error: UpstreamAPIError):
        super().__init__(
            status_code=error.status_code,
            message=message,
            details=error.message,
        )


def error_content(message: str, details: Any = None) -> dict[str, Any]:
    content: dict[str, Any] = {"error": message}
    if details is not None:
        content["details"] = details
    return content


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """
    FastAPI exception handler for APIError.

    Converts APIError exceptions to consistent JSON responses.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(exc.message, exc.details),
        headers=exc.headers,
    )


async def upstream_error_handler(request: Request, exc: UpstreamAPIError) -> JSONResponse:
    """Upstream errors that escaped a router keep the upstream status."""
    logger.warning(f"Upstream error on {request.url.path}: HTTP {exc.status_code} from {exc.url}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content("Failed to load data from ESPN", exc.message),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else is a 500 without internals leaked."""
    logger.error(f"{request.url.path} error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("Unexpected server error"),
    )
