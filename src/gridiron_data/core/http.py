"""
Shared HTTP client infrastructure for the upstream sports data provider.

Provides BaseApiClient with rate limiting, retries, and typed errors.
The ESPN gateway (providers/espn.py) builds on it to reach several
fixed base URLs through one pooled httpx client.

Usage:
    class MyClient(BaseApiClient):
        BASE_URL = "https://api.example.com"

        async def get_data(self) -> dict:
            return await self._get("/data", revalidate=300, cache_tags=["data"])
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Sequence

import httpx

logger = logging.getLogger(__name__)

# Request extension key carrying the advisory freshness hint for a call.
CACHE_EXTENSION = "gridiron.cache"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ExternalAPIError(Exception):
    """Base exception for external API errors."""

    def __init__(
        self,
        message: str,
        code: str = "EXTERNAL_API_ERROR",
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class UpstreamAPIError(ExternalAPIError):
    """Non-success HTTP response from the upstream provider.

    Carries the numeric status and the raw response text so the API layer
    can surface both to clients.
    """

    def __init__(self, message: str, status_code: int, body: str = "", url: str = ""):
        super().__init__(message, code="UPSTREAM_API_ERROR", status_code=status_code)
        self.body = body
        self.url = url

    @property
    def status(self) -> int:
        return self.status_code


class RateLimitError(UpstreamAPIError):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, message: str, retry_after: int = 60, body: str = "", url: str = ""):
        super().__init__(message, status_code=429, body=body, url=url)
        self.code = "RATE_LIMITED"
        self.retry_after = retry_after


# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------

class RateLimiter:
    """Simple token bucket rate limiter for async API calls."""

    def __init__(self, requests_per_minute: int = 600):
        self.delay = 60.0 / requests_per_minute if requests_per_minute > 0 else 0.0
        self._last_request = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait until we can make a request."""
        if not self.delay:
            return
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request
            if elapsed < self.delay:
                await asyncio.sleep(self.delay - elapsed)
            self._last_request = time.monotonic()


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def build_url(base: str, path: str) -> str:
    """Join a base URL and a logical path without doubling slashes."""
    normalized = path[1:] if path.startswith("/") else path
    return f"{base.rstrip('/')}/{normalized}"


def clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Drop unset query parameters instead of sending them as empty strings."""
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None}


def parse_retry_after(value: str | None, default: int = 60, now: datetime | None = None) -> int:
    """Seconds to wait from a Retry-After header, in delta-seconds or HTTP-date form."""
    if not value:
        return default
    value = value.strip()
    if value.isdigit():
        return int(value)
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return default
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(tz=timezone.utc)
    return max(0, int((retry_at - now).total_seconds()))


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------

class BaseApiClient:
    """
    Async HTTP client base with rate limiting and retries.

    Subclasses set BASE_URL, configure headers, and add domain-specific methods.
    Use as an async context manager:

        async with MyClient() as client:
            data = await client._get("/endpoint")

    Or with lazy initialisation (for long-lived services):

        client = MyClient()
        data = await client._get("/endpoint")  # client auto-creates on first use
        await client.close()
    """

    BASE_URL: str = ""
    DEFAULT_REVALIDATE_SECONDS: int = 60 * 15

    def __init__(
        self,
        *,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        requests_per_minute: int = 600,
        timeout: float = 30.0,
        max_retries: int = 3,
        follow_redirects: bool = True,
        default_revalidate: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = (base_url or self.BASE_URL).rstrip("/")
        self._default_headers = headers or {}
        self._default_params = params or {}
        self._rate_limiter = RateLimiter(requests_per_minute)
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._follow_redirects = follow_redirects
        self._default_revalidate = (
            default_revalidate if default_revalidate is not None else self.DEFAULT_REVALIDATE_SECONDS
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    # -- Lifecycle -----------------------------------------------------------

    async def __aenter__(self) -> "BaseApiClient":
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._default_headers,
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=self._follow_redirects,
            transport=self._transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Return the HTTP client, lazily creating it if needed."""
        if self._client is None or self._client.is_closed:
            self._client = self._create_client()
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -- HTTP methods --------------------------------------------------------

    async def _get(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        revalidate: int | None = None,
        cache_tags: Sequence[str] | None = None,
    ) -> Any:
        """Make a GET request with retries and rate limiting."""
        return await self._request(
            "GET",
            path,
            params=params,
            headers=headers,
            revalidate=revalidate,
            cache_tags=cache_tags,
        )

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: bytes | str | None = None,
        headers: dict[str, str] | None = None,
        revalidate: int | None = None,
        cache_tags: Sequence[str] | None = None,
    ) -> Any:
        """
        Make an HTTP request with retry logic and rate limiting.

        `revalidate` and `cache_tags` are advisory: they ride along as a
        request extension for whatever caching layer sits in the transport
        and are never acted on here.

        Raises:
            RateLimitError: If API returns 429 and retries are exhausted
            UpstreamAPIError: If the upstream answers with a non-success status
            ExternalAPIError: If the request cannot be completed after retries
        """
        merged_params = {**self._default_params, **clean_params(params)}
        request_headers = {**self._default_headers, **(headers or {})}
        extensions = {
            CACHE_EXTENSION: {
                "revalidate": revalidate if revalidate is not None else self._default_revalidate,
                "tags": list(cache_tags or ()),
            }
        }
        last_error: Exception | None = None

        for attempt in range(self._max_retries):
            try:
                await self._rate_limiter.acquire()
                response = await self.client.request(
                    method=method,
                    url=path,
                    params=merged_params or None,
                    json=json,
                    content=content,
                    headers=request_headers,
                    extensions=extensions,
                )

                # Handle API rate limiting
                if response.status_code == 429:
                    retry_after = parse_retry_after(response.headers.get("retry-after"))
                    if attempt < self._max_retries - 1:
                        wait = min(retry_after, 30)
                        logger.warning(
                            f"Rate limited by API, waiting {wait}s (attempt {attempt + 1})"
                        )
                        await asyncio.sleep(wait)
                        continue
                    raise RateLimitError(
                        f"API rate limit exceeded. Try again in {retry_after} seconds.",
                        retry_after=retry_after,
                        body=response.text,
                        url=str(response.request.url),
                    )

                response.raise_for_status()
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                text = e.response.text
                last_error = UpstreamAPIError(
                    text or e.response.reason_phrase or f"HTTP {status}",
                    status_code=status,
                    body=text,
                    url=str(e.request.url),
                )
                # Client errors (except 429) are not retryable
                if 400 <= status < 500:
                    raise last_error
                # Server errors: retry with backoff
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"Request failed, retrying in {wait}s: {e}")
                    await asyncio.sleep(wait)

            except httpx.RequestError as e:
                last_error = ExternalAPIError(f"Request failed: {str(e)}", status_code=502)
                if attempt < self._max_retries - 1:
                    wait = 2 ** attempt
                    logger.warning(f"Request error, retrying in {wait}s: {e}")
                    await asyncio.sleep(wait)

        raise last_error or ExternalAPIError("Request failed after retries")
