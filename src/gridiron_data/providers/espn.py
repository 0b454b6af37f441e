"""
ESPN gateway.

ESPN splits its public NFL data across several hosts. EspnClient keeps one
pooled httpx client and routes each logical path to the right base URL:

- site:      teams, rosters, schedules
- core:      season-scoped team statistics and records
- core v3:   the athlete index
- site web:  per-athlete season statistics
"""

import logging
from typing import Any, Sequence

import httpx

from ..core.config import Settings, get_settings
from ..core.http import BaseApiClient, build_url

logger = logging.getLogger(__name__)


class EspnClient(BaseApiClient):
    """ESPN NFL API client."""

    BASE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = settings or get_settings()
        super().__init__(
            base_url=settings.espn_site_base_url,
            headers={
                "User-Agent": settings.espn_user_agent,
                "Accept": "application/json",
            },
            requests_per_minute=settings.espn_requests_per_minute,
            timeout=settings.espn_timeout,
            max_retries=settings.espn_max_retries,
            default_revalidate=settings.default_revalidate_seconds,
            transport=transport,
        )
        self.site_base_url = settings.espn_site_base_url
        self.core_base_url = settings.espn_core_base_url
        self.core_v3_base_url = settings.espn_core_v3_base_url
        self.site_web_base_url = settings.espn_site_web_base_url

    async def _fetch(
        self,
        base_url: str,
        path: str,
        params: dict[str, Any] | None = None,
        revalidate: int | None = None,
        cache_tags: Sequence[str] | None = None,
        method: str = "GET",
        json: Any = None,
        content: bytes | str | None = None,
    ) -> Any:
        """
        Request `path` under `base_url`.

        GET is the default; pass `method="POST"` with `json` or `content`
        to send a body.
        """
        return await self._request(
            method.upper(),
            build_url(base_url, path),
            params=params,
            json=json,
            content=content,
            revalidate=revalidate,
            cache_tags=cache_tags,
        )

    async def site_fetch(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self._fetch(self.site_base_url, path, params, **kwargs)

    async def core_fetch(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self._fetch(self.core_base_url, path, params, **kwargs)

    async def core_v3_fetch(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self._fetch(self.core_v3_base_url, path, params, **kwargs)

    async def site_web_fetch(self, path: str, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self._fetch(self.site_web_base_url, path, params, **kwargs)
