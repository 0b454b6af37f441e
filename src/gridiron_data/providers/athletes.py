"""
Athlete statistics client.

Fetches the league-wide athlete index and a single athlete's per-season
statistic categories.
"""

import logging
from typing import Any

from ..core.text import name_sort_key
from .espn import EspnClient

logger = logging.getLogger(__name__)

ATHLETES_REVALIDATE = 60 * 60 * 6
ATHLETE_STATS_REVALIDATE = 60 * 60 * 6


def _athlete_sort_key(athlete: dict[str, Any]) -> str:
    return name_sort_key(athlete.get("lastName"), athlete.get("displayName"))


class AthleteDirectory:
    """ESPN athlete endpoints."""

    def __init__(self, client: EspnClient):
        self.client = client

    async def get_athletes(
        self,
        page: int = 1,
        limit: int = 20000,
        active_only: bool = True,
    ) -> dict[str, Any]:
        """
        Get one page of the athlete index, sorted by last name.

        Args:
            page: 1-based page index
            limit: Page size
            active_only: Keep only active athletes with both names present

        Returns:
            {"meta": {...paging, filteredCount}, "athletes": [...]}
        """
        data = await self.client.core_v3_fetch(
            "/athletes",
            params={"page": page, "limit": limit},
            revalidate=ATHLETES_REVALIDATE,
            cache_tags=["espn", "athletes"],
        )

        items = data.get("items") or []
        if active_only:
            items = [
                athlete
                for athlete in items
                if athlete.get("active") and athlete.get("firstName") and athlete.get("lastName")
            ]

        athletes = sorted(items, key=_athlete_sort_key)

        return {
            "meta": {
                "count": data.get("count"),
                "pageIndex": data.get("pageIndex"),
                "pageSize": data.get("pageSize"),
                "pageCount": data.get("pageCount"),
                "filteredCount": len(athletes),
            },
            "athletes": athletes,
        }

    async def get_athlete_stats(self, athlete_id: str, season: int) -> dict[str, Any]:
        """Get an athlete's statistic categories for a season."""
        return await self.client.site_web_fetch(
            f"/athletes/{athlete_id}/stats",
            params={"season": season},
            revalidate=ATHLETE_STATS_REVALIDATE,
            cache_tags=["espn", "athletes", f"athlete:{athlete_id}", "stats"],
        )
