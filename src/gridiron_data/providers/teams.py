"""
Team directory client.

Lists teams and fetches per-team roster, schedule, statistics, record and
profile payloads. Everything except the team list is returned as the raw
upstream JSON; the snapshot builder and team-detail endpoint pick out the
parts they need.
"""

import logging
from typing import Any, Optional

from ..core.models import Team
from ..core.types import SeasonType
from .espn import EspnClient

logger = logging.getLogger(__name__)

# Freshness hints (seconds) per resource.
TEAMS_REVALIDATE = 60 * 60 * 24
PROFILE_REVALIDATE = 60 * 15
ROSTER_REVALIDATE = 60 * 30
SCHEDULE_REVALIDATE = 60 * 5
STATISTICS_REVALIDATE = 60 * 2
RECORD_REVALIDATE = 60 * 10


def _team_tags(team_id: str, *extra: str) -> list[str]:
    return ["espn", "teams", f"team:{team_id}", *extra]


class TeamDirectory:
    """ESPN team endpoints."""

    def __init__(self, client: EspnClient):
        self.client = client

    # =========================================================================
    # Teams
    # =========================================================================

    async def list_teams(self, limit: Optional[int] = None, page: Optional[int] = None) -> list[Team]:
        """Get all NFL teams, in upstream order.

        The list sits under sports[0].leagues[0].teams[].team; a missing
        wrapper yields an empty list.
        """
        data = await self.client.site_fetch(
            "/teams",
            params={"limit": limit, "page": page},
            revalidate=TEAMS_REVALIDATE,
            cache_tags=["espn", "teams"],
        )

        sports = (data or {}).get("sports") or []
        leagues = (sports[0].get("leagues") or []) if sports else []
        entries = (leagues[0].get("teams") or []) if leagues else []

        teams = []
        for entry in entries:
            team = entry.get("team") if isinstance(entry, dict) else None
            if team:
                teams.append(Team.model_validate(team))
        return teams

    async def get_team_profile(self, team_id: str) -> dict[str, Any]:
        """Get a team's profile (venue, record summary, next event)."""
        data = await self.client.site_fetch(
            f"/teams/{team_id}",
            revalidate=PROFILE_REVALIDATE,
            cache_tags=_team_tags(team_id),
        )
        return data.get("team", {})

    # =========================================================================
    # Roster & Schedule
    # =========================================================================

    async def get_team_roster(self, team_id: str, season: Optional[int] = None) -> dict[str, Any]:
        """Get a team's roster, grouped by position."""
        return await self.client.site_fetch(
            f"/teams/{team_id}/roster",
            params={"season": season} if season else None,
            revalidate=ROSTER_REVALIDATE,
            cache_tags=_team_tags(team_id, "roster"),
        )

    async def get_team_schedule(
        self,
        team_id: str,
        season: Optional[int] = None,
        season_type: Optional[int] = None,
    ) -> dict[str, Any]:
        """Get a team's schedule, including its bye week."""
        params: dict[str, Any] = {}
        if season:
            params["season"] = season
        if season_type:
            params["seasontype"] = int(season_type)

        return await self.client.site_fetch(
            f"/teams/{team_id}/schedule",
            params=params or None,
            revalidate=SCHEDULE_REVALIDATE,
            cache_tags=_team_tags(team_id, "schedule"),
        )

    # =========================================================================
    # Season Aggregates
    # =========================================================================

    async def get_team_statistics(
        self,
        team_id: str,
        season: int,
        season_type: int = SeasonType.REGULAR,
    ) -> dict[str, Any]:
        """Get team-level season statistics (category -> stat -> value)."""
        return await self.client.core_fetch(
            f"/seasons/{season}/types/{int(season_type)}/teams/{team_id}/statistics",
            revalidate=STATISTICS_REVALIDATE,
            cache_tags=_team_tags(team_id, "statistics"),
        )

    async def get_team_record(
        self,
        team_id: str,
        season: int,
        season_type: int = SeasonType.REGULAR,
    ) -> dict[str, Any]:
        """Get a team's season record splits."""
        return await self.client.core_fetch(
            f"/seasons/{season}/types/{int(season_type)}/teams/{team_id}/record",
            revalidate=RECORD_REVALIDATE,
            cache_tags=_team_tags(team_id, "record"),
        )
