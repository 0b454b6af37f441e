"""Team listing and team-detail aggregation for the teams endpoints."""

import asyncio
from typing import Any

from ..core.models import Team
from ..core.types import SeasonType
from ..providers.teams import TeamDirectory


async def list_teams(directory: TeamDirectory) -> list[Team]:
    return await directory.list_teams()


async def get_team_detail(
    directory: TeamDirectory,
    team_id: str,
    season: int,
    season_type: int = SeasonType.REGULAR,
) -> dict[str, Any]:
    """
    Fetch everything the team page shows, concurrently.

    Unlike the snapshot build, any failure here propagates: a partial team
    page is not useful.
    """
    profile, roster, schedule, statistics, record = await asyncio.gather(
        directory.get_team_profile(team_id),
        directory.get_team_roster(team_id, season),
        directory.get_team_schedule(team_id, season=season, season_type=season_type),
        directory.get_team_statistics(team_id, season=season, season_type=season_type),
        directory.get_team_record(team_id, season=season, season_type=season_type),
    )
    return {
        "profile": profile,
        "roster": roster,
        "schedule": schedule,
        "statistics": statistics,
        "record": record,
    }
