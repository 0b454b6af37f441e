"""Team API endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Query

from ...core.http import UpstreamAPIError
from ...core.types import SeasonType, get_current_season
from ...services.team_data import get_team_detail, list_teams
from ..dependencies import TeamDirectoryDependency
from ..errors import ExternalServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


def parse_integer(value: Optional[str]) -> Optional[int]:
    """Integer query value, or None when absent or not a whole number."""
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@router.get("")
async def get_teams(directory: TeamDirectoryDependency) -> dict[str, Any]:
    """List every NFL team."""
    try:
        teams = await list_teams(directory)
    except UpstreamAPIError as e:
        raise ExternalServiceError("Failed to load teams from ESPN", e)

    return {"data": [team.to_dict() for team in teams]}


@router.get("/{team_id}")
async def get_team(
    team_id: str,
    directory: TeamDirectoryDependency,
    season: Optional[str] = Query(None, description="Season year (default: current season)"),
    season_type: Optional[str] = Query(
        None,
        alias="seasonType",
        description="Season type code (default: 2, regular season)",
    ),
) -> dict[str, Any]:
    """
    Get the full team page: profile, roster, schedule, statistics and record.

    Args:
        team_id: ESPN team id
        season: Season year, inferred from today's date when omitted
        season_type: Upstream season type code

    Returns:
        {"data": {...}, "meta": {"season": ..., "seasonType": ...}}
    """
    season_value = parse_integer(season)
    season_type_value = parse_integer(season_type)
    season = season_value if season_value is not None else get_current_season()
    season_type = season_type_value if season_type_value is not None else int(SeasonType.REGULAR)

    try:
        data = await get_team_detail(directory, team_id, season=season, season_type=season_type)
    except UpstreamAPIError as e:
        raise ExternalServiceError("Failed to load team detail from ESPN", e)

    return {
        "data": data,
        "meta": {
            "season": season,
            "seasonType": season_type,
        },
    }
