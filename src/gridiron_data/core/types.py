"""
Core types and constants for Gridiron Data.

This module provides:
- The closed set of fantasy-relevant position codes
- Upstream season type codes
- Season inference from the wall clock
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional


# Order matters: display-name prefix matching walks this tuple front to back.
ALLOWED_POSITIONS: tuple[str, ...] = (
    "QB",
    "RB",
    "WR",
    "TE",
    "K",
    "D/ST",
    "DE",
    "DT",
    "LB",
    "CB",
    "S",
)

DST_POSITION = "D/ST"
DST_POSITION_NAME = "Defense/Special Teams"
DST_ID_PREFIX = "dst-"

# Month (1-12) from which the calendar year is also the season year.
SEASON_ROLLOVER_MONTH = 7


class SeasonType(IntEnum):
    """Upstream classification of the portion of a season."""

    PRESEASON = 1
    REGULAR = 2
    POSTSEASON = 3
    OFFSEASON = 4


def get_current_season(now: Optional[datetime] = None) -> int:
    """
    Infer the NFL season for a moment in time.

    A season kicks off in September and runs through the playoffs in
    January/February, so the previous year is carried until July.
    """
    now = now or datetime.now(tz=timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.year if now.month >= SEASON_ROLLOVER_MONTH else now.year - 1


def dst_player_id(team_id: str) -> str:
    """Synthesized player id for a team's defense/special-teams unit."""
    return f"{DST_ID_PREFIX}{team_id}"
