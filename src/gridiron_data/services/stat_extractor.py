"""
Statistic extraction from upstream payloads.

Athlete payloads carry one list of rows per category; each row is a
fixed-position array of strings for one season and team. The index tables
below name every position we read, so the coupling to the upstream layout
stays visible in one place and can be checked on its own.

Team payloads are nested category -> stat name -> value and only feed the
defense/special-teams pseudo-player.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

from ..core.models import MadeAttempt, Number, SkillStats

logger = logging.getLogger(__name__)


# =============================================================================
# Index tables (field -> position in the upstream row)
# =============================================================================

PASSING_INDEX: dict[str, int] = {
    "passing_completions": 1,
    "passing_attempts": 2,
    "passing_completion_pct": 3,
    "passing_yards": 4,
    "passing_yards_per_attempt": 5,
    "passing_touchdowns": 6,
    "passing_interceptions": 7,
    "times_sacked": 9,
    "passer_rating": 10,
}

RUSHING_INDEX: dict[str, int] = {
    "rushing_attempts": 1,
    "rushing_yards": 2,
    "rushing_touchdowns": 4,
    "fumbles": 7,
    "fumbles_lost": 8,
}

RECEIVING_INDEX: dict[str, int] = {
    "receptions": 1,
    "receiving_targets": 2,
    "receiving_yards": 3,
    "receiving_touchdowns": 5,
    "fumbles": 8,
    "fumbles_lost": 9,
}

DEFENSIVE_INDEX: dict[str, int] = {
    "solo_tackles": 2,
    "assisted_tackles": 3,
    "sacks": 4,
    "forced_fumbles": 5,
    "fumbles_recovered": 6,
    "interceptions": 8,
    "defensive_touchdowns": 11,
    "tackles_for_loss": 14,
}

KICKING_INDEX: dict[str, int] = {
    "field_goal_pct": 2,
    "extra_points_made": 9,
    "extra_points_attempts": 10,
}

# Made-attempt buckets, each a single "M-A" token.
KICKING_BUCKET_INDEX: dict[str, int] = {
    "field_goals": 1,
    "field_goals_1_19": 3,
    "field_goals_20_29": 4,
    "field_goals_30_39": 5,
    "field_goals_40_49": 6,
    "field_goals_50": 7,
}

CATEGORY_INDEXES: dict[str, dict[str, int]] = {
    "passing": PASSING_INDEX,
    "rushing": RUSHING_INDEX,
    "receiving": RECEIVING_INDEX,
    "defensive": DEFENSIVE_INDEX,
    "kicking": KICKING_INDEX,
}

# D/ST field -> (team statistics category, stat name)
TEAM_DEFENSE_STATS: dict[str, tuple[str, str]] = {
    "solo_tackles": ("defensive", "soloTackles"),
    "assisted_tackles": ("defensive", "assistTackles"),
    "total_tackles": ("defensive", "totalTackles"),
    "sacks": ("defensive", "sacks"),
    "interceptions": ("defensiveInterceptions", "interceptions"),
    "safeties": ("defensive", "safeties"),
    "forced_fumbles": ("general", "fumblesForced"),
    "fumbles_recovered": ("general", "fumblesRecovered"),
    "defensive_touchdowns": ("defensive", "defensiveTouchdowns"),
    "kicks_blocked": ("defensive", "kicksBlocked"),
}

RETURN_TOUCHDOWN_STATS: tuple[tuple[str, str], ...] = (
    ("returning", "kickReturnTouchdowns"),
    ("returning", "puntReturnTouchdowns"),
)


# =============================================================================
# Parsing
# =============================================================================


def parse_stat_number(value: Any) -> Optional[Number]:
    """
    Parse an upstream stat string such as "1,234" or "66.7".

    Returns None for empty, malformed or non-finite input. Integral values
    come back as int.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        cleaned = str(value).replace(",", "").strip()
        if not cleaned or "_" in cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def parse_made_attempt(value: Any) -> MadeAttempt:
    """Parse a "M-A" token; absent or malformed halves default to zero."""
    if not value or not isinstance(value, str):
        return MadeAttempt()
    parts = value.split("-")
    made = parse_stat_number(parts[0]) or 0
    attempts = parse_stat_number(parts[1]) if len(parts) > 1 else None
    return MadeAttempt(made=made, attempts=attempts or 0)


def extra_point_pct(extra_points: MadeAttempt) -> Number:
    """Derived percentage; zero attempts yields zero."""
    if not extra_points.attempts:
        return 0
    return extra_points.made / extra_points.attempts * 100


def _row_value(row: Optional[list[Any]], index: int) -> Any:
    if not row or index >= len(row):
        return None
    return row[index]


def extract_fields(row: Optional[list[Any]], index_table: dict[str, int]) -> dict[str, Number]:
    """Read every field of `index_table` from a positional row, zero-filled."""
    fields: dict[str, Number] = {}
    for field_name, index in index_table.items():
        parsed = parse_stat_number(_row_value(row, index))
        fields[field_name] = parsed if parsed is not None else 0
    return fields


# =============================================================================
# Athlete payloads
# =============================================================================


def find_category(payload: dict[str, Any], name: str) -> Optional[dict[str, Any]]:
    for category in (payload or {}).get("categories") or []:
        if category.get("name") == name:
            return category
    return None


def _season_year(entry: dict[str, Any]) -> Any:
    season = entry.get("season") or {}
    return season.get("year")


def find_season_stat(
    category: Optional[dict[str, Any]],
    season: int,
    team_id: str,
) -> Optional[dict[str, Any]]:
    """
    Pick the row for a season and team.

    Preference order: exact season and team; the season's "totals" row;
    any row for the season.
    """
    if not category:
        return None
    rows = category.get("statistics") or []
    in_season = [row for row in rows if _season_year(row) == season]
    if not in_season:
        return None

    for row in in_season:
        if row.get("teamId") is not None and str(row.get("teamId")) == str(team_id):
            return row
    for row in in_season:
        if "totals" in (row.get("teamSlug") or "").lower():
            return row
    return in_season[0]


def _category_row(payload: dict[str, Any], name: str, season: int, team_id: str) -> Optional[list[Any]]:
    entry = find_season_stat(find_category(payload, name), season, team_id)
    if entry is None:
        return None
    return entry.get("stats")


def extract_skill_stats(payload: dict[str, Any], season: int, team_id: str) -> SkillStats:
    """
    Build the per-athlete statistic fields for one season and team.

    Categories without a matching row contribute zeros. Safeties, return
    touchdowns and kicks blocked are never taken from individual rows.
    """
    rushing = extract_fields(_category_row(payload, "rushing", season, team_id), RUSHING_INDEX)
    receiving = extract_fields(_category_row(payload, "receiving", season, team_id), RECEIVING_INDEX)
    defensive = extract_fields(_category_row(payload, "defensive", season, team_id), DEFENSIVE_INDEX)
    passing = extract_fields(_category_row(payload, "passing", season, team_id), PASSING_INDEX)

    kicking_row = _category_row(payload, "kicking", season, team_id)
    kicking = extract_fields(kicking_row, KICKING_INDEX)
    buckets = {
        field_name: parse_made_attempt(_row_value(kicking_row, index))
        for field_name, index in KICKING_BUCKET_INDEX.items()
    }
    extra_points = MadeAttempt(
        made=kicking["extra_points_made"],
        attempts=kicking["extra_points_attempts"],
    )

    return SkillStats(
        rushing_attempts=rushing["rushing_attempts"],
        rushing_yards=rushing["rushing_yards"],
        rushing_touchdowns=rushing["rushing_touchdowns"],
        receptions=receiving["receptions"],
        receiving_targets=receiving["receiving_targets"],
        receiving_yards=receiving["receiving_yards"],
        receiving_touchdowns=receiving["receiving_touchdowns"],
        fumbles=rushing["fumbles"] + receiving["fumbles"],
        fumbles_lost=rushing["fumbles_lost"] + receiving["fumbles_lost"],
        fumbles_recovered=defensive["fumbles_recovered"],
        solo_tackles=defensive["solo_tackles"],
        assisted_tackles=defensive["assisted_tackles"],
        total_tackles=defensive["solo_tackles"] + defensive["assisted_tackles"],
        tackles_for_loss=defensive["tackles_for_loss"],
        sacks=defensive["sacks"],
        forced_fumbles=defensive["forced_fumbles"],
        interceptions=defensive["interceptions"],
        defensive_touchdowns=defensive["defensive_touchdowns"],
        safeties=0,
        return_touchdowns=0,
        kicks_blocked=0,
        **passing,
        field_goal_pct=kicking["field_goal_pct"],
        **buckets,
        extra_points=extra_points,
        extra_point_pct=extra_point_pct(extra_points),
    )


# =============================================================================
# Team payloads
# =============================================================================


def get_team_stat(statistics: Optional[dict[str, Any]], category_name: str, stat_name: str) -> Optional[Number]:
    """Numeric team stat, or None when the category, stat or value is missing."""
    splits = (statistics or {}).get("splits") or {}
    for category in splits.get("categories") or []:
        if category.get("name") != category_name:
            continue
        for stat in category.get("stats") or []:
            if stat.get("name") == stat_name:
                value = stat.get("value")
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    return value
                return None
        return None
    return None


def extract_team_defense(statistics: Optional[dict[str, Any]]) -> dict[str, Number]:
    """
    D/ST aggregates from team statistics.

    Only stats the provider actually reported are included, so callers can
    overwrite selectively. `return_touchdowns` is always present: the sum of
    kick and punt return touchdowns, missing counts as zero.
    """
    fields: dict[str, Number] = {}
    for field_name, (category, stat_name) in TEAM_DEFENSE_STATS.items():
        value = get_team_stat(statistics, category, stat_name)
        if value is not None:
            fields[field_name] = value

    fields["return_touchdowns"] = sum(
        get_team_stat(statistics, category, stat_name) or 0
        for category, stat_name in RETURN_TOUCHDOWN_STATS
    )
    return fields
