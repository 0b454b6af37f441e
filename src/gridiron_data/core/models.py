"""
Pydantic models for snapshot entities.

These models are used for:
- Validating team payloads from the upstream provider
- The denormalized per-player snapshot record
- Serializing the persisted snapshot (camelCase JSON)
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from .text import name_sort_key

# Upstream numbers arrive as strings; integral values stay ints in the snapshot.
Number = Union[int, float]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Teams
# =============================================================================


class Team(CamelModel):
    """Team as listed by the upstream directory.

    Unknown upstream fields are kept so the teams endpoint can pass them
    through untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    display_name: str = ""
    abbreviation: Optional[str] = None
    location: Optional[str] = None
    name: Optional[str] = None
    logos: list[dict[str, Any]] = Field(default_factory=list)

    @computed_field
    @property
    def logo(self) -> Optional[str]:
        """First logo reference, if the provider sent any."""
        for logo in self.logos:
            href = logo.get("href")
            if href:
                return href
        return None


class TeamRef(CamelModel):
    """Team display fields copied into each player record."""

    id: str
    display_name: str = ""
    abbreviation: Optional[str] = None
    location: Optional[str] = None
    name: Optional[str] = None


class PositionInfo(CamelModel):
    """Position labels; `abbreviation` is always the normalized code."""

    name: Optional[str] = None
    display_name: Optional[str] = None
    abbreviation: str


# =============================================================================
# Statistics
# =============================================================================


class MadeAttempt(CamelModel):
    """Kicking bucket: successes out of attempts."""

    made: Number = 0
    attempts: Number = 0


class SkillStats(CamelModel):
    """Flat per-player statistic fields. Every field is zero by default."""

    # Rushing
    rushing_attempts: Number = 0
    rushing_yards: Number = 0
    rushing_touchdowns: Number = 0

    # Receiving
    receptions: Number = 0
    receiving_targets: Number = 0
    receiving_yards: Number = 0
    receiving_touchdowns: Number = 0

    # Fumbles
    fumbles: Number = 0
    fumbles_lost: Number = 0
    fumbles_recovered: Number = 0

    # Defense
    solo_tackles: Number = 0
    assisted_tackles: Number = 0
    total_tackles: Number = 0
    tackles_for_loss: Number = 0
    sacks: Number = 0
    forced_fumbles: Number = 0
    interceptions: Number = 0
    defensive_touchdowns: Number = 0
    safeties: Number = 0
    return_touchdowns: Number = 0
    kicks_blocked: Number = 0

    # Passing
    passing_yards: Number = 0
    passing_attempts: Number = 0
    passing_completions: Number = 0
    passing_completion_pct: Number = 0
    passing_yards_per_attempt: Number = 0
    passing_touchdowns: Number = 0
    passing_interceptions: Number = 0
    times_sacked: Number = 0
    passer_rating: Number = 0

    # Kicking
    field_goals: MadeAttempt = Field(default_factory=MadeAttempt)
    field_goal_pct: Number = 0
    field_goals_1_19: MadeAttempt = Field(default_factory=MadeAttempt, alias="fieldGoals_1_19")
    field_goals_20_29: MadeAttempt = Field(default_factory=MadeAttempt, alias="fieldGoals_20_29")
    field_goals_30_39: MadeAttempt = Field(default_factory=MadeAttempt, alias="fieldGoals_30_39")
    field_goals_40_49: MadeAttempt = Field(default_factory=MadeAttempt, alias="fieldGoals_40_49")
    field_goals_50: MadeAttempt = Field(default_factory=MadeAttempt, alias="fieldGoals_50")
    extra_points: MadeAttempt = Field(default_factory=MadeAttempt)
    extra_point_pct: Number = 0


STAT_FIELDS: tuple[str, ...] = tuple(SkillStats.model_fields)


# =============================================================================
# Snapshot
# =============================================================================


class PlayerRecord(SkillStats):
    """One row of the snapshot.

    Team fields are embedded by value so a snapshot stays self-contained.
    """

    id: str
    display_name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    jersey: Optional[str] = None
    headshot: Optional[str] = None
    team: TeamRef
    position: Optional[PositionInfo] = None
    bye_week: Optional[int] = None
    upcoming_opponent: Optional[str] = None
    kickoff: Optional[str] = None
    fantasy_points: Number = 0

    def apply_stats(self, stats: SkillStats) -> None:
        """Copy every statistic field from `stats` onto this record."""
        for field_name in STAT_FIELDS:
            setattr(self, field_name, getattr(stats, field_name))

    @property
    def sort_key(self) -> str:
        return name_sort_key(self.last_name, self.display_name)


class AthletesSnapshot(CamelModel):
    """Versioned, timestamped materialized view of a season's players."""

    schema_version: int
    generated_at: str
    season: int
    players: list[PlayerRecord] = Field(default_factory=list)
