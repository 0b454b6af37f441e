"""
Snapshot builder.

Builds the denormalized per-player snapshot in stages:

1. Team enumeration and season inference
2. One defense/special-teams pseudo-player per team
3. Per-team enrichment (roster, schedule, team statistics), all teams at once
4. Filtering and name sort
5. Per-athlete statistics in fixed-size concurrent batches
6. Stamping with schema version, timestamp and season

Only step 1 may fail the build. A team or athlete whose fetch fails is
logged and keeps its zero-filled defaults.

All fan-out runs on one event loop, so the merges into the shared player
mapping never interleave: each merge finishes before the next await.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from ..core.config import Settings, get_settings
from ..core.models import AthletesSnapshot, PlayerRecord, PositionInfo, SkillStats, Team, TeamRef
from ..core.types import (
    DST_ID_PREFIX,
    DST_POSITION,
    DST_POSITION_NAME,
    SeasonType,
    dst_player_id,
    get_current_season,
)
from ..providers.athletes import AthleteDirectory
from ..providers.espn import EspnClient
from ..providers.teams import TeamDirectory
from .matchups import Matchup, resolve_upcoming_matchup
from .positions import normalize_position
from .stat_extractor import extract_skill_stats, extract_team_defense

logger = logging.getLogger(__name__)

# Bump whenever the PlayerRecord shape changes.
SCHEMA_VERSION = 4

STATS_BATCH_SIZE = 12


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(tz=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_dst_record(team: Team) -> PlayerRecord:
    """Zero-filled D/ST pseudo-player for a team."""
    return PlayerRecord(
        id=dst_player_id(team.id),
        display_name=team.display_name,
        headshot=team.logo,
        team=TeamRef(
            id=team.id,
            display_name=team.display_name,
            abbreviation=team.abbreviation,
            location=team.location,
            name=team.name,
        ),
        position=PositionInfo(
            name=DST_POSITION_NAME,
            display_name=DST_POSITION_NAME,
            abbreviation=DST_POSITION,
        ),
    )


def _roster_team(roster: dict[str, Any], team: Team) -> TeamRef:
    """Team fields as the roster reports them, falling back to the directory."""
    data = roster.get("team") or {}
    return TeamRef(
        id=str(data.get("id") or team.id),
        display_name=data.get("displayName") or team.display_name,
        abbreviation=data.get("abbreviation", team.abbreviation),
        location=data.get("location", team.location),
        name=data.get("name", team.name),
    )


def _is_inactive(athlete: dict[str, Any]) -> bool:
    status_type = (athlete.get("status") or {}).get("type")
    return bool(status_type) and status_type != "active"


class SnapshotBuilder:
    """Builds one AthletesSnapshot per call to build()."""

    def __init__(
        self,
        teams: TeamDirectory,
        athletes: AthleteDirectory,
        batch_size: int = STATS_BATCH_SIZE,
        season_type: int = SeasonType.REGULAR,
    ):
        self.teams = teams
        self.athletes = athletes
        self.batch_size = max(1, batch_size)
        self.season_type = season_type

    async def build(self, now: Optional[datetime] = None) -> AthletesSnapshot:
        """
        Run the full pipeline.

        Args:
            now: Reference instant for season inference and upcoming
                matchups. Defaults to the current time.

        Raises:
            Exception: Whatever team enumeration raised; nothing else escapes.
        """
        now = now or datetime.now(tz=timezone.utc)

        teams = await self.teams.list_teams()
        season = get_current_season(now)
        logger.info(f"Building athlete snapshot for season {season} across {len(teams)} teams")

        players: dict[str, PlayerRecord] = {}
        for team in teams:
            record = make_dst_record(team)
            players[record.id] = record

        await asyncio.gather(
            *[self._enrich_team(team, season, players, now) for team in teams]
        )

        result = [player for player in players.values() if player.display_name]
        result.sort(key=lambda player: player.sort_key)

        # Build-scoped memo: (athlete, team, season) -> in-flight or finished fetch
        stats_cache: dict[str, asyncio.Future] = {}
        await self._enrich_skill_stats(result, season, stats_cache)

        logger.info(f"Athlete snapshot built: {len(result)} players for season {season}")
        return AthletesSnapshot(
            schema_version=SCHEMA_VERSION,
            generated_at=utc_now_iso(),
            season=season,
            players=result,
        )

    # =========================================================================
    # Per-team enrichment
    # =========================================================================

    async def _enrich_team(
        self,
        team: Team,
        season: int,
        players: dict[str, PlayerRecord],
        now: datetime,
    ) -> None:
        try:
            roster, schedule, statistics = await asyncio.gather(
                self.teams.get_team_roster(team.id, season),
                self.teams.get_team_schedule(team.id, season=season, season_type=self.season_type),
                self.teams.get_team_statistics(team.id, season=season, season_type=self.season_type),
            )
            self._merge_team(team, roster, schedule, statistics, players, now)
        except Exception as e:
            logger.error(f"Failed to load data for team {team.id}: {e}")

    def _merge_team(
        self,
        team: Team,
        roster: dict[str, Any],
        schedule: dict[str, Any],
        statistics: dict[str, Any],
        players: dict[str, PlayerRecord],
        now: datetime,
    ) -> None:
        team_ref = _roster_team(roster, team)
        bye_week = schedule.get("byeWeek")
        upcoming = resolve_upcoming_matchup(schedule, team_ref.id, now=now)

        dst = players.get(dst_player_id(team.id))
        if dst is not None:
            self._apply_team_defense(dst, bye_week, upcoming, statistics)

        added = 0
        for group in roster.get("athletes") or []:
            for athlete in group.get("items") or []:
                if self._add_athlete(players, athlete, team_ref, bye_week, upcoming):
                    added += 1
        logger.debug(f"Team {team.id}: {added} athletes added")

    @staticmethod
    def _apply_team_defense(
        dst: PlayerRecord,
        bye_week: Optional[int],
        upcoming: Optional[Matchup],
        statistics: dict[str, Any],
    ) -> None:
        dst.bye_week = bye_week
        dst.upcoming_opponent = upcoming.label if upcoming else None
        dst.kickoff = upcoming.kickoff if upcoming else None
        for field_name, value in extract_team_defense(statistics).items():
            setattr(dst, field_name, value)

    @staticmethod
    def _add_athlete(
        players: dict[str, PlayerRecord],
        athlete: dict[str, Any],
        team_ref: TeamRef,
        bye_week: Optional[int],
        upcoming: Optional[Matchup],
    ) -> bool:
        """Insert-if-absent. Returns True when a record was added."""
        athlete_id = athlete.get("id")
        if not athlete_id or _is_inactive(athlete):
            return False
        athlete_id = str(athlete_id)
        if athlete_id in players:
            return False

        position = athlete.get("position") or {}
        normalized = normalize_position(position.get("abbreviation"), position.get("displayName"))
        if not normalized:
            return False

        headshot = athlete.get("headshot") or {}
        jersey = athlete.get("jersey")
        players[athlete_id] = PlayerRecord(
            id=athlete_id,
            display_name=athlete.get("displayName") or "",
            first_name=athlete.get("firstName"),
            last_name=athlete.get("lastName"),
            jersey=str(jersey) if jersey is not None else None,
            headshot=headshot.get("href"),
            team=team_ref.model_copy(),
            position=PositionInfo(
                name=position.get("name"),
                display_name=position.get("displayName"),
                abbreviation=normalized,
            ),
            bye_week=bye_week,
            upcoming_opponent=upcoming.label if upcoming else None,
            kickoff=upcoming.kickoff if upcoming else None,
        )
        return True

    # =========================================================================
    # Per-athlete statistics
    # =========================================================================

    async def _enrich_skill_stats(
        self,
        players: list[PlayerRecord],
        season: int,
        stats_cache: dict[str, asyncio.Future],
    ) -> None:
        # D/ST entries carry team aggregates and have no athlete stats page
        athletes = [player for player in players if not player.id.startswith(DST_ID_PREFIX)]

        for i in range(0, len(athletes), self.batch_size):
            batch = athletes[i:i + self.batch_size]
            results = await asyncio.gather(
                *[self._fetch_skill_stats(stats_cache, player.id, player.team.id, season) for player in batch]
            )
            for player, stats in zip(batch, results):
                if stats is not None:
                    player.apply_stats(stats)

    def _fetch_skill_stats(
        self,
        stats_cache: dict[str, asyncio.Future],
        athlete_id: str,
        team_id: str,
        season: int,
    ) -> asyncio.Future:
        key = f"{athlete_id}:{team_id}:{season}"
        existing = stats_cache.get(key)
        if existing is None:
            existing = asyncio.ensure_future(self._fetch_skill_stats_uncached(athlete_id, team_id, season))
            stats_cache[key] = existing
        return existing

    async def _fetch_skill_stats_uncached(
        self,
        athlete_id: str,
        team_id: str,
        season: int,
    ) -> Optional[SkillStats]:
        try:
            payload = await self.athletes.get_athlete_stats(athlete_id, season)
            return extract_skill_stats(payload, season, team_id)
        except Exception as e:
            logger.warning(f"Failed to load stats for athlete {athlete_id}: {e}")
            return None


async def build_athlete_snapshot(
    client: Optional[EspnClient] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> AthletesSnapshot:
    """
    Build a snapshot against ESPN.

    Opens (and closes) its own EspnClient unless one is passed in.
    """
    settings = settings or get_settings()
    if client is not None:
        builder = SnapshotBuilder(
            TeamDirectory(client),
            AthleteDirectory(client),
            batch_size=settings.stats_batch_size,
        )
        return await builder.build(now=now)

    async with EspnClient(settings) as owned:
        builder = SnapshotBuilder(
            TeamDirectory(owned),
            AthleteDirectory(owned),
            batch_size=settings.stats_batch_size,
        )
        return await builder.build(now=now)
