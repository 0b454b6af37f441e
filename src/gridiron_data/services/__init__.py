"""
Snapshot services.

Usage:
    from gridiron_data.services import SnapshotCache

    snapshot = await SnapshotCache().load()
"""

from .matchups import Matchup, resolve_upcoming_matchup
from .positions import normalize_position
from .snapshot_builder import SCHEMA_VERSION, SnapshotBuilder, build_athlete_snapshot
from .snapshot_cache import SnapshotCache, StaleSnapshotError, list_active_athletes
from .stat_extractor import extract_skill_stats, extract_team_defense

__all__ = [
    "Matchup",
    "resolve_upcoming_matchup",
    "normalize_position",
    "SCHEMA_VERSION",
    "SnapshotBuilder",
    "build_athlete_snapshot",
    "SnapshotCache",
    "StaleSnapshotError",
    "list_active_athletes",
    "extract_skill_stats",
    "extract_team_defense",
]
