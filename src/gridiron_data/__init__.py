"""
Gridiron Data

Aggregates per-player and per-team NFL statistics from ESPN into a single
denormalized snapshot for a table UI and a JSON API.

Key Features:
- Concurrent fan-out across every team, tolerant of per-team failures
- One defense/special-teams pseudo-player per team
- Per-athlete season stats fetched in bounded batches
- File-backed snapshot reused until the season or schema changes

Usage:
    from gridiron_data import SnapshotCache

    snapshot = await SnapshotCache().load()
    for player in snapshot.players:
        print(player.display_name, player.position.abbreviation)
"""

from .core.config import Settings, get_settings
from .core.http import ExternalAPIError, UpstreamAPIError
from .core.models import AthletesSnapshot, MadeAttempt, PlayerRecord, Team
from .providers import AthleteDirectory, EspnClient, TeamDirectory
from .services import (
    SCHEMA_VERSION,
    SnapshotBuilder,
    SnapshotCache,
    build_athlete_snapshot,
    list_active_athletes,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "ExternalAPIError",
    "UpstreamAPIError",
    # Models
    "AthletesSnapshot",
    "MadeAttempt",
    "PlayerRecord",
    "Team",
    # Providers
    "AthleteDirectory",
    "EspnClient",
    "TeamDirectory",
    # Snapshot
    "SCHEMA_VERSION",
    "SnapshotBuilder",
    "SnapshotCache",
    "build_athlete_snapshot",
    "list_active_athletes",
]
