"""
Core module for Gridiron Data.

This module provides the foundational components:
- Configuration management (config.py)
- Snapshot data models (models.py)
- Position and season constants (types.py)
- Shared HTTP client infrastructure (http.py)

Usage:
    from gridiron_data.core import Settings, get_settings
    from gridiron_data.core import PlayerRecord, AthletesSnapshot
    from gridiron_data.core.http import BaseApiClient, UpstreamAPIError
"""

# Configuration
from .config import Settings, get_settings

# Types
from .types import (
    ALLOWED_POSITIONS,
    DST_POSITION,
    SeasonType,
    dst_player_id,
    get_current_season,
)

# Models
from .models import (
    AthletesSnapshot,
    MadeAttempt,
    PlayerRecord,
    PositionInfo,
    SkillStats,
    Team,
    TeamRef,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "ALLOWED_POSITIONS",
    "DST_POSITION",
    "SeasonType",
    "dst_player_id",
    "get_current_season",
    # Models
    "AthletesSnapshot",
    "MadeAttempt",
    "PlayerRecord",
    "PositionInfo",
    "SkillStats",
    "Team",
    "TeamRef",
]
