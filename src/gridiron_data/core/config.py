"""
Configuration management for Gridiron Data.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables,
    e.g. ESPN_MAX_RETRIES=5 or SNAPSHOT_CACHE_DIR=/var/cache/gridiron.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Application Metadata
    # ==========================================================================
    app_name: str = "Gridiron Data API"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="development", description="development, staging, production")

    # ==========================================================================
    # ESPN Upstream
    # ==========================================================================
    espn_site_base_url: str = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
    espn_core_base_url: str = "https://sports.core.api.espn.com/v2/sports/football/leagues/nfl"
    espn_core_v3_base_url: str = "https://sports.core.api.espn.com/v3/sports/football/nfl"
    espn_site_web_base_url: str = "https://site.web.api.espn.com/apis/common/v3/sports/football/nfl"
    espn_user_agent: str = "gridiron-data/1.0"
    espn_requests_per_minute: int = Field(default=0, ge=0, description="Client-side throttle; 0 disables it")
    espn_timeout: float = Field(default=30.0, gt=0)
    espn_max_retries: int = Field(default=3, ge=1, le=10)
    default_revalidate_seconds: int = Field(
        default=60 * 15,
        description="Freshness hint for relatively stable upstream resources",
    )

    # ==========================================================================
    # Snapshot
    # ==========================================================================
    snapshot_cache_dir: str = Field(default="data/cache", description="Directory holding the snapshot file")
    snapshot_filename: str = "athletes.json"
    stats_batch_size: int = Field(
        default=12,
        ge=1,
        description="Athletes whose stats are fetched concurrently per batch",
    )

    @computed_field
    @property
    def snapshot_path(self) -> str:
        """Effective snapshot location. ATHLETE_SNAPSHOT_PATH wins when set."""
        override = os.getenv("ATHLETE_SNAPSHOT_PATH")
        if override:
            return override
        return str(Path(self.snapshot_cache_dir) / self.snapshot_filename)

    # ==========================================================================
    # CORS Configuration
    # ==========================================================================
    cors_allow_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins. Set to ['*'] for development.",
    )
    cors_allow_methods: list[str] = ["GET", "HEAD", "OPTIONS"]
    cors_allow_headers: list[str] = ["Accept", "Accept-Encoding", "Content-Type", "Cache-Control"]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
