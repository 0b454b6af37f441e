"""
Pytest configuration for gridiron-data tests.

Payload builders and provider fakes live in tests/factories.py.
"""

from datetime import datetime, timezone

import pytest

from gridiron_data.core.config import Settings

# Mid-season reference instant: season 2024.
NOW = datetime(2024, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def _no_snapshot_override(monkeypatch):
    monkeypatch.delenv("ATHLETE_SNAPSHOT_PATH", raising=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings that never throttle and never retry."""
    return Settings(
        espn_requests_per_minute=0,
        espn_max_retries=1,
        snapshot_cache_dir=str(tmp_path / "cache"),
    )
