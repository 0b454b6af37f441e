"""
Dependency injection for API endpoints.

One EspnClient is shared by every request so connections are pooled;
it is created lazily and closed at application shutdown. Tests replace
these dependencies through `app.dependency_overrides`.
"""

from typing import Annotated

from fastapi import Depends

from ..core.config import get_settings
from ..providers.athletes import AthleteDirectory
from ..providers.espn import EspnClient
from ..providers.teams import TeamDirectory
from ..services.snapshot_cache import SnapshotCache

_client_instance: EspnClient | None = None


def get_espn_client() -> EspnClient:
    """
    Dependency that provides the shared ESPN client.

    Returns:
        EspnClient with a lazily created connection pool
    """
    global _client_instance
    if _client_instance is None:
        _client_instance = EspnClient(get_settings())
    return _client_instance


async def close_espn_client() -> None:
    """Close the shared client. Called at app shutdown."""
    global _client_instance
    if _client_instance is not None:
        await _client_instance.close()
        _client_instance = None


def get_team_directory(client: Annotated[EspnClient, Depends(get_espn_client)]) -> TeamDirectory:
    return TeamDirectory(client)


def get_athlete_directory(client: Annotated[EspnClient, Depends(get_espn_client)]) -> AthleteDirectory:
    return AthleteDirectory(client)


def get_snapshot_cache() -> SnapshotCache:
    return SnapshotCache(settings=get_settings())


TeamDirectoryDependency = Annotated[TeamDirectory, Depends(get_team_directory)]
AthleteDirectoryDependency = Annotated[AthleteDirectory, Depends(get_athlete_directory)]
SnapshotCacheDependency = Annotated[SnapshotCache, Depends(get_snapshot_cache)]
