"""
Upstream data providers.

Usage:
    from gridiron_data.providers import EspnClient, TeamDirectory, AthleteDirectory

    async with EspnClient() as client:
        teams = await TeamDirectory(client).list_teams()
"""

from .athletes import AthleteDirectory
from .espn import EspnClient
from .teams import TeamDirectory

__all__ = [
    "AthleteDirectory",
    "EspnClient",
    "TeamDirectory",
]
