"""Athlete API endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Query

from ...core.http import UpstreamAPIError
from ..dependencies import AthleteDirectoryDependency, SnapshotCacheDependency
from ..errors import ExternalServiceError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def list_athletes(
    athletes: AthleteDirectoryDependency,
    limit: Optional[int] = Query(None, ge=1, description="Page size"),
    page: Optional[int] = Query(None, ge=1, description="1-based page index"),
    active_only: Optional[str] = Query(
        None,
        alias="activeOnly",
        description="Anything but 'false' keeps only active athletes",
    ),
) -> dict[str, Any]:
    """
    Get one page of the upstream athlete index, sorted by last name.

    Returns:
        {"data": {"meta": {...}, "athletes": [...]}}
    """
    kwargs: dict[str, Any] = {"active_only": active_only != "false" if active_only else True}
    if limit is not None:
        kwargs["limit"] = limit
    if page is not None:
        kwargs["page"] = page

    try:
        data = await athletes.get_athletes(**kwargs)
    except UpstreamAPIError as e:
        raise ExternalServiceError("Failed to load athletes from ESPN", e)

    return {"data": data}


@router.get("/snapshot")
async def get_athlete_snapshot(cache: SnapshotCacheDependency) -> dict[str, Any]:
    """
    Get the current athlete snapshot.

    Served from the snapshot file; a missing or stale file is rebuilt
    before responding.
    """
    snapshot = await cache.load()
    return snapshot.to_dict()
