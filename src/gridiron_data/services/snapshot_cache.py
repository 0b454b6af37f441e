"""
Snapshot persistence and freshness policy.

The snapshot file is reused while it matches the current season and the
current schema version. Anything else (missing file, bad JSON, season
rollover, schema bump) triggers a synchronous rebuild, which is persisted
before it is returned.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from ..core.config import Settings, get_settings
from ..core.models import AthletesSnapshot, PlayerRecord
from ..core.types import get_current_season
from .snapshot_builder import SCHEMA_VERSION, build_athlete_snapshot

logger = logging.getLogger(__name__)

# Called with the same `now` that judged the persisted snapshot stale.
SnapshotFactory = Callable[[Optional[datetime]], Awaitable[AthletesSnapshot]]


class StaleSnapshotError(Exception):
    """Persisted snapshot is missing, unreadable, or out of date."""


class SnapshotCache:
    """File-backed cache for the athlete snapshot."""

    def __init__(
        self,
        path: Optional[str | Path] = None,
        rebuild: Optional[SnapshotFactory] = None,
        settings: Optional[Settings] = None,
        schema_version: int = SCHEMA_VERSION,
    ):
        settings = settings or get_settings()
        self.path = Path(path or settings.snapshot_path)
        self.schema_version = schema_version
        self._rebuild = rebuild or (lambda now=None: build_athlete_snapshot(settings=settings, now=now))

    def read(self, now: Optional[datetime] = None) -> AthletesSnapshot:
        """
        Read and validate the persisted snapshot.

        Raises:
            StaleSnapshotError: If the snapshot cannot be reused
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise StaleSnapshotError(f"no snapshot at {self.path}")
        except OSError as e:
            raise StaleSnapshotError(f"cannot read {self.path}: {e}")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StaleSnapshotError(f"snapshot is not valid JSON: {e}")

        if not isinstance(data, dict) or not isinstance(data.get("players"), list):
            raise StaleSnapshotError("snapshot has no player list")

        season = get_current_season(now)
        if data.get("season") != season:
            raise StaleSnapshotError(f"snapshot season {data.get('season')} != current season {season}")
        if data.get("schemaVersion") != self.schema_version:
            raise StaleSnapshotError(
                f"snapshot schema {data.get('schemaVersion')} != current schema {self.schema_version}"
            )

        try:
            return AthletesSnapshot.model_validate(data)
        except ValidationError as e:
            raise StaleSnapshotError(f"snapshot does not match the player schema: {e}")

    async def load(self, now: Optional[datetime] = None) -> AthletesSnapshot:
        """Return the persisted snapshot, rebuilding and saving it when stale."""
        try:
            return self.read(now)
        except StaleSnapshotError as e:
            logger.warning(f"Athlete snapshot missing or stale ({e}). Rebuilding cache...")

        snapshot = await self._rebuild(now)
        self.save(snapshot)
        return snapshot

    def save(self, snapshot: AthletesSnapshot) -> Path:
        """Persist atomically: write a sibling temp file, then replace."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = snapshot.model_dump_json(by_alias=True, indent=2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved snapshot with {len(snapshot.players)} players to {self.path}")
        return self.path


async def list_active_athletes(cache: Optional[SnapshotCache] = None) -> list[PlayerRecord]:
    """Players of the current snapshot, rebuilding it if needed."""
    snapshot = await (cache or SnapshotCache()).load()
    return snapshot.players
