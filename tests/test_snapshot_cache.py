"""Tests for snapshot persistence and the freshness policy."""

import json
from datetime import datetime, timezone

import pytest

from gridiron_data.core.models import AthletesSnapshot
from gridiron_data.core.types import get_current_season
from gridiron_data.services.snapshot_builder import SCHEMA_VERSION, make_dst_record
from gridiron_data.services.snapshot_cache import SnapshotCache, StaleSnapshotError, list_active_athletes

from .factories import make_team

ATL = make_team("1", "Atlanta Falcons", "ATL")


def make_snapshot(season: int = 2024, schema_version: int = SCHEMA_VERSION) -> AthletesSnapshot:
    return AthletesSnapshot(
        schema_version=schema_version,
        generated_at="2024-09-01T08:00:00.000Z",
        season=season,
        players=[make_dst_record(ATL)],
    )


class CountingRebuild:
    def __init__(self, snapshot: AthletesSnapshot):
        self.snapshot = snapshot
        self.calls = 0
        self.nows = []

    async def __call__(self, now=None) -> AthletesSnapshot:
        self.calls += 1
        self.nows.append(now)
        return self.snapshot


@pytest.fixture
def path(tmp_path):
    return tmp_path / "cache" / "athletes.json"


@pytest.fixture
def rebuild():
    return CountingRebuild(make_snapshot())


@pytest.fixture
def cache(path, rebuild, settings):
    return SnapshotCache(path=path, rebuild=rebuild, settings=settings)


class TestLoad:
    async def test_missing_file_is_rebuilt_and_persisted(self, cache, rebuild, path, now):
        snapshot = await cache.load(now=now)

        assert rebuild.calls == 1
        assert snapshot is rebuild.snapshot
        assert rebuild.nows == [now]
        assert path.exists()
        assert cache.read(now=now).to_dict() == snapshot.to_dict()

    async def test_fresh_file_is_reused_as_is(self, cache, rebuild, now):
        persisted = make_snapshot()
        persisted.players[0].sacks = 31
        cache.save(persisted)

        snapshot = await cache.load(now=now)

        assert rebuild.calls == 0
        assert snapshot.to_dict() == persisted.to_dict()

    async def test_previous_season_is_rebuilt(self, cache, rebuild, now):
        cache.save(make_snapshot(season=2023))

        snapshot = await cache.load(now=now)

        assert rebuild.calls == 1
        assert snapshot.season == 2024
        assert cache.read(now=now).season == 2024

    async def test_other_schema_version_is_rebuilt(self, cache, rebuild, now):
        cache.save(make_snapshot(schema_version=SCHEMA_VERSION - 1))

        await cache.load(now=now)

        assert rebuild.calls == 1
        assert cache.read(now=now).schema_version == SCHEMA_VERSION

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps({"season": 2024, "schemaVersion": SCHEMA_VERSION}),
            json.dumps([]),
        ],
    )
    async def test_unusable_file_is_rebuilt(self, cache, rebuild, path, now, content):
        path.parent.mkdir(parents=True)
        path.write_text(content)

        await cache.load(now=now)

        assert rebuild.calls == 1
        assert json.loads(path.read_text())["players"]

    async def test_rebuild_failure_propagates(self, path, settings, now):
        async def failing(now=None):
            raise RuntimeError("ESPN is down")

        cache = SnapshotCache(path=path, rebuild=failing, settings=settings)

        with pytest.raises(RuntimeError):
            await cache.load(now=now)
        assert not path.exists()

    async def test_rebuild_follows_the_reference_time(self, path, settings):
        later = datetime(2030, 10, 1, tzinfo=timezone.utc)
        calls = []

        async def rebuild(now=None):
            calls.append(now)
            return make_snapshot(season=get_current_season(now))

        cache = SnapshotCache(path=path, rebuild=rebuild, settings=settings)
        await cache.load(now=later)
        snapshot = await cache.load(now=later)

        assert calls == [later]
        assert snapshot.season == 2030

    async def test_default_rebuild_receives_the_reference_time(self, path, settings, monkeypatch):
        later = datetime(2030, 10, 1, tzinfo=timezone.utc)
        calls = []

        async def build_athlete_snapshot(**kwargs):
            calls.append(kwargs)
            return make_snapshot(season=2030)

        monkeypatch.setattr("gridiron_data.services.snapshot_cache.build_athlete_snapshot", build_athlete_snapshot)

        await SnapshotCache(path=path, settings=settings).load(now=later)

        assert calls == [{"settings": settings, "now": later}]

    async def test_list_active_athletes(self, cache, now):
        cache.save(make_snapshot())

        players = await list_active_athletes(cache)

        assert [player.id for player in players] == ["dst-1"]


class TestRead:
    def test_missing(self, cache, now):
        with pytest.raises(StaleSnapshotError):
            cache.read(now=now)

    def test_season_follows_the_clock(self, cache, now):
        cache.save(make_snapshot(season=2024))

        with pytest.raises(StaleSnapshotError):
            cache.read(now=datetime(2025, 7, 1, tzinfo=timezone.utc))
        assert cache.read(now=datetime(2025, 6, 30, tzinfo=timezone.utc)).season == 2024


class TestSave:
    def test_camel_case_on_disk(self, cache, path):
        cache.save(make_snapshot())

        data = json.loads(path.read_text())
        player = data["players"][0]

        assert data["schemaVersion"] == SCHEMA_VERSION
        assert data["generatedAt"] == "2024-09-01T08:00:00.000Z"
        assert player["displayName"] == "Atlanta Falcons"
        assert player["byeWeek"] is None
        assert player["fieldGoals_1_19"] == {"made": 0, "attempts": 0}
        assert player["team"]["abbreviation"] == "ATL"

    def test_no_temp_files_left_behind(self, cache, path):
        cache.save(make_snapshot())
        cache.save(make_snapshot())

        assert [p.name for p in path.parent.iterdir()] == ["athletes.json"]

    def test_failed_write_keeps_previous_file(self, cache, path, monkeypatch):
        cache.save(make_snapshot(season=2023))
        before = path.read_text()

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("gridiron_data.services.snapshot_cache.os.replace", boom)
        with pytest.raises(OSError):
            cache.save(make_snapshot(season=2024))

        assert path.read_text() == before
        assert [p.name for p in path.parent.iterdir()] == ["athletes.json"]
