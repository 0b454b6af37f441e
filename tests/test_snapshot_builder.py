"""Tests for the snapshot build pipeline."""

import pytest

from gridiron_data.core.http import UpstreamAPIError
from gridiron_data.services.snapshot_builder import (
    SCHEMA_VERSION,
    SnapshotBuilder,
    build_athlete_snapshot,
    make_dst_record,
    utc_now_iso,
)

from .factories import (
    PASSING_ROW,
    FakeAthleteDirectory,
    FakeTeamDirectory,
    athlete,
    athlete_stats_payload,
    event,
    make_team,
    roster_payload,
    routed_client,
    schedule_payload,
    team_payload,
    team_statistics_payload,
)

ATL = make_team("1", "Atlanta Falcons", "ATL")
BUF = make_team("2", "Buffalo Bills", "BUF")


def by_id(snapshot):
    return {player.id: player for player in snapshot.players}


class TestDstRecord:
    def test_zero_filled_team_unit(self):
        record = make_dst_record(ATL)

        assert record.id == "dst-1"
        assert record.display_name == "Atlanta Falcons"
        assert record.position.abbreviation == "D/ST"
        assert record.headshot == ATL.logo
        assert record.sacks == 0
        assert record.team.abbreviation == "ATL"

    def test_timestamp_format(self, now):
        assert utc_now_iso(now) == "2024-10-01T12:00:00.000Z"


class TestBuild:
    @pytest.fixture
    def teams(self):
        return FakeTeamDirectory(
            [ATL, BUF],
            rosters={
                "1": roster_payload(
                    ATL,
                    [athlete("10", "Matt", "Smith", "QB"), athlete("11", "Drake", "London", "WR")],
                ),
            },
            schedules={
                "1": schedule_payload(
                    event("2024-10-06T17:00Z", home=("1", "ATL"), away=("2", "BUF")),
                    bye_week=12,
                ),
            },
            statistics={
                "1": team_statistics_payload({
                    "defensive": {"sacks": 10.0},
                    "returning": {"kickReturnTouchdowns": 1.0, "puntReturnTouchdowns": 1.0},
                }),
            },
            failing={"2"},
        )

    async def test_failed_team_keeps_zero_filled_dst(self, teams, now):
        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)
        players = by_id(snapshot)

        assert set(players) == {"dst-1", "dst-2", "10", "11"}
        assert players["dst-2"].sacks == 0
        assert players["dst-2"].bye_week is None
        assert players["dst-2"].upcoming_opponent is None

    async def test_stamps(self, teams, now):
        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)

        assert snapshot.schema_version == SCHEMA_VERSION
        assert snapshot.season == 2024
        assert snapshot.generated_at.endswith("Z")

    async def test_team_context_is_copied_onto_players(self, teams, now):
        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)
        players = by_id(snapshot)

        for player_id in ("10", "11", "dst-1"):
            assert players[player_id].bye_week == 12
            assert players[player_id].upcoming_opponent == "vs BUF"
            assert players[player_id].kickoff is not None
        assert players["10"].team.abbreviation == "ATL"
        assert players["10"].position.abbreviation == "QB"

    async def test_team_defense_aggregates(self, teams, now):
        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)
        dst = by_id(snapshot)["dst-1"]

        assert dst.sacks == 10.0
        assert dst.return_touchdowns == 2
        assert dst.interceptions == 0

    async def test_athlete_stats_are_applied(self, teams, now):
        athletes = FakeAthleteDirectory(
            stats={"10": athlete_stats_payload("1", passing=PASSING_ROW)},
            failing={"11"},
        )

        snapshot = await SnapshotBuilder(teams, athletes).build(now=now)
        players = by_id(snapshot)

        assert players["10"].passing_yards == 250
        assert players["10"].passer_rating == pytest.approx(95.5)
        # A failed stats fetch leaves the player in place with zeros
        assert players["11"].receptions == 0

    async def test_dst_entries_have_no_athlete_stats_fetch(self, teams, now):
        athletes = FakeAthleteDirectory()

        await SnapshotBuilder(teams, athletes).build(now=now)

        assert sorted(athletes.calls) == ["10", "11"]

    async def test_team_enumeration_failure_is_fatal(self, now):
        teams = FakeTeamDirectory([], list_error=UpstreamAPIError("Service Unavailable", status_code=503))

        with pytest.raises(UpstreamAPIError):
            await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)

    async def test_no_teams(self, now):
        snapshot = await SnapshotBuilder(FakeTeamDirectory([]), FakeAthleteDirectory()).build(now=now)

        assert snapshot.players == []


class TestRosterFiltering:
    async def test_first_seen_entry_wins(self, now):
        teams = FakeTeamDirectory(
            [ATL],
            rosters={
                "1": roster_payload(
                    ATL,
                    [athlete("10", "Matt", "Smith", "WR")],
                    [athlete("10", "Matt", "Smith", "QB")],
                ),
            },
        )

        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)

        assert [p.position.abbreviation for p in snapshot.players if p.id == "10"] == ["WR"]

    async def test_inactive_and_unknown_positions_are_skipped(self, now):
        teams = FakeTeamDirectory(
            [ATL],
            rosters={
                "1": roster_payload(
                    ATL,
                    [
                        athlete("20", "Old", "Timer", "QB", status="retired"),
                        athlete("21", "Big", "Tackle", "OT", position_name="Offensive Tackle"),
                        athlete("22", "No", "Status", "RB", status=None),
                        athlete("23", "Kick", "Er", "PK"),
                        athlete("", "No", "Id", "WR"),
                    ],
                ),
            },
        )

        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)
        players = by_id(snapshot)

        assert set(players) == {"dst-1", "22", "23"}
        assert players["23"].position.abbreviation == "K"

    async def test_sorted_by_last_name_then_display_name(self, now):
        zebras = make_team("3", "Zebra Team", "ZEB")
        teams = FakeTeamDirectory(
            [zebras],
            rosters={
                "3": roster_payload(
                    zebras,
                    [athlete("30", "Jane", "Smith", "RB"), athlete("31", "John", "Adams", "TE")],
                ),
            },
        )

        snapshot = await SnapshotBuilder(teams, FakeAthleteDirectory()).build(now=now)

        assert [p.display_name for p in snapshot.players] == ["John Adams", "Jane Smith", "Zebra Team"]


class TestStatsEnrichment:
    async def test_batches_bound_concurrency(self, now):
        roster = [athlete(str(100 + i), "Player", f"Number{i:02d}", "WR") for i in range(30)]
        teams = FakeTeamDirectory([ATL], rosters={"1": roster_payload(ATL, roster)})
        athletes = FakeAthleteDirectory()

        await SnapshotBuilder(teams, athletes, batch_size=12).build(now=now)

        assert len(athletes.calls) == 30
        assert athletes.max_in_flight == 12

    async def test_fetches_are_memoized_per_build(self):
        athletes = FakeAthleteDirectory(stats={"10": athlete_stats_payload("1", passing=PASSING_ROW)})
        builder = SnapshotBuilder(FakeTeamDirectory([]), athletes)
        stats_cache = {}

        first = builder._fetch_skill_stats(stats_cache, "10", "1", 2024)
        second = builder._fetch_skill_stats(stats_cache, "10", "1", 2024)

        assert first is second
        assert (await first).passing_yards == 250
        assert athletes.calls == ["10"]


class TestBuildAgainstEspn:
    async def test_end_to_end(self, settings, now):
        routes = {
            "/teams": {"sports": [{"leagues": [{"teams": [{"team": team_payload("1", "Atlanta Falcons", "ATL")}]}]}]},
            "/teams/1/roster": roster_payload(ATL, [athlete("10", "Matt", "Smith", "QB")]),
            "/teams/1/schedule": schedule_payload(bye_week=12),
            "/seasons/2024/types/2/teams/1/statistics": team_statistics_payload({"defensive": {"sacks": 10.0}}),
            "/athletes/10/stats": athlete_stats_payload("1", passing=PASSING_ROW),
        }

        async with routed_client(settings, routes) as client:
            snapshot = await build_athlete_snapshot(client=client, settings=settings, now=now)

        players = by_id(snapshot)
        assert [p.id for p in snapshot.players] == ["dst-1", "10"]
        assert players["dst-1"].sacks == 10.0
        assert players["10"].passing_touchdowns == 2
        assert players["10"].bye_week == 12
        assert players["10"].upcoming_opponent is None
