import asyncio

from fantasy_football_manager.sleeper.client import parse_roster, parse_user
from fantasy_football_manager.sleeper.league_source import (
    SleeperLeagueHistorySource,
    SleeperPlayerDirectory,
    manager_names,
)
from tests.fakes.sleeper_api import PLAYERS, ROSTERS, USERS, SleeperRoutes


def _routes(league_type: int) -> SleeperRoutes:
    routes: dict[str, object] = {
        "/league/L1": {"league_id": "L1", "total_rosters": 2, "settings": {"type": league_type}},
        "/league/L1/rosters": ROSTERS,
        "/league/L1/users": USERS,
        "/players/nfl": PLAYERS,
    }
    for week in range(1, 4):
        routes[f"/league/L1/matchups/{week}"] = [
            {"roster_id": 1, "points": 100.0 + week},
            {"roster_id": 2, "points": 0},
        ]
    return SleeperRoutes(routes)


def _source(routes: SleeperRoutes) -> SleeperLeagueHistorySource:
    client = routes.client()
    return SleeperLeagueHistorySource(client, SleeperPlayerDirectory(client), weeks=3)


class TestManagerNames:
    def test_team_name_then_display_name_then_fallback(self) -> None:
        rosters = [parse_roster(r) for r in ROSTERS] + [parse_roster({"roster_id": 3, "owner_id": "ghost"})]
        names = manager_names(rosters, [parse_user(u) for u in USERS])
        assert names == {1: "Gridiron Gang", 2: "alex", 3: "Manager 3"}


class TestSleeperLeagueHistorySource:
    def test_histories_ordered_by_roster_id(self) -> None:
        histories = asyncio.run(_source(_routes(2)).fetch_histories("L1"))
        assert [h.roster_id for h in histories] == [1, 2]
        assert [h.team_index for h in histories] == [0, 1]
        assert histories[0].team_name == "Gridiron Gang"
        assert histories[1].owner_name == "alex"
        assert histories[0].league_size == 2

    def test_dynasty_flag_from_league_type(self) -> None:
        assert all(h.is_dynasty for h in asyncio.run(_source(_routes(2)).fetch_histories("L1")))
        assert not any(h.is_dynasty for h in asyncio.run(_source(_routes(0)).fetch_histories("L1")))

    def test_rosters_resolved_to_player_names(self) -> None:
        histories = asyncio.run(_source(_routes(2)).fetch_histories("L1"))
        assert histories[1].roster_player_ids == ("Patrick Mahomes", "Justin Jefferson")

    def test_zero_point_weeks_are_skipped(self) -> None:
        histories = asyncio.run(_source(_routes(2)).fetch_histories("L1"))
        assert [p.points for p in histories[0].performances] == [101.0, 102.0, 103.0]
        assert histories[1].performances == ()
