import asyncio
from typing import Any

from fantasy_football_manager.sleeper.draft_source import UNKNOWN_POSITION, SleeperDraftResultsSource
from fantasy_football_manager.sleeper.league_source import SleeperPlayerDirectory
from tests.fakes.sleeper_api import PLAYERS, ROSTERS, USERS, SleeperRoutes

_PICKS: list[dict[str, Any]] = [
    {"pick_no": 2, "round": 1, "draft_slot": 2, "roster_id": 2, "player_id": "4046"},
    {"pick_no": 1, "round": 1, "draft_slot": 1, "roster_id": 1, "player_id": "9509"},
    {
        "pick_no": 3,
        "roster_id": 2,
        "player_id": "11111",
        "metadata": {"first_name": "Rookie", "last_name": "Runner"},
    },
]


def _routes(drafts: list[dict[str, Any]]) -> SleeperRoutes:
    return SleeperRoutes(
        {
            "/league/L1/drafts": drafts,
            "/draft/D9/picks": _PICKS,
            "/league/L1/rosters": ROSTERS,
            "/league/L1/users": USERS,
            "/players/nfl": PLAYERS,
        }
    )


def _fetch(routes: SleeperRoutes) -> list[Any]:
    client = routes.client()
    return asyncio.run(SleeperDraftResultsSource(client, SleeperPlayerDirectory(client)).fetch_actual_picks("L1"))


class TestSleeperDraftResultsSource:
    def test_picks_sorted_by_overall(self) -> None:
        picks = _fetch(_routes([{"draft_id": "D9"}, {"draft_id": "OLD"}]))
        assert [p.overall for p in picks] == [1, 2, 3]
        assert picks[0].player_name == "Bijan Robinson"
        assert picks[0].manager == "Gridiron Gang"
        assert picks[1].position == "QB"

    def test_most_recent_draft_is_used(self) -> None:
        routes = _routes([{"draft_id": "D9"}, {"draft_id": "OLD"}])
        _fetch(routes)
        assert "/draft/D9/picks" in routes.requested
        assert "/draft/OLD/picks" not in routes.requested

    def test_unknown_player_uses_metadata_and_placeholder_position(self) -> None:
        pick = _fetch(_routes([{"draft_id": "D9"}]))[2]
        assert pick.player_name == "Rookie Runner"
        assert pick.position == UNKNOWN_POSITION
        # round and slot derived from the two-team league
        assert (pick.round, pick.pick) == (2, 1)

    def test_no_drafts_yields_no_picks(self) -> None:
        assert _fetch(_routes([])) == []
