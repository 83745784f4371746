from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.league import ManagerHistory, WeeklyPerformance
from fantasy_football_manager.numeric import finite_or

if TYPE_CHECKING:
    from fantasy_football_manager.sleeper.client import SleeperClient
    from fantasy_football_manager.sleeper.models import SleeperPlayer, SleeperRoster, SleeperUser
    from fantasy_football_manager.sources import PlayerDirectory

logger = logging.getLogger(__name__)

DEFAULT_WEEKS = 8
_DYNASTY_LEAGUE_TYPE = 2


class SleeperPlayerDirectory:
    """Uncached Sleeper players directory; wrap with ``CachedPlayerDirectory``."""

    def __init__(self, client: SleeperClient) -> None:
        self._client = client

    async def fetch_players(self) -> dict[str, SleeperPlayer]:
        return await self._client.get_players()


def manager_names(rosters: list[SleeperRoster], users: list[SleeperUser]) -> dict[int, str]:
    """Display name per roster id: team name, then user display name, then ``Manager {roster_id}``."""
    by_user = {u.user_id: u for u in users}
    names: dict[int, str] = {}
    for roster in rosters:
        user = by_user.get(roster.owner_id or "")
        if user is not None:
            names[roster.roster_id] = user.team_name or user.display_name or f"Manager {roster.roster_id}"
        else:
            names[roster.roster_id] = f"Manager {roster.roster_id}"
    return names


class SleeperLeagueHistorySource:
    def __init__(self, client: SleeperClient, players: PlayerDirectory, weeks: int = DEFAULT_WEEKS) -> None:
        self._client = client
        self._players = players
        self._weeks = weeks

    async def fetch_histories(self, league_id: str) -> list[ManagerHistory]:
        league, rosters, users, players = await asyncio.gather(
            self._client.get_league(league_id),
            self._client.get_rosters(league_id),
            self._client.get_users(league_id),
            self._players.fetch_players(),
        )
        weekly = await asyncio.gather(
            *(self._client.get_matchups(league_id, week) for week in range(1, self._weeks + 1))
        )

        settings = league.get("settings") or {}
        is_dynasty = settings.get("type") == _DYNASTY_LEAGUE_TYPE
        league_size = int(league.get("total_rosters") or len(rosters))
        by_user = {u.user_id: u for u in users}
        performances: dict[int, list[WeeklyPerformance]] = {}
        for week, matchups in enumerate(weekly, start=1):
            for matchup in matchups:
                points = finite_or(matchup.get("points"), 0.0)
                if points > 0:
                    performances.setdefault(int(matchup["roster_id"]), []).append(WeeklyPerformance(week, points))

        histories: list[ManagerHistory] = []
        for team_index, roster in enumerate(sorted(rosters, key=lambda r: r.roster_id)):
            user = by_user.get(roster.owner_id or "")
            histories.append(
                ManagerHistory(
                    team_index=team_index,
                    team_name=(user.team_name or "") if user else "",
                    owner_name=user.display_name if user else "",
                    wins=roster.wins,
                    losses=roster.losses,
                    ties=roster.ties,
                    points_for=roster.points_for,
                    performances=tuple(performances.get(roster.roster_id, ())),
                    roster_player_ids=tuple(_player_name(players, pid) for pid in roster.players),
                    is_dynasty=is_dynasty,
                    league_size=league_size,
                    roster_id=roster.roster_id,
                )
            )
        logger.debug("Loaded %d manager histories for league %s", len(histories), league_id)
        return histories


def _player_name(players: dict[str, SleeperPlayer], player_id: str) -> str:
    player = players.get(player_id)
    return player.full_name if player is not None else player_id
