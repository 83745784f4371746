from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from fantasy_football_manager.domain.draft_pick import ActualDraftPick
from fantasy_football_manager.sleeper.league_source import manager_names

if TYPE_CHECKING:
    from fantasy_football_manager.sleeper.client import SleeperClient
    from fantasy_football_manager.sleeper.models import SleeperPlayer
    from fantasy_football_manager.sources import PlayerDirectory

logger = logging.getLogger(__name__)

UNKNOWN_POSITION = "UNK"


class SleeperDraftResultsSource:
    def __init__(self, client: SleeperClient, players: PlayerDirectory) -> None:
        self._client = client
        self._players = players

    async def fetch_actual_picks(self, league_id: str) -> list[ActualDraftPick]:
        drafts = await self._client.get_league_drafts(league_id)
        if not drafts or not drafts[0].get("draft_id"):
            logger.info("No drafts found for league %s", league_id)
            return []
        draft_id = str(drafts[0]["draft_id"])
        raw_picks, rosters, users, players = await asyncio.gather(
            self._client.get_draft_picks(draft_id),
            self._client.get_rosters(league_id),
            self._client.get_users(league_id),
            self._players.fetch_players(),
        )
        team_count = len(rosters) or 12
        names = manager_names(rosters, users)
        picks = [_to_actual_pick(raw, players, names, team_count) for raw in raw_picks]
        picks.sort(key=lambda p: p.overall)
        logger.debug("Loaded %d picks from draft %s", len(picks), draft_id)
        return picks


def _to_actual_pick(
    raw: dict[str, Any],
    players: dict[str, SleeperPlayer],
    names: dict[int, str],
    team_count: int,
) -> ActualDraftPick:
    overall = int(raw["pick_no"])
    roster_id = int(raw.get("roster_id") or 0)
    player_id = str(raw.get("player_id") or "")
    metadata = raw.get("metadata") or {}
    player = players.get(player_id)
    if player is not None:
        name = player.full_name
        position = player.position or metadata.get("position") or UNKNOWN_POSITION
    else:
        parts = (metadata.get("first_name"), metadata.get("last_name"))
        name = " ".join(p for p in parts if p) or f"Player {player_id}"
        position = metadata.get("position") or UNKNOWN_POSITION
    return ActualDraftPick(
        overall=overall,
        round=int(raw.get("round") or (overall - 1) // team_count + 1),
        pick=int(raw.get("draft_slot") or (overall - 1) % team_count + 1),
        roster_id=roster_id,
        player_id=player_id,
        player_name=name,
        position=position,
        manager=names.get(roster_id, f"Manager {roster_id}"),
    )
