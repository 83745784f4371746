import logging
from collections.abc import Callable
from typing import Any

import httpx

from fantasy_football_manager._retry import default_http_retry
from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.numeric import finite_or
from fantasy_football_manager.sleeper.models import SleeperPlayer, SleeperRoster, SleeperUser

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sleeper.app/v1"
_DEFAULT_RETRY = default_http_retry("sleeper_api")


class SleeperClient:
    """Async client for the public Sleeper API."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        retry: Callable[..., Callable[..., Any]] = _DEFAULT_RETRY,
    ) -> None:
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
        self._base_url = base_url.rstrip("/")
        self._get_with_retry = retry(self._do_get)

    async def get_league(self, league_id: str) -> dict[str, Any]:
        return await self._get(f"/league/{league_id}") or {}

    async def get_rosters(self, league_id: str) -> list[SleeperRoster]:
        data = await self._get(f"/league/{league_id}/rosters") or []
        return [parse_roster(r) for r in data]

    async def get_users(self, league_id: str) -> list[SleeperUser]:
        data = await self._get(f"/league/{league_id}/users") or []
        return [parse_user(u) for u in data]

    async def get_matchups(self, league_id: str, week: int) -> list[dict[str, Any]]:
        return await self._get(f"/league/{league_id}/matchups/{week}") or []

    async def get_league_drafts(self, league_id: str) -> list[dict[str, Any]]:
        return await self._get(f"/league/{league_id}/drafts") or []

    async def get_draft_picks(self, draft_id: str) -> list[dict[str, Any]]:
        return await self._get(f"/draft/{draft_id}/picks") or []

    async def get_players(self, sport: str = "nfl") -> dict[str, SleeperPlayer]:
        data: dict[str, dict[str, Any]] = await self._get(f"/players/{sport}") or {}
        logger.debug("Fetched %d Sleeper players", len(data))
        return {pid: parse_player(pid, raw) for pid, raw in data.items()}

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        try:
            return await self._get_with_retry(url)
        except httpx.HTTPError as e:
            raise ProviderError("sleeper", f"GET {path} failed: {e}") from e

    async def _do_get(self, url: str) -> Any:
        response = await self._client.get(url)
        response.raise_for_status()
        return response.json()


def parse_roster(raw: dict[str, Any]) -> SleeperRoster:
    settings = raw.get("settings") or {}
    points = finite_or(settings.get("fpts"), 0.0) + finite_or(settings.get("fpts_decimal"), 0.0) / 100
    return SleeperRoster(
        roster_id=int(raw["roster_id"]),
        owner_id=raw.get("owner_id"),
        players=tuple(str(p) for p in raw.get("players") or ()),
        wins=int(settings.get("wins") or 0),
        losses=int(settings.get("losses") or 0),
        ties=int(settings.get("ties") or 0),
        points_for=points,
    )


def parse_user(raw: dict[str, Any]) -> SleeperUser:
    metadata = raw.get("metadata") or {}
    return SleeperUser(
        user_id=str(raw["user_id"]),
        display_name=raw.get("display_name") or raw.get("username") or "",
        team_name=metadata.get("team_name") or None,
    )


def parse_player(player_id: str, raw: dict[str, Any]) -> SleeperPlayer:
    full_name = raw.get("full_name") or " ".join(
        part for part in (raw.get("first_name"), raw.get("last_name")) if part
    )
    age = raw.get("age")
    return SleeperPlayer(
        player_id=player_id,
        full_name=full_name or player_id,
        position=raw.get("position"),
        team=raw.get("team"),
        age=finite_or(age, 0.0) or None,
    )
