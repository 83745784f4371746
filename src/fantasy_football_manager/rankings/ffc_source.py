import logging
from collections.abc import Callable
from typing import Any

import httpx

from fantasy_football_manager._retry import default_http_retry
from fantasy_football_manager.domain.ranking import RankingPool, RankingPoolEntry
from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.rankings.entries import sanitize_entry

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://fantasyfootballcalculator.com/api/v1"
_DEFAULT_RETRY = default_http_retry("ffc_adp")

# Our format names to FantasyFootballCalculator's
_FFC_FORMATS: dict[str, str] = {
    "dynasty": "dynasty",
    "redraft": "ppr",
    "ppr": "ppr",
    "half-ppr": "half-ppr",
    "standard": "standard",
    "2qb": "2qb",
    "rookie": "rookie",
}


class FantasyFootballCalculatorSource:
    """Ranking pool from FantasyFootballCalculator ADP.

    FFC publishes no market value, so entries carry the default value and are
    ranked purely by ADP.
    """

    def __init__(
        self,
        season: int,
        teams: int = 12,
        client: httpx.AsyncClient | None = None,
        base_url: str = DEFAULT_BASE_URL,
        retry: Callable[..., Callable[..., Any]] = _DEFAULT_RETRY,
    ) -> None:
        self._season = season
        self._teams = teams
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
        self._base_url = base_url.rstrip("/")
        self._get_with_retry = retry(self._do_get)

    async def fetch_pool(self, fmt: str, size: int) -> RankingPool:
        ffc_format = _FFC_FORMATS.get(fmt, fmt)
        url = f"{self._base_url}/adp/{ffc_format}"
        params = {"teams": str(self._teams), "year": str(self._season)}
        try:
            data = await self._get_with_retry(url, params)
        except httpx.HTTPError as e:
            raise ProviderError("ffc", f"ADP fetch failed for format={ffc_format}: {e}") from e

        if not isinstance(data, dict) or str(data.get("status", "")).lower() == "error":
            raise ProviderError("ffc", f"Unexpected ADP response for format={ffc_format}")

        entries: list[RankingPoolEntry] = []
        for raw in data.get("players") or ():
            entry = sanitize_entry(
                name=raw.get("name"),
                position=raw.get("position"),
                rank=raw.get("adp"),
                team=raw.get("team"),
            )
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda e: e.rank)
        logger.debug("Fetched %d FFC entries for format=%s (keeping %d)", len(entries), ffc_format, size)
        return RankingPool(entries=tuple(entries[:size]))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _do_get(self, url: str, params: dict[str, str]) -> Any:
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        return response.json()
