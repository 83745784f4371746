"""Contracts for the external collaborators feeding the draft engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from fantasy_football_manager.domain.draft_pick import ActualDraftPick
    from fantasy_football_manager.domain.league import ManagerHistory
    from fantasy_football_manager.domain.ranking import RankingPool
    from fantasy_football_manager.sleeper.models import SleeperPlayer


class RankingSource(Protocol):
    """Current ranking pool for a format (``"dynasty"`` or ``"redraft"``) and pool size."""

    async def fetch_pool(self, fmt: str, size: int) -> RankingPool: ...


class LeagueHistorySource(Protocol):
    async def fetch_histories(self, league_id: str) -> list[ManagerHistory]: ...


class DraftResultsSource(Protocol):
    """Ordered picks of the league's most recent real draft; empty before it starts."""

    async def fetch_actual_picks(self, league_id: str) -> list[ActualDraftPick]: ...


class PlayerDirectory(Protocol):
    async def fetch_players(self) -> dict[str, SleeperPlayer]: ...
