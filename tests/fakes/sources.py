from fantasy_football_manager.domain.draft_pick import ActualDraftPick
from fantasy_football_manager.domain.league import ManagerHistory
from fantasy_football_manager.domain.ranking import RankingPool
from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.sleeper.models import SleeperPlayer


class FakeRankingSource:
    """Serves the given pools in order, repeating the last one."""

    def __init__(self, *pools: RankingPool) -> None:
        self._pools = list(pools)
        self.calls: list[tuple[str, int]] = []

    async def fetch_pool(self, fmt: str, size: int) -> RankingPool:
        self.calls.append((fmt, size))
        pool = self._pools[min(len(self.calls), len(self._pools)) - 1]
        return RankingPool(entries=pool.entries[:size], adjustments=pool.adjustments)


class FailingRankingSource:
    async def fetch_pool(self, fmt: str, size: int) -> RankingPool:
        raise ProviderError("fake", "rankings unavailable")


class FakeLeagueHistorySource:
    def __init__(self, histories: list[ManagerHistory] | None = None) -> None:
        self._histories = histories or []

    async def fetch_histories(self, league_id: str) -> list[ManagerHistory]:
        return list(self._histories)


class FakeDraftResultsSource:
    def __init__(self, picks: list[ActualDraftPick] | None = None) -> None:
        self._picks = picks or []
        self.calls = 0

    async def fetch_actual_picks(self, league_id: str) -> list[ActualDraftPick]:
        self.calls += 1
        return list(self._picks)


class FakePlayerDirectory:
    def __init__(self, players: dict[str, SleeperPlayer] | None = None) -> None:
        self._players = players or {}
        self.calls = 0

    async def fetch_players(self) -> dict[str, SleeperPlayer]:
        self.calls += 1
        return dict(self._players)
