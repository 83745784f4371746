import asyncio

from fantasy_football_manager.cache.sources import (
    PLAYERS_NAMESPACE,
    RANKINGS_NAMESPACE,
    CachedPlayerDirectory,
    CachedRankingSource,
)
from fantasy_football_manager.cache.sqlite_store import SqliteCacheStore
from fantasy_football_manager.domain.ranking import RankingAdjustment, RankingPool
from fantasy_football_manager.sleeper.models import SleeperPlayer
from tests.fakes.pools import make_entries, make_pool
from tests.fakes.sources import FakePlayerDirectory, FakeRankingSource


class TestCachedRankingSource:
    def test_miss_fetches_and_stores(self) -> None:
        store = SqliteCacheStore(":memory:")
        delegate = FakeRankingSource(make_pool(30))
        source = CachedRankingSource(delegate, store, "ffc", ttl_seconds=600)

        pool = asyncio.run(source.fetch_pool("dynasty", 20))

        assert len(pool.entries) == 20
        assert delegate.calls == [("dynasty", 20)]
        assert store.get(RANKINGS_NAMESPACE, "ffc-dynasty-20") is not None

    def test_hit_skips_delegate(self) -> None:
        store = SqliteCacheStore(":memory:")
        delegate = FakeRankingSource(make_pool(30))
        source = CachedRankingSource(delegate, store, "ffc", ttl_seconds=600)

        first = asyncio.run(source.fetch_pool("dynasty", 20))
        second = asyncio.run(source.fetch_pool("dynasty", 20))

        assert first == second
        assert len(delegate.calls) == 1

    def test_key_includes_format_and_size(self) -> None:
        store = SqliteCacheStore(":memory:")
        delegate = FakeRankingSource(make_pool(30))
        source = CachedRankingSource(delegate, store, "ffc", ttl_seconds=600)

        asyncio.run(source.fetch_pool("dynasty", 20))
        asyncio.run(source.fetch_pool("redraft", 20))
        asyncio.run(source.fetch_pool("dynasty", 10))

        assert delegate.calls == [("dynasty", 20), ("redraft", 20), ("dynasty", 10)]

    def test_adjustments_survive_the_cache(self) -> None:
        store = SqliteCacheStore(":memory:")
        adjustments = (RankingAdjustment(name="Player 03", delta=4.0, reasons=("Injury",)),)
        delegate = FakeRankingSource(RankingPool(entries=make_entries(5), adjustments=adjustments))
        source = CachedRankingSource(delegate, store, "csv", ttl_seconds=600)

        asyncio.run(source.fetch_pool("dynasty", 5))
        cached = asyncio.run(source.fetch_pool("dynasty", 5))

        assert cached.adjustments == adjustments
        assert cached.entries == make_entries(5)


class TestCachedPlayerDirectory:
    def test_hit_skips_delegate(self) -> None:
        store = SqliteCacheStore(":memory:")
        players = {"4046": SleeperPlayer(player_id="4046", full_name="Patrick Mahomes", position="QB", team="KC")}
        delegate = FakePlayerDirectory(players)
        directory = CachedPlayerDirectory(delegate, store, ttl_seconds=3600)

        assert asyncio.run(directory.fetch_players()) == players
        assert asyncio.run(directory.fetch_players()) == players
        assert delegate.calls == 1
        assert store.get(PLAYERS_NAMESPACE, "nfl") is not None

    def test_expired_entry_refetches(self) -> None:
        now = 0.0

        def clock() -> float:
            return now

        store = SqliteCacheStore(":memory:", clock=clock)
        delegate = FakePlayerDirectory({})
        directory = CachedPlayerDirectory(delegate, store, ttl_seconds=10)

        asyncio.run(directory.fetch_players())
        now = 11.0
        asyncio.run(directory.fetch_players())

        assert delegate.calls == 2
