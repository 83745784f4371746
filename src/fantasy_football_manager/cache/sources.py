from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, TypeVar

from fantasy_football_manager.cache.serialization import PlayerDirectorySerializer, RankingPoolSerializer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fantasy_football_manager.cache.protocol import CacheStore
    from fantasy_football_manager.domain.ranking import RankingPool
    from fantasy_football_manager.sleeper.models import SleeperPlayer
    from fantasy_football_manager.sources import PlayerDirectory, RankingSource

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

RANKINGS_NAMESPACE = "rankings"
PLAYERS_NAMESPACE = "sleeper_players"


async def _cached_fetch(
    cache: CacheStore,
    namespace: str,
    cache_key: str,
    ttl_seconds: int,
    fetch_fn: Callable[[], Awaitable[_T]],
    serialize: Callable[[_T], str],
    deserialize: Callable[[str], _T],
    count_fn: Callable[[_T], int],
    count_label: str,
) -> _T:
    """Shared cache-or-fetch logic; store calls run off the event loop."""
    cached = await asyncio.to_thread(cache.get, namespace, cache_key)
    if cached is not None:
        result = deserialize(cached)
        logger.debug("Cache hit for %s [key=%s] (%d %s)", namespace, cache_key, count_fn(result), count_label)
        return result
    logger.debug("Cache miss for %s [key=%s], fetching from source", namespace, cache_key)
    result = await fetch_fn()
    await asyncio.to_thread(cache.put, namespace, cache_key, serialize(result), ttl_seconds)
    logger.debug("Cached %d %s [key=%s, ttl=%ds]", count_fn(result), count_label, cache_key, ttl_seconds)
    return result


class CachedRankingSource:
    def __init__(self, delegate: RankingSource, cache: CacheStore, cache_key: str, ttl_seconds: int) -> None:
        self._delegate = delegate
        self._cache = cache
        self._cache_key = cache_key
        self._ttl_seconds = ttl_seconds
        self._serializer = RankingPoolSerializer()

    async def fetch_pool(self, fmt: str, size: int) -> RankingPool:
        return await _cached_fetch(
            self._cache,
            RANKINGS_NAMESPACE,
            f"{self._cache_key}-{fmt}-{size}",
            self._ttl_seconds,
            lambda: self._delegate.fetch_pool(fmt, size),
            self._serializer.serialize,
            self._serializer.deserialize,
            lambda pool: len(pool.entries),
            "ranking entries",
        )


class CachedPlayerDirectory:
    """Sleeper players directory held in the injected cache store."""

    def __init__(self, delegate: PlayerDirectory, cache: CacheStore, ttl_seconds: int, cache_key: str = "nfl") -> None:
        self._delegate = delegate
        self._cache = cache
        self._cache_key = cache_key
        self._ttl_seconds = ttl_seconds
        self._serializer = PlayerDirectorySerializer()

    async def fetch_players(self) -> dict[str, SleeperPlayer]:
        return await _cached_fetch(
            self._cache,
            PLAYERS_NAMESPACE,
            self._cache_key,
            self._ttl_seconds,
            self._delegate.fetch_players,
            self._serializer.serialize,
            self._serializer.deserialize,
            len,
            "players",
        )
