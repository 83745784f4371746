from fantasy_football_manager.cache.protocol import CacheStore
from fantasy_football_manager.cache.sqlite_store import SqliteCacheStore

__all__ = ["CacheStore", "SqliteCacheStore"]
