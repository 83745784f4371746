from __future__ import annotations

from typing import Protocol


class CacheStore(Protocol):
    """Namespaced string store with per-entry expiry.

    ``put`` is a last-write-wins upsert: writing the same namespace and key
    twice keeps only the second value and resets its TTL.
    """

    def get(self, namespace: str, key: str) -> str | None: ...

    def put(self, namespace: str, key: str, value: str, ttl_seconds: int) -> None: ...

    def invalidate(self, namespace: str, key: str | None = None) -> None: ...
