"""CSV-based ranking source for hand-maintained or exported boards."""

from __future__ import annotations

import asyncio
import csv
import logging
from pathlib import Path

from fantasy_football_manager.domain.ranking import RankingAdjustment, RankingPool, RankingPoolEntry
from fantasy_football_manager.exceptions import ProviderError
from fantasy_football_manager.numeric import finite_or
from fantasy_football_manager.rankings.entries import sanitize_entry

logger = logging.getLogger(__name__)


def _normalize_headers(reader: csv.DictReader[str]) -> list[dict[str, str]]:
    """Read all rows with case-insensitive header normalization."""
    if reader.fieldnames is None:
        return []
    lower_map = {name: name.strip().lower().lstrip("\ufeff") for name in reader.fieldnames}
    return [{lower_map[k]: (v or "") for k, v in row.items() if k in lower_map} for row in reader]


class CsvRankingSource:
    """Reads a ranking pool from a CSV file.

    Required columns are ``name``, ``position`` and ``rank`` (``adp`` is
    accepted for rank). Optional columns: ``team``, ``age``, ``value``
    (or ``market_value``), ``news_delta`` and ``news_reasons`` (``|``
    separated). Rows with a non-zero ``news_delta`` also produce a
    ``RankingAdjustment``. The format argument is ignored: the file is the board.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    async def fetch_pool(self, fmt: str, size: int) -> RankingPool:
        return await asyncio.to_thread(self.read_pool, size)

    def read_pool(self, size: int) -> RankingPool:
        try:
            with self._path.open(newline="", encoding="utf-8") as f:
                rows = _normalize_headers(csv.DictReader(f))
        except OSError as e:
            raise ProviderError("csv", f"Cannot read rankings from {self._path}: {e}") from e

        entries: list[RankingPoolEntry] = []
        adjustments: list[RankingAdjustment] = []
        for row in rows:
            entry = sanitize_entry(
                name=row.get("name"),
                position=row.get("position") or row.get("pos"),
                rank=row.get("rank") or row.get("adp"),
                market_value=row.get("value") or row.get("market_value") or None,
                team=row.get("team"),
                age=row.get("age") or None,
            )
            if entry is None:
                continue
            entries.append(entry)
            delta = finite_or(row.get("news_delta") or None, 0.0)  # type: ignore[arg-type]
            if delta:
                reasons = tuple(r.strip() for r in row.get("news_reasons", "").split("|") if r.strip())
                adjustments.append(RankingAdjustment(name=entry.name, delta=delta, reasons=reasons))

        entries.sort(key=lambda e: e.rank)
        logger.debug("Read %d ranking entries from %s", len(entries), self._path)
        kept = entries[:size]
        kept_names = {e.name for e in kept}
        return RankingPool(
            entries=tuple(kept),
            adjustments=tuple(a for a in adjustments if a.name in kept_names),
        )
