import logging
import sqlite3
from collections.abc import Callable

from fantasy_football_manager.domain.calibration import CalibrationWeights

logger = logging.getLogger(__name__)


class SqliteCalibrationRepo:
    """Calibration weights, one row per league and season.

    ``update`` runs its read-modify-write inside a ``BEGIN IMMEDIATE``
    transaction, so two concurrent retrospectives for the same league and
    season serialize on the write lock instead of both blending against the
    same stale row.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get(self, league_id: str, season: int) -> CalibrationWeights:
        row = self._conn.execute(
            self._select_sql() + " WHERE league_id = ? AND season = ?",
            (league_id, season),
        ).fetchone()
        if row is None:
            return CalibrationWeights(league_id=league_id, season=season)
        return self._row_to_weights(row)

    def update(
        self,
        league_id: str,
        season: int,
        apply: Callable[[CalibrationWeights], CalibrationWeights],
    ) -> CalibrationWeights:
        old_isolation = self._conn.isolation_level
        self._conn.isolation_level = None
        try:
            self._conn.execute("BEGIN IMMEDIATE")
            current = self.get(league_id, season)
            updated = apply(current)
            self._upsert(league_id, season, updated)
            self._conn.execute("COMMIT")
        except Exception:
            self._conn.execute("ROLLBACK")
            raise
        finally:
            self._conn.isolation_level = old_isolation
        logger.debug(
            "Calibration for %s/%d now %s (sample size %d)", league_id, season, updated, updated.sample_size
        )
        return self.get(league_id, season)

    def _upsert(self, league_id: str, season: int, weights: CalibrationWeights) -> None:
        self._conn.execute(
            "INSERT INTO calibration_weights"
            "    (league_id, season, adp_weight, need_weight, tendency_weight, news_weight, rookie_weight,"
            "     sample_size, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
            " ON CONFLICT(league_id, season) DO UPDATE SET"
            "    adp_weight=excluded.adp_weight,"
            "    need_weight=excluded.need_weight,"
            "    tendency_weight=excluded.tendency_weight,"
            "    news_weight=excluded.news_weight,"
            "    rookie_weight=excluded.rookie_weight,"
            "    sample_size=excluded.sample_size,"
            "    updated_at=excluded.updated_at",
            (
                league_id,
                season,
                weights.adp_weight,
                weights.need_weight,
                weights.tendency_weight,
                weights.news_weight,
                weights.rookie_weight,
                weights.sample_size,
                weights.updated_at or "",
            ),
        )

    @staticmethod
    def _select_sql() -> str:
        return (
            "SELECT league_id, season, adp_weight, need_weight, tendency_weight, news_weight, rookie_weight,"
            " sample_size, updated_at FROM calibration_weights"
        )

    @staticmethod
    def _row_to_weights(row: sqlite3.Row) -> CalibrationWeights:
        return CalibrationWeights(
            league_id=row["league_id"],
            season=row["season"],
            adp_weight=row["adp_weight"],
            need_weight=row["need_weight"],
            tendency_weight=row["tendency_weight"],
            news_weight=row["news_weight"],
            rookie_weight=row["rookie_weight"],
            sample_size=row["sample_size"],
            updated_at=row["updated_at"] or None,
        )
