import sqlite3

from fantasy_football_manager.cache.serialization import PredictedPicksSerializer
from fantasy_football_manager.domain.prediction import PredictionSnapshot

_serializer = PredictedPicksSerializer()


class SqlitePredictionSnapshotRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def save(self, snapshot: PredictionSnapshot) -> int:
        cursor = self._conn.execute(
            "INSERT INTO prediction_snapshot (league_id, season, picks_json, created_at) VALUES (?, ?, ?, ?)",
            (snapshot.league_id, snapshot.season, _serializer.serialize(snapshot.picks), snapshot.created_at),
        )
        self._conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def get(self, snapshot_id: int) -> PredictionSnapshot | None:
        row = self._conn.execute(self._select_sql() + " WHERE id = ?", (snapshot_id,)).fetchone()
        return self._row_to_snapshot(row) if row is not None else None

    def get_latest(self, league_id: str, season: int) -> PredictionSnapshot | None:
        row = self._conn.execute(
            self._select_sql() + " WHERE league_id = ? AND season = ? ORDER BY created_at DESC, id DESC LIMIT 1",
            (league_id, season),
        ).fetchone()
        return self._row_to_snapshot(row) if row is not None else None

    @staticmethod
    def _select_sql() -> str:
        return "SELECT id, league_id, season, picks_json, created_at FROM prediction_snapshot"

    @staticmethod
    def _row_to_snapshot(row: sqlite3.Row) -> PredictionSnapshot:
        return PredictionSnapshot(
            id=row["id"],
            league_id=row["league_id"],
            season=row["season"],
            picks=_serializer.deserialize(row["picks_json"]),
            created_at=row["created_at"],
        )
