import sqlite3

from fantasy_football_manager.cache.serialization import RetrospectiveReportSerializer
from fantasy_football_manager.domain.calibration import RetrospectiveReport

_serializer = RetrospectiveReportSerializer()


class SqliteRetrospectiveRepo:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def save(self, report: RetrospectiveReport, created_at: str) -> int:
        cursor = self._conn.execute(
            "INSERT INTO draft_retrospective"
            "    (league_id, season, snapshot_id, total_picks, overall_accuracy, top3_hit_rate,"
            "     report_json, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                report.league_id,
                report.season,
                report.snapshot_id,
                report.total_picks,
                report.overall_accuracy,
                report.top3_hit_rate,
                _serializer.serialize(report),
                created_at,
            ),
        )
        self._conn.commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def get_latest(self, league_id: str, season: int) -> RetrospectiveReport | None:
        row = self._conn.execute(
            "SELECT report_json FROM draft_retrospective"
            " WHERE league_id = ? AND season = ? ORDER BY created_at DESC, id DESC LIMIT 1",
            (league_id, season),
        ).fetchone()
        return _serializer.deserialize(row["report_json"]) if row is not None else None
