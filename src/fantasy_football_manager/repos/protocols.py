from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from fantasy_football_manager.domain.calibration import CalibrationWeights, RetrospectiveReport
    from fantasy_football_manager.domain.prediction import PredictionSnapshot


class PredictionSnapshotRepo(Protocol):
    def save(self, snapshot: PredictionSnapshot) -> int: ...

    def get(self, snapshot_id: int) -> PredictionSnapshot | None: ...

    def get_latest(self, league_id: str, season: int) -> PredictionSnapshot | None: ...


class CalibrationRepo(Protocol):
    def get(self, league_id: str, season: int) -> CalibrationWeights: ...

    def update(
        self,
        league_id: str,
        season: int,
        apply: Callable[[CalibrationWeights], CalibrationWeights],
    ) -> CalibrationWeights: ...


class RetrospectiveRepo(Protocol):
    def save(self, report: RetrospectiveReport, created_at: str) -> int: ...

    def get_latest(self, league_id: str, season: int) -> RetrospectiveReport | None: ...
