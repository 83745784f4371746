"""Serializers converting domain values to and from JSON strings.

Used for cache store entries and for the JSON columns of the SQLite repos.

JSON round-trips tuples as lists, so each serializer restores tuple fields
explicitly on the way back.

Usage:
    serializer = RankingPoolSerializer()
    cached_str = serializer.serialize(pool)
    pool = serializer.deserialize(cached_str)
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, Protocol, TypeVar

from fantasy_football_manager.domain.board_drift import BoardDriftSnapshot
from fantasy_football_manager.domain.calibration import (
    BestPrediction,
    BiggestMiss,
    CalibrationDeltas,
    CalibrationWeights,
    ManagerAccuracy,
    RetrospectiveReport,
    WorstMiss,
)
from fantasy_football_manager.domain.draft_pick import ActualDraftPick
from fantasy_football_manager.domain.manager_dna import ManagerSignals
from fantasy_football_manager.domain.prediction import PredictedPick, PredictedTarget, ScoreComponents
from fantasy_football_manager.domain.ranking import RankingAdjustment, RankingPool, RankingPoolEntry
from fantasy_football_manager.sleeper.models import SleeperPlayer

T = TypeVar("T")


class Serializer(Protocol[T]):
    def serialize(self, value: T) -> str: ...

    def deserialize(self, data: str) -> T: ...


def _entry_from_dict(raw: dict[str, Any]) -> RankingPoolEntry:
    return RankingPoolEntry(**raw)


def _adjustment_from_dict(raw: dict[str, Any]) -> RankingAdjustment:
    return RankingAdjustment(name=raw["name"], delta=raw["delta"], reasons=tuple(raw.get("reasons", ())))


class RankingPoolSerializer:
    def serialize(self, value: RankingPool) -> str:
        return json.dumps(
            {
                "entries": [asdict(e) for e in value.entries],
                "adjustments": [asdict(a) for a in value.adjustments],
            }
        )

    def deserialize(self, data: str) -> RankingPool:
        raw = json.loads(data)
        return RankingPool(
            entries=tuple(_entry_from_dict(e) for e in raw["entries"]),
            adjustments=tuple(_adjustment_from_dict(a) for a in raw.get("adjustments", ())),
        )


class BoardDriftSnapshotSerializer:
    def serialize(self, value: BoardDriftSnapshot) -> str:
        return json.dumps(asdict(value))

    def deserialize(self, data: str) -> BoardDriftSnapshot:
        raw = json.loads(data)
        return BoardDriftSnapshot(
            league_id=raw["league_id"],
            week_key=raw["week_key"],
            entries=tuple(_entry_from_dict(e) for e in raw["entries"]),
            manager_dna=tuple(ManagerSignals(**m) for m in raw.get("manager_dna", ())),
            saved_at=raw["saved_at"],
            is_dynasty=raw.get("is_dynasty", True),
        )


class PlayerDirectorySerializer:
    """Serializer for the Sleeper players directory keyed by player id."""

    def serialize(self, value: dict[str, SleeperPlayer]) -> str:
        return json.dumps({pid: asdict(p) for pid, p in value.items()})

    def deserialize(self, data: str) -> dict[str, SleeperPlayer]:
        raw: dict[str, dict[str, Any]] = json.loads(data)
        return {pid: SleeperPlayer(**p) for pid, p in raw.items()}


def _target_from_dict(raw: dict[str, Any]) -> PredictedTarget:
    return PredictedTarget(
        player=raw["player"],
        position=raw["position"],
        probability=int(raw["probability"]),
        why=raw.get("why", ""),
        score_components=ScoreComponents(**raw.get("score_components", {})),
    )


class PredictedPicksSerializer:
    """Serializer for the pick list stored in a prediction snapshot row."""

    def serialize(self, value: tuple[PredictedPick, ...]) -> str:
        return json.dumps([asdict(p) for p in value])

    def deserialize(self, data: str) -> tuple[PredictedPick, ...]:
        return tuple(
            PredictedPick(
                overall=raw["overall"],
                round=raw["round"],
                pick=raw["pick"],
                manager=raw["manager"],
                top_targets=tuple(_target_from_dict(t) for t in raw["top_targets"]),
            )
            for raw in json.loads(data)
        )


class RetrospectiveReportSerializer:
    def serialize(self, value: RetrospectiveReport) -> str:
        return json.dumps(asdict(value))

    def deserialize(self, data: str) -> RetrospectiveReport:
        raw = json.loads(data)
        return RetrospectiveReport(
            league_id=raw["league_id"],
            season=raw["season"],
            snapshot_id=raw.get("snapshot_id"),
            total_picks=raw["total_picks"],
            overall_accuracy=raw["overall_accuracy"],
            top3_hit_rate=raw["top3_hit_rate"],
            manager_accuracy=[
                ManagerAccuracy(
                    manager=m["manager"],
                    total_picks=m["total_picks"],
                    exact_hits=m["exact_hits"],
                    top3_hits=m["top3_hits"],
                    avg_probability_of_actual=m["avg_probability_of_actual"],
                    best_prediction=BestPrediction(**m["best_prediction"]) if m.get("best_prediction") else None,
                    worst_miss=WorstMiss(**m["worst_miss"]) if m.get("worst_miss") else None,
                )
                for m in raw["manager_accuracy"]
            ],
            biggest_misses=[BiggestMiss(**b) for b in raw["biggest_misses"]],
            deltas=CalibrationDeltas(**raw["deltas"]),
            weights=CalibrationWeights(**raw["weights"]),
            actual_picks=[ActualDraftPick(**p) for p in raw.get("actual_picks", ())],
        )
