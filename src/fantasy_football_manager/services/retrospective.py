"""Compare a stored prediction snapshot with the real draft and recalibrate.

The calibration step only nudges weights: deltas are averaged over the misses,
scaled by a small learning rate, blended into the persisted weights with an
EMA and clamped, so a single noisy draft cannot swing the scoring model far.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.calibration import (
    COMPONENTS,
    BestPrediction,
    BiggestMiss,
    CalibrationDeltas,
    CalibrationWeights,
    ManagerAccuracy,
    RetrospectiveReport,
    WorstMiss,
)
from fantasy_football_manager.domain.settings import CalibrationSettings
from fantasy_football_manager.exceptions import EmptyDraftError, MissingPredictionSnapshotError
from fantasy_football_manager.numeric import clamp, finite_or
from fantasy_football_manager.rankings.name_utils import normalize_name

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_manager.domain.draft_pick import ActualDraftPick
    from fantasy_football_manager.domain.prediction import PredictedPick, PredictedTarget, PredictionSnapshot
    from fantasy_football_manager.repos.protocols import CalibrationRepo, PredictionSnapshotRepo, RetrospectiveRepo
    from fantasy_football_manager.sources import DraftResultsSource

logger = logging.getLogger(__name__)

MISS_PROBABILITY_FLOOR = 15
TENDENCY_SHARE_LIMIT = 35
ADP_SHARE_LIMIT = 45
NEWS_SHARE_LIMIT = 15
EVEN_SHARE = 0.2
MAX_MISSES = 10


@dataclass(frozen=True)
class MissContext:
    predicted: PredictedTarget
    actual: ActualDraftPick
    actual_probability: int


MissRule = tuple[Callable[[MissContext], bool], Callable[[MissContext], tuple[str, str]]]

MISS_REASON_RULES: tuple[MissRule, ...] = (
    (
        lambda m: m.actual.position != m.predicted.position,
        lambda m: (
            f"Position surprise: expected {m.predicted.position}, manager went {m.actual.position}",
            f"Need share ({m.predicted.score_components.need:g}%) may be miscalibrated for "
            f"{m.actual.position} demand",
        ),
    ),
    (
        lambda m: m.predicted.score_components.tendency > TENDENCY_SHARE_LIMIT,
        lambda m: (
            "Manager tendency overweighted: leaned too heavily on historical behavior",
            f"Tendency share was {m.predicted.score_components.tendency:g}%, but the manager deviated from pattern",
        ),
    ),
    (
        lambda m: m.predicted.score_components.adp > ADP_SHARE_LIMIT,
        lambda m: (
            "ADP-driven miss: trusted consensus ranking too much",
            f"ADP share was {m.predicted.score_components.adp:g}%, actual pick was a reach or value grab",
        ),
    ),
    (
        lambda m: m.predicted.score_components.news > NEWS_SHARE_LIMIT,
        lambda m: (
            "News-driven miss: recent player news skewed the prediction",
            f"News share was {m.predicted.score_components.news:g}%, which moved the wrong player",
        ),
    ),
    (
        lambda m: 0 < m.actual_probability < m.predicted.probability,
        lambda m: (
            f"Close call: actual pick was predicted but ranked lower "
            f"({m.actual_probability}% vs {m.predicted.probability}%)",
            f"Identified the player but underestimated probability by "
            f"{m.predicted.probability - m.actual_probability}%",
        ),
    ),
)


def _unpredicted(m: MissContext) -> tuple[str, str]:
    return (
        f"Unpredicted pick: {m.actual.player_name} was not among the top targets",
        "All five scoring factors missed this selection",
    )


def explain_miss(context: MissContext, rules: Sequence[MissRule] = MISS_REASON_RULES) -> tuple[str, str]:
    """Return ``(reason, insight)`` from the first matching rule."""
    for predicate, explain in rules:
        if predicate(context):
            return explain(context)
    return _unpredicted(context)


def _find_target(targets: Sequence[PredictedTarget], player_name: str) -> PredictedTarget | None:
    key = normalize_name(player_name)
    return next((t for t in targets if normalize_name(t.player) == key), None)


def _probability_of(targets: Sequence[PredictedTarget], player_name: str) -> int:
    target = _find_target(targets, player_name)
    return target.probability if target is not None else 0


def _is_exact(prediction: PredictedPick, actual: ActualDraftPick) -> bool:
    return bool(prediction.top_targets) and normalize_name(prediction.top_targets[0].player) == normalize_name(
        actual.player_name
    )


@dataclass
class _ManagerTally:
    total: int = 0
    exact: int = 0
    top3: int = 0
    probability_sum: int = 0
    best: BestPrediction | None = None
    worst: WorstMiss | None = None


@dataclass
class PickEvaluation:
    evaluated: int = 0
    exact_hits: int = 0
    top3_hits: int = 0
    manager_accuracy: list[ManagerAccuracy] = field(default_factory=list)
    biggest_misses: list[BiggestMiss] = field(default_factory=list)


def evaluate_picks(snapshot: PredictionSnapshot, actuals: Sequence[ActualDraftPick]) -> PickEvaluation:
    tallies: dict[str, _ManagerTally] = {}
    misses: list[BiggestMiss] = []
    for actual in actuals:
        prediction = snapshot.pick_at(actual.overall)
        if prediction is None:
            continue
        tally = tallies.setdefault(actual.manager, _ManagerTally())
        tally.total += 1
        actual_probability = _probability_of(prediction.top_targets, actual.player_name)
        tally.probability_sum += actual_probability
        if _find_target(prediction.top_targets, actual.player_name) is not None:
            tally.top3 += 1
        if not prediction.top_targets:
            continue

        top = prediction.top_targets[0]
        if _is_exact(prediction, actual):
            tally.exact += 1
            if tally.best is None or top.probability > tally.best.probability:
                tally.best = BestPrediction(overall=actual.overall, player=top.player, probability=top.probability)
            continue

        if tally.worst is None or top.probability > tally.worst.predicted_probability:
            tally.worst = WorstMiss(
                overall=actual.overall,
                predicted=top.player,
                actual=actual.player_name,
                predicted_probability=top.probability,
            )
        if top.probability >= MISS_PROBABILITY_FLOOR:
            reason, insight = explain_miss(MissContext(top, actual, actual_probability))
            misses.append(
                BiggestMiss(
                    overall=actual.overall,
                    round=actual.round,
                    pick=actual.pick,
                    manager=actual.manager,
                    predicted=top.player,
                    predicted_position=top.position,
                    predicted_probability=top.probability,
                    actual=actual.player_name,
                    actual_position=actual.position,
                    reason=reason,
                    insight=insight,
                )
            )

    accuracy = [
        ManagerAccuracy(
            manager=manager,
            total_picks=t.total,
            exact_hits=t.exact,
            top3_hits=t.top3,
            avg_probability_of_actual=round(t.probability_sum / t.total, 1) if t.total else 0.0,
            best_prediction=t.best,
            worst_miss=t.worst,
        )
        for manager, t in tallies.items()
    ]
    accuracy.sort(key=lambda a: (-a.exact_hit_rate, a.manager))
    misses.sort(key=lambda m: (-m.predicted_probability, m.overall))
    return PickEvaluation(
        evaluated=sum(t.total for t in tallies.values()),
        exact_hits=sum(t.exact for t in tallies.values()),
        top3_hits=sum(t.top3 for t in tallies.values()),
        manager_accuracy=accuracy,
        biggest_misses=misses[:MAX_MISSES],
    )


def compute_calibration_deltas(
    snapshot: PredictionSnapshot,
    actuals: Sequence[ActualDraftPick],
    learning_rate: float = 0.08,
) -> CalibrationDeltas:
    """Average ``error * (share - 0.2)`` per component over misses, scaled by ``-learning_rate``.

    A miss is any pick whose top predicted target was not the actual player.
    """
    sums = dict.fromkeys(COMPONENTS, 0.0)
    misses = 0
    for actual in actuals:
        prediction = snapshot.pick_at(actual.overall)
        if prediction is None or not prediction.top_targets or _is_exact(prediction, actual):
            continue
        components = prediction.top_targets[0].score_components
        total = components.total or 100.0
        error = 1 - clamp(_probability_of(prediction.top_targets, actual.player_name), 0, 100) / 100
        for component in COMPONENTS:
            share = finite_or(getattr(components, component), 0.0) / total
            sums[component] += error * (share - EVEN_SHARE)
        misses += 1

    if misses == 0:
        return CalibrationDeltas()
    return CalibrationDeltas(
        **{c: finite_or(-learning_rate * (sums[c] / misses), 0.0) for c in COMPONENTS},
        miss_count=misses,
    )


def blend_weights(
    current: CalibrationWeights,
    deltas: CalibrationDeltas,
    settings: CalibrationSettings,
    evaluated: int,
    updated_at: str,
) -> CalibrationWeights:
    """``new = clamp(old * ema + (1 + delta) * (1 - ema), min, max)`` for every component."""
    blended = {
        f"{c}_weight": clamp(
            finite_or(current.weight(c), 1.0) * settings.ema + (1 + deltas.delta(c)) * (1 - settings.ema),
            settings.weight_min,
            settings.weight_max,
        )
        for c in COMPONENTS
    }
    return replace(current, **blended, sample_size=current.sample_size + evaluated, updated_at=updated_at)


class RetrospectiveCalibrator:
    def __init__(
        self,
        draft_results: DraftResultsSource,
        snapshots: PredictionSnapshotRepo,
        calibration: CalibrationRepo,
        retrospectives: RetrospectiveRepo,
        settings: CalibrationSettings | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._draft_results = draft_results
        self._snapshots = snapshots
        self._calibration = calibration
        self._retrospectives = retrospectives
        self._settings = settings or CalibrationSettings()
        self._clock = clock

    async def run(self, league_id: str, season: int) -> RetrospectiveReport:
        snapshot = await asyncio.to_thread(self._snapshots.get_latest, league_id, season)
        if snapshot is None:
            raise MissingPredictionSnapshotError(league_id, season)
        actuals = await self._draft_results.fetch_actual_picks(league_id)
        if not actuals:
            raise EmptyDraftError(league_id)

        evaluation = evaluate_picks(snapshot, actuals)
        deltas = compute_calibration_deltas(snapshot, actuals, self._settings.learning_rate)
        now = self._clock().isoformat()
        weights = await asyncio.to_thread(
            self._calibration.update,
            league_id,
            season,
            lambda current: blend_weights(current, deltas, self._settings, evaluation.evaluated, now),
        )

        evaluated = evaluation.evaluated
        report = RetrospectiveReport(
            league_id=league_id,
            season=season,
            snapshot_id=snapshot.id,
            total_picks=evaluated,
            overall_accuracy=round(evaluation.exact_hits / evaluated, 4) if evaluated else 0.0,
            top3_hit_rate=round(evaluation.top3_hits / evaluated, 4) if evaluated else 0.0,
            manager_accuracy=evaluation.manager_accuracy,
            biggest_misses=evaluation.biggest_misses,
            deltas=deltas,
            weights=weights,
            actual_picks=list(actuals),
        )
        await asyncio.to_thread(self._retrospectives.save, report, now)
        logger.info(
            "Retrospective for %s/%d: %d picks, %.0f%% exact, %d misses used for calibration",
            league_id,
            season,
            evaluated,
            report.overall_accuracy * 100,
            deltas.miss_count,
        )
        return report
