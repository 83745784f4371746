from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fantasy_football_manager.dna.inference import infer_league_dna
from fantasy_football_manager.domain.prediction import (
    PickForecast,
    PredictedPick,
    PredictionReport,
    PredictionSnapshot,
    ScenarioVariant,
)
from fantasy_football_manager.domain.settings import SimulationSettings
from fantasy_football_manager.domain.snipe import SnipeRadarReport
from fantasy_football_manager.draft.aggregation import OutcomeAggregator
from fantasy_football_manager.draft.simulation import generate_snake_order, simulate_trials, user_pick_overalls
from fantasy_football_manager.draft.simulation_models import (
    BASELINE,
    ForcedRun,
    ManagerProfile,
    Scenario,
    SimulationConfig,
)
from fantasy_football_manager.draft.snipe_radar import SnipeRadar
from fantasy_football_manager.numeric import finite_or

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from fantasy_football_manager.domain.calibration import CalibrationWeights
    from fantasy_football_manager.domain.ranking import RankingPool, RankingPoolEntry
    from fantasy_football_manager.repos.protocols import CalibrationRepo, PredictionSnapshotRepo
    from fantasy_football_manager.sources import LeagueHistorySource, RankingSource

logger = logging.getLogger(__name__)

TOP_TARGETS = 3


@dataclass(frozen=True)
class PredictionRequest:
    league_id: str
    season: int
    user_slot: int
    team_count: int = 12
    rounds: int = 3
    trials: int | None = None
    scenario: Scenario | None = None
    time_budget_seconds: float | None = None
    seed: int | None = None
    fmt: str = "dynasty"
    qb_slots: int = 2

    def __post_init__(self) -> None:
        if not 1 <= self.user_slot <= self.team_count:
            msg = f"user_slot must be within 1..{self.team_count}, got {self.user_slot}"
            raise ValueError(msg)


@dataclass(frozen=True)
class SimulationInputs:
    pool: RankingPool
    profiles: tuple[ManagerProfile, ...]
    weights: CalibrationWeights


def default_variants(entries: Sequence[RankingPoolEntry], first_user_pick: int) -> list[Scenario]:
    """Consensus #1 removed, then an RB run and a QB run right before the user's first pick."""
    variants: list[Scenario] = []
    if entries:
        top = min(entries, key=lambda e: finite_or(e.rank, 999.0))
        variants.append(
            Scenario(
                name="top-player-removed",
                description=f"What if {top.name} is off the board?",
                removed_players=(top.name,),
            )
        )
    for position in ("RB", "QB"):
        variants.append(
            Scenario(
                name=f"{position.lower()}-run",
                description=f"What if a {position} run hits right before pick {first_user_pick}?",
                forced_runs=(ForcedRun(position=position, before_pick=first_user_pick),),
            )
        )
    return variants


class PredictionService:
    def __init__(
        self,
        rankings: RankingSource,
        histories: LeagueHistorySource,
        snapshots: PredictionSnapshotRepo,
        calibration: CalibrationRepo,
        settings: SimulationSettings | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._rankings = rankings
        self._histories = histories
        self._snapshots = snapshots
        self._calibration = calibration
        self._settings = settings or SimulationSettings()
        self._clock = clock
        self._timer = timer

    async def load_inputs(self, request: PredictionRequest) -> SimulationInputs:
        pool, histories, weights = await asyncio.gather(
            self._rankings.fetch_pool(request.fmt, self._settings.pool_size),
            self._histories.fetch_histories(request.league_id),
            asyncio.to_thread(self._calibration.get, request.league_id, request.season),
        )
        dna = infer_league_dna(histories, pool.entries)
        profiles = tuple(ManagerProfile.from_dna(d) for d in dna if d.team_index < request.team_count)
        return SimulationInputs(pool=pool, profiles=profiles, weights=weights)

    def simulation_config(self, request: PredictionRequest, inputs: SimulationInputs) -> SimulationConfig:
        return SimulationConfig(
            team_count=request.team_count,
            rounds=request.rounds,
            weights=inputs.weights,
            candidate_limit=self._settings.candidate_limit,
            qb_slots=request.qb_slots,
            seed=request.seed if request.seed is not None else self._settings.seed,
            news_deltas={a.name: a.delta for a in inputs.pool.adjustments},
        )

    async def predict(self, request: PredictionRequest) -> PredictionReport:
        inputs = await self.load_inputs(request)
        config = self.simulation_config(request, inputs)
        trials = self._settings.clamp_trials(request.trials)
        user_overalls = user_pick_overalls(request.team_count, request.user_slot, request.rounds)
        all_overalls = tuple(range(1, config.total_picks + 1))
        if request.scenario is not None:
            scenarios = [request.scenario]
        else:
            scenarios = default_variants(inputs.pool.entries, user_overalls[0])
        deadline = self._timer() + request.time_budget_seconds if request.time_budget_seconds is not None else None

        baseline = await self._aggregate(inputs, config, trials, BASELINE, all_overalls, deadline, len(scenarios) + 1)
        variants: list[tuple[Scenario, OutcomeAggregator]] = []
        for remaining, scenario in enumerate(scenarios):
            aggregator = await self._aggregate(
                inputs, config, trials, scenario, tuple(user_overalls), deadline, len(scenarios) - remaining
            )
            variants.append((scenario, aggregator))

        managers = _manager_names(inputs.profiles, request.team_count)
        order = generate_snake_order(request.team_count, request.rounds)
        snapshot = PredictionSnapshot(
            league_id=request.league_id,
            season=request.season,
            picks=tuple(
                PredictedPick(
                    overall=overall,
                    round=(overall - 1) // request.team_count + 1,
                    pick=(overall - 1) % request.team_count + 1,
                    manager=managers[order[overall - 1]],
                    top_targets=baseline.top_targets(overall, TOP_TARGETS),
                )
                for overall in all_overalls
            ),
            created_at=self._clock().isoformat(),
        )
        snapshot_id = await asyncio.to_thread(self._snapshots.save, snapshot)
        logger.debug("Saved prediction snapshot %d for %s/%d", snapshot_id, request.league_id, request.season)

        return PredictionReport(
            league_id=request.league_id,
            season=request.season,
            user_slot=request.user_slot,
            user_manager=managers[request.user_slot - 1],
            trials=baseline.trials,
            picks=tuple(
                PickForecast(
                    overall=overall,
                    round=(overall - 1) // request.team_count + 1,
                    pick=(overall - 1) % request.team_count + 1,
                    top_targets=baseline.top_targets(overall, TOP_TARGETS),
                    scenario_variants=tuple(
                        ScenarioVariant(
                            name=scenario.name,
                            description=scenario.description,
                            top_targets=aggregator.top_targets(overall, TOP_TARGETS),
                        )
                        for scenario, aggregator in variants
                    ),
                )
                for overall in user_overalls
            ),
            snapshot_id=snapshot_id,
        )

    async def snipe_radar(self, request: PredictionRequest) -> SnipeRadarReport:
        inputs = await self.load_inputs(request)
        config = self.simulation_config(request, inputs)
        if request.time_budget_seconds is not None:
            config = replace(config, time_budget_seconds=request.time_budget_seconds)
        trials = self._settings.clamp_trials(request.trials)
        user_overalls = user_pick_overalls(request.team_count, request.user_slot, request.rounds)
        managers = _manager_names(inputs.profiles, request.team_count)
        scenario = request.scenario or BASELINE

        def run() -> SnipeRadar:
            radar = SnipeRadar(request.user_slot - 1, user_overalls, request.team_count, managers)
            return radar.record_all(
                simulate_trials(inputs.pool.entries, inputs.profiles, config, trials, scenario, observe=user_overalls)
            )

        radar = await asyncio.to_thread(run)
        return SnipeRadarReport(
            league_id=request.league_id,
            user_slot=request.user_slot,
            user_manager=managers[request.user_slot - 1],
            trials=radar.trials,
            entries=tuple(radar.entries(inputs.pool.entries)),
        )

    async def _aggregate(
        self,
        inputs: SimulationInputs,
        config: SimulationConfig,
        trials: int,
        scenario: Scenario,
        slots: tuple[int, ...],
        deadline: float | None,
        runs_left: int,
    ) -> OutcomeAggregator:
        if deadline is not None:
            # Split what is left of the budget evenly over the remaining runs
            budget = max(0.0, deadline - self._timer()) / max(1, runs_left)
            config = replace(config, time_budget_seconds=budget)

        def run() -> OutcomeAggregator:
            return OutcomeAggregator(slots).record_all(
                simulate_trials(inputs.pool.entries, inputs.profiles, config, trials, scenario)
            )

        aggregator = await asyncio.to_thread(run)
        logger.debug("Scenario %r aggregated over %d trials", scenario.name, aggregator.trials)
        return aggregator


def _manager_names(profiles: Sequence[ManagerProfile], team_count: int) -> list[str]:
    by_index = {p.team_index: p.manager for p in profiles}
    return [by_index.get(i, f"Manager {i + 1}") for i in range(team_count)]
