from __future__ import annotations

import logging
import random
import time
from bisect import bisect_right
from collections import Counter
from dataclasses import dataclass
from itertools import accumulate
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.calibration import CalibrationWeights
from fantasy_football_manager.domain.prediction import ScoreComponents
from fantasy_football_manager.draft.simulation_models import (
    BASELINE,
    ManagerProfile,
    RosterCounts,
    SimulationPick,
    SimulationTrial,
    position_targets,
)
from fantasy_football_manager.numeric import clamp, finite_or
from fantasy_football_manager.rankings.name_utils import normalize_name

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterator, Sequence

    from fantasy_football_manager.domain.ranking import RankingPoolEntry
    from fantasy_football_manager.draft.simulation_models import Scenario, SimulationConfig

logger = logging.getLogger(__name__)

MIN_WEIGHT = 0.05
RUN_LOOKBACK = 3
RUN_THRESHOLD = 2
FORCED_RUN_DEPTH = 3
AVAILABLE_DEPTH = 8
ROOKIE_MAX_AGE = 23

_DEFAULT_WEIGHTS = CalibrationWeights(league_id="", season=0)


def snake_order(team_count: int, round_number: int) -> list[int]:
    """Team indices for a 1-indexed round: ascending in odd rounds, reversed in even ones."""
    order = list(range(team_count))
    if round_number % 2 == 0:
        order.reverse()
    return order


def generate_snake_order(team_count: int, rounds: int) -> list[int]:
    """Return team indices in snake order: 0..n-1, n-1..0, ..."""
    order: list[int] = []
    for round_number in range(1, rounds + 1):
        order.extend(snake_order(team_count, round_number))
    return order


def user_pick_overalls(team_count: int, user_slot: int, rounds: int) -> list[int]:
    """Overall pick numbers held by the 1-indexed *user_slot* across *rounds*."""
    team_index = user_slot - 1
    return [
        (round_number - 1) * team_count + snake_order(team_count, round_number).index(team_index) + 1
        for round_number in range(1, rounds + 1)
    ]


def detect_run(recent_positions: Sequence[str]) -> str | None:
    """Position taken at least twice in the last three picks, if any."""
    counts = Counter(recent_positions[-RUN_LOOKBACK:])
    for position, count in counts.items():
        if count >= RUN_THRESHOLD:
            return position
    return None


@dataclass(frozen=True)
class CandidateScore:
    score: float
    components: ScoreComponents


def score_candidate(
    entry: RankingPoolEntry,
    profile: ManagerProfile,
    counts: RosterCounts,
    overall: int,
    recent_run: str | None,
    *,
    weights: CalibrationWeights | None = None,
    targets: dict[str, int] | None = None,
    news_delta: float = 0.0,
) -> CandidateScore:
    weights = weights or _DEFAULT_WEIGHTS
    targets = targets or position_targets()
    position = entry.position
    rank = finite_or(entry.rank, 999.0)
    value_delta = clamp((rank - overall) / 20, -2.0, 2.0)

    need = clamp(targets.get(position, 0) - counts.get(position), -2.0, 4.0) * 0.25 * weights.need_weight
    tendency = finite_or(profile.tendency.get(position), 1.0) * 0.22 * weights.tendency_weight
    slot = value_delta * 0.18 * weights.adp_weight
    intrinsic = clamp(finite_or(entry.market_value, 2500.0) / 2500, 0.6, 2.0) * 0.14 * weights.adp_weight
    reach = value_delta * 0.15 if profile.reach_frequency > 0.5 else 0.0
    panic = profile.panic_score * 0.35 if recent_run == position else 0.0
    score = 1 + need + tendency + slot + intrinsic + reach + panic

    news = min(abs(finite_or(news_delta, 0.0)) / 10, 1.0) * 0.2 * weights.news_weight
    is_rookie = entry.age is not None and finite_or(entry.age, 99.0) <= ROOKIE_MAX_AGE
    rookie = 0.2 * profile.rookie_appetite * weights.rookie_weight if is_rookie else 0.0

    return CandidateScore(
        score=finite_or(score, MIN_WEIGHT),
        components=attribute(
            adp=abs(slot) + intrinsic,
            need=abs(need),
            tendency=tendency + panic + abs(reach),
            news=news,
            rookie=rookie,
        ),
    )


def attribute(*, adp: float, need: float, tendency: float, news: float, rookie: float) -> ScoreComponents:
    """Express raw component magnitudes as percentages of their sum."""
    total = adp + need + tendency + news + rookie
    if not total > 0:
        return ScoreComponents()

    def pct(value: float) -> float:
        return round(clamp(value / total * 100, 0.0, 100.0), 1)

    return ScoreComponents(adp=pct(adp), need=pct(need), tendency=pct(tendency), news=pct(news), rookie=pct(rookie))


def weighted_choice(weights: Sequence[float], rng: random.Random) -> int:
    """Index drawn proportionally to ``max(weight, 0.05)`` with a single ``rng.random()`` call."""
    cumulative = list(accumulate(max(finite_or(w, MIN_WEIGHT), MIN_WEIGHT) for w in weights))
    draw = rng.random() * cumulative[-1]
    return min(bisect_right(cumulative, draw), len(cumulative) - 1)


def prepare_pool(entries: Sequence[RankingPoolEntry], scenario: Scenario) -> list[RankingPoolEntry]:
    """Rank-sorted private copy of the pool with scenario removals applied."""
    removed = {normalize_name(name) for name in scenario.removed_players}
    return sorted(
        (e for e in entries if normalize_name(e.name) not in removed),
        key=lambda e: finite_or(e.rank, 999.0),
    )


def simulate_trial(
    pool: Sequence[RankingPoolEntry],
    profiles: Sequence[ManagerProfile],
    config: SimulationConfig,
    rng: random.Random,
    scenario: Scenario = BASELINE,
    observe: Collection[int] = (),
) -> SimulationTrial:
    """Play one full snake draft.

    Every trial owns its pool copy and roster counters. When *observe* names
    overall picks, the best remaining players at those picks are recorded on
    the trial before the pick is made.
    """
    remaining = prepare_pool(pool, scenario)
    managers = _profiles_for(profiles, config.team_count)
    counts = [RosterCounts() for _ in range(config.team_count)]
    targets = position_targets(config.qb_slots)
    news = {normalize_name(name): delta for name, delta in config.news_deltas.items()}
    recent: list[str] = []
    picks: list[SimulationPick] = []
    available: dict[int, tuple[RankingPoolEntry, ...]] = {}

    for index, team_index in enumerate(generate_snake_order(config.team_count, config.rounds)):
        if not remaining:
            break
        overall = index + 1
        if overall in observe:
            available[overall] = tuple(remaining[:AVAILABLE_DEPTH])

        profile = managers[team_index]
        recent_run = detect_run(recent)

        def scored(entry: RankingPoolEntry) -> CandidateScore:
            return score_candidate(
                entry,
                profile,
                counts[team_index],
                overall,
                recent_run,
                weights=config.weights,
                targets=targets,
                news_delta=news.get(normalize_name(entry.name), 0.0),
            )

        forced = _forced_candidates(remaining, scenario, overall)
        if forced:
            chosen = rng.choice(forced)
            choice = scored(chosen)
        else:
            candidates = remaining[: config.candidate_limit]
            if candidates:
                scores = [scored(c) for c in candidates]
                chosen_index = weighted_choice([s.score for s in scores], rng)
                chosen, choice = candidates[chosen_index], scores[chosen_index]
            else:
                chosen = remaining[0]
                choice = scored(chosen)

        remaining.remove(chosen)
        counts[team_index].add(chosen.position)
        recent.append(chosen.position)
        picks.append(
            SimulationPick(
                overall=overall,
                round=index // config.team_count + 1,
                pick_in_round=index % config.team_count + 1,
                manager_index=team_index,
                player=chosen,
                score_components=choice.components,
                forced=bool(forced),
            )
        )

    return SimulationTrial(picks=tuple(picks), available=available)


def simulate_trials(
    pool: Sequence[RankingPoolEntry],
    profiles: Sequence[ManagerProfile],
    config: SimulationConfig,
    trials: int,
    scenario: Scenario = BASELINE,
    observe: Collection[int] = (),
    clock: Callable[[], float] = time.monotonic,
) -> Iterator[SimulationTrial]:
    """Yield up to *trials* independent trials from one seeded RNG.

    A time budget is honored between trials: once the deadline passes no new
    trial starts, but a running trial always completes. At least one trial
    always runs.
    """
    rng = random.Random(config.seed)
    deadline = clock() + config.time_budget_seconds if config.time_budget_seconds is not None else None
    for completed in range(trials):
        if completed and deadline is not None and clock() >= deadline:
            logger.warning(
                "Time budget of %.2fs reached for scenario %r after %d/%d trials",
                config.time_budget_seconds,
                scenario.name,
                completed,
                trials,
            )
            return
        yield simulate_trial(pool, profiles, config, rng, scenario, observe)
    logger.debug("Completed %d trials for scenario %r", trials, scenario.name)


def _profiles_for(profiles: Sequence[ManagerProfile], team_count: int) -> list[ManagerProfile]:
    by_index = {p.team_index: p for p in profiles}
    return [by_index.get(i) or ManagerProfile.neutral(i) for i in range(team_count)]


def _forced_candidates(
    remaining: Sequence[RankingPoolEntry],
    scenario: Scenario,
    overall: int,
) -> list[RankingPoolEntry]:
    for run in scenario.forced_runs:
        if run.covers(overall):
            matches = [e for e in remaining if e.position == run.position][:FORCED_RUN_DEPTH]
            if matches:
                return matches
    return []
