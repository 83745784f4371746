"""Infer manager draft behavior ("DNA") from league history.

Every metric has a fixed fallback for sparse history (fewer than three data
points), so inference is total: any ``ManagerHistory`` yields a ``ManagerDna``
with all fields inside their documented ranges.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from fantasy_football_manager.dna.archetypes import ArchetypeInputs, derive_archetype
from fantasy_football_manager.domain.manager_dna import (
    ManagerDna,
    PanicResponse,
    ReachLabel,
    RookieLabel,
    RoundBias,
    StackLabel,
)
from fantasy_football_manager.domain.ranking import POSITIONS
from fantasy_football_manager.numeric import clamp, finite_or
from fantasy_football_manager.rankings.name_utils import normalize_name

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_manager.domain.league import ManagerHistory, WeeklyPerformance
    from fantasy_football_manager.domain.ranking import RankingPoolEntry

logger = logging.getLogger(__name__)

SPARSE_HISTORY = 3
ROOKIE_MAX_AGE = 23
REACH_DELTA = 8
BIG_REACH_DELTA = 20
DEFAULT_AVG_POINTS = 100.0
DEFAULT_AVG_AGE = 26.0

# (early, mid, late) share multipliers per position
_AGGRESSION_MULTIPLIERS: dict[str, tuple[float, float, float]] = {
    "RB": (2.5, 1.8, 0.8),
    "WR": (2.0, 2.2, 1.5),
    "QB": (1.5, 2.0, 1.2),
    "TE": (1.2, 1.8, 1.4),
}


@dataclass(frozen=True)
class _RosterProfile:
    positions: list[str]
    teams: list[str | None]
    ages: list[float]
    reach_deltas: list[float]
    rookie_count: int


def infer_league_dna(histories: Sequence[ManagerHistory], pool: Sequence[RankingPoolEntry]) -> list[ManagerDna]:
    """Infer DNA for every manager, using league-wide scoring as the baseline."""
    return [infer_manager_dna(history, pool, histories) for history in histories]


def infer_manager_dna(
    history: ManagerHistory,
    pool: Sequence[RankingPoolEntry],
    league: Sequence[ManagerHistory] = (),
) -> ManagerDna:
    games = max(1, history.wins + history.losses + history.ties)
    win_rate = clamp(history.wins / games, 0.0, 1.0)
    avg_points = _average_points(history.performances)
    league_avg = (
        sum(_average_points(h.performances) for h in league) / len(league) if league else DEFAULT_AVG_POINTS
    )
    points_ratio = avg_points / max(1.0, league_avg)

    roster = _profile_roster(history.roster_player_ids, pool)

    reach_frequency = compute_reach_frequency(roster.reach_deltas, win_rate, points_ratio)
    reach_label = _label(
        reach_frequency,
        ((0.25, ReachLabel.CONSERVATIVE), (0.5, ReachLabel.MEASURED), (0.75, ReachLabel.AGGRESSIVE)),
        ReachLabel.WILD_CARD,
    )

    aggression = compute_positional_aggression(roster.positions, win_rate, avg_points, history.is_dynasty, points_ratio)

    rookie_appetite = compute_rookie_appetite(
        roster.rookie_count, len(history.roster_player_ids), roster.ages, history.is_dynasty, win_rate
    )
    rookie_label = _label(
        rookie_appetite,
        ((0.25, RookieLabel.VETERAN_ONLY), (0.5, RookieLabel.BALANCED), (0.75, RookieLabel.ROOKIE_HEAVY)),
        RookieLabel.YOUTH_MOVEMENT,
    )

    stack_tendency = compute_stack_tendency(roster.positions, roster.teams)
    stack_label = _label(
        stack_tendency,
        ((0.2, StackLabel.INDEPENDENT), (0.45, StackLabel.LIGHT_STACKER), (0.7, StackLabel.STACK_BUILDER)),
        StackLabel.STACK_DEPENDENT,
    )

    panic_score = compute_panic_score(history.performances, win_rate, roster.reach_deltas)
    panic_response = panic_label(panic_score, sparse=len(history.performances) < SPARSE_HISTORY)

    archetype = derive_archetype(
        ArchetypeInputs(
            reach=reach_label,
            rookie=rookie_label,
            stack=stack_label,
            panic=panic_response,
            win_rate=win_rate,
            is_dynasty=history.is_dynasty,
        )
    )

    roster_counts = {pos: 0 for pos in POSITIONS}
    for pos in roster.positions:
        if pos in roster_counts:
            roster_counts[pos] += 1

    dna = ManagerDna(
        manager=history.display_name,
        team_index=history.team_index,
        reach_frequency=reach_frequency,
        reach_label=reach_label,
        positional_aggression=aggression,
        rookie_appetite=rookie_appetite,
        rookie_label=rookie_label,
        stack_tendency=stack_tendency,
        stack_label=stack_label,
        panic_score=panic_score,
        panic_response=panic_response,
        archetype=archetype,
        tendency=derive_tendency(aggression, reach_frequency, history.is_dynasty, avg_points, win_rate),
        roster_counts=roster_counts,
    )
    logger.debug(
        "DNA for %s: reach=%.2f rookie=%.2f stack=%.2f panic=%.2f archetype=%s (%d/%d roster matched)",
        dna.manager,
        reach_frequency,
        rookie_appetite,
        stack_tendency,
        panic_score,
        archetype.value,
        len(roster.positions),
        len(history.roster_player_ids),
    )
    return dna


def compute_reach_frequency(reach_deltas: Sequence[float], win_rate: float, points_ratio: float) -> float:
    if len(reach_deltas) < SPARSE_HISTORY:
        base = 0.3 + (0.15 if win_rate > 0.55 else 0.0) + (0.1 if points_ratio > 1.05 else -0.05)
        return clamp(base, 0.0, 1.0)
    reaches = sum(1 for d in reach_deltas if d > REACH_DELTA)
    big_reaches = sum(1 for d in reach_deltas if d > BIG_REACH_DELTA)
    ratio = (reaches + big_reaches) / len(reach_deltas)
    base = clamp(ratio * 2, 0.0, 0.85)
    if win_rate < 0.4:
        base += 0.12
    elif win_rate > 0.65:
        base -= 0.08
    return clamp(base, 0.0, 1.0)


def compute_positional_aggression(
    positions: Sequence[str],
    win_rate: float,
    avg_points: float,
    is_dynasty: bool,
    points_ratio: float,
) -> dict[str, RoundBias]:
    total = max(1, len(positions))
    result: dict[str, RoundBias] = {}
    for pos in POSITIONS:
        share = sum(1 for p in positions if p == pos) / total
        early_mult, mid_mult, late_mult = _AGGRESSION_MULTIPLIERS[pos]
        early_bonus = 0.0
        if pos == "RB" and win_rate > 0.55:
            early_bonus = 0.15
        elif pos == "WR" and avg_points > 115:
            early_bonus = 0.1
        elif pos == "QB" and points_ratio > 1.1:
            early_bonus = 0.2
        elif pos == "TE" and is_dynasty:
            early_bonus = 0.15
        result[pos] = RoundBias(
            early=round(clamp(share * early_mult + early_bonus, 0.0, 1.0) * 100),
            mid=round(clamp(share * mid_mult, 0.0, 1.0) * 100),
            late=round(clamp(share * late_mult, 0.0, 1.0) * 100),
        )
    return result


def compute_rookie_appetite(
    rookie_count: int,
    roster_size: int,
    ages: Sequence[float],
    is_dynasty: bool,
    win_rate: float,
) -> float:
    rookie_ratio = rookie_count / max(1, roster_size)
    avg_age = sum(ages) / len(ages) if ages else DEFAULT_AVG_AGE
    youth_boost = clamp((27 - avg_age) / 10, -0.15, 0.25)
    dynasty_boost = 0.15 if is_dynasty else 0.0
    rebuild_boost = 0.12 if win_rate < 0.4 else 0.0
    return clamp(rookie_ratio * 2 + youth_boost + dynasty_boost + rebuild_boost, 0.0, 1.0)


def compute_stack_tendency(positions: Sequence[str], teams: Sequence[str | None]) -> float:
    known = [(pos, team) for pos, team in zip(positions, teams) if team]
    if len(known) < 4:
        return 0.2
    by_team: dict[str, dict[str, int]] = {}
    for pos, team in known:
        counts = by_team.setdefault(team, {"QB": 0, "catchers": 0})
        if pos == "QB":
            counts["QB"] += 1
        elif pos in ("WR", "TE"):
            counts["catchers"] += 1
    pairs = sum(min(c["QB"], c["catchers"]) for c in by_team.values())
    expected = max(1, len(known) // 6)
    return clamp(pairs / expected, 0.0, 1.0)


def compute_panic_score(
    performances: Sequence[WeeklyPerformance],
    win_rate: float,
    reach_deltas: Sequence[float],
) -> float:
    if len(performances) < SPARSE_HISTORY:
        return clamp(0.3 + (0.2 if win_rate < 0.4 else 0.0), 0.0, 1.0)

    points = [finite_or(p.points, 0.0) for p in sorted(performances, key=lambda p: p.week)]
    big_drops = 0
    swings = 0
    for i in range(1, len(points)):
        drop = (points[i - 1] - points[i]) / max(1.0, points[i - 1])
        if drop > 0.25:
            big_drops += 1
            if i + 1 < len(points):
                recovery = (points[i + 1] - points[i]) / max(1.0, points[i])
                if abs(recovery) > 0.2:
                    swings += 1

    volatility = big_drops / max(1, len(points) - 1)
    if len(reach_deltas) > SPARSE_HISTORY:
        reach_variance = math.sqrt(sum(d * d for d in reach_deltas) / len(reach_deltas)) / 30
    else:
        reach_variance = 0.1
    score = volatility * 1.5 + swings * 0.15 + reach_variance + (0.15 if win_rate < 0.35 else 0.0)
    return clamp(score, 0.0, 1.0)


def panic_label(score: float, *, sparse: bool = False) -> PanicResponse:
    """Label a panic score.

    Scores from the sparse-history fallback use wider bands and top out at
    ``REACTIVE``.
    """
    if sparse:
        return _label(
            score,
            ((0.3, PanicResponse.HOLD_STEADY), (0.55, PanicResponse.MILD_PIVOT)),
            PanicResponse.REACTIVE,
        )
    return _label(
        score,
        ((0.25, PanicResponse.HOLD_STEADY), (0.5, PanicResponse.MILD_PIVOT), (0.75, PanicResponse.REACTIVE)),
        PanicResponse.FULL_PANIC,
    )


def derive_tendency(
    aggression: dict[str, RoundBias],
    reach_frequency: float,
    is_dynasty: bool,
    avg_points: float,
    win_rate: float,
) -> dict[str, float]:
    tendency: dict[str, float] = {}
    for pos in POSITIONS:
        bias = aggression.get(pos)
        if bias is None:
            tendency[pos] = 1.0
            continue
        composite = (bias.early * 0.45 + bias.mid * 0.35 + bias.late * 0.2) / 100
        reach_mod = reach_frequency * 0.12 if pos == "RB" else -reach_frequency * 0.05
        tendency[pos] = clamp(0.7 + composite * 0.6 + reach_mod, 0.5, 1.5)
    if is_dynasty:
        tendency["TE"] = clamp(tendency["TE"] + 0.08, 0.5, 1.5)
    if avg_points > 120:
        tendency["QB"] = clamp(tendency["QB"] + 0.1, 0.5, 1.5)
    if win_rate < 0.4:
        tendency["RB"] = clamp(tendency["RB"] + 0.1, 0.5, 1.5)
    return tendency


def _average_points(performances: Sequence[WeeklyPerformance]) -> float:
    if not performances:
        return DEFAULT_AVG_POINTS
    return sum(finite_or(p.points, 0.0) for p in performances) / len(performances)


def _profile_roster(roster_player_ids: Sequence[str], pool: Sequence[RankingPoolEntry]) -> _RosterProfile:
    by_name = {normalize_name(e.name): e for e in pool}
    positions: list[str] = []
    teams: list[str | None] = []
    ages: list[float] = []
    deltas: list[float] = []
    rookies = 0
    for slot, player_id in enumerate(roster_player_ids, start=1):
        match = by_name.get(normalize_name(player_id))
        if match is None:
            continue
        positions.append(match.position)
        teams.append(match.team)
        if match.age is not None:
            age = finite_or(match.age, DEFAULT_AVG_AGE)
            ages.append(age)
            if age <= ROOKIE_MAX_AGE:
                rookies += 1
        deltas.append(finite_or(match.rank, 0.0) - slot)
    return _RosterProfile(positions=positions, teams=teams, ages=ages, reach_deltas=deltas, rookie_count=rookies)


L = TypeVar("L")


def _label(value: float, thresholds: tuple[tuple[float, L], ...], top: L) -> L:
    for bound, label in thresholds:
        if value < bound:
            return label
    return top
