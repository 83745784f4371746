"""Turn simulated trials into per-slot pick probabilities."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.prediction import PredictedTarget, ScoreComponents
from fantasy_football_manager.numeric import clamp

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fantasy_football_manager.draft.simulation_models import SimulationTrial

POSITION_RATIONALE: dict[str, str] = {
    "RB": "Scarcity pressure and roster need point here.",
    "WR": "ADP value and board depth favor this pick.",
    "QB": "QB window timing aligns with draft flow.",
    "TE": "Positional leverage opportunity at TE.",
}
DEFAULT_RATIONALE = "Best available value at this slot."


@dataclass
class _Tally:
    count: int = 0
    adp: float = 0.0
    need: float = 0.0
    tendency: float = 0.0
    news: float = 0.0
    rookie: float = 0.0

    def add(self, components: ScoreComponents) -> None:
        self.count += 1
        self.adp += components.adp
        self.need += components.need
        self.tendency += components.tendency
        self.news += components.news
        self.rookie += components.rookie

    def average(self) -> ScoreComponents:
        n = max(1, self.count)
        return ScoreComponents(
            adp=round(self.adp / n, 1),
            need=round(self.need / n, 1),
            tendency=round(self.tendency / n, 1),
            news=round(self.news / n, 1),
            rookie=round(self.rookie / n, 1),
        )


@dataclass
class OutcomeAggregator:
    """Frequency table of who was drafted at each pick-of-interest slot.

    Ties in frequency are broken alphabetically by player name so that
    ``top_targets`` is deterministic for a given set of trials.
    """

    slots: tuple[int, ...]
    trials: int = 0
    _tables: dict[int, dict[tuple[str, str], _Tally]] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        for slot in self.slots:
            self._tables.setdefault(slot, defaultdict(_Tally))

    def record(self, trial: SimulationTrial) -> None:
        self.trials += 1
        for slot in self.slots:
            pick = trial.pick_at(slot)
            if pick is None:
                continue
            self._tables[slot][(pick.player.name, pick.player.position)].add(pick.score_components)

    def record_all(self, trials: Iterable[SimulationTrial]) -> OutcomeAggregator:
        for trial in trials:
            self.record(trial)
        return self

    def hits(self, overall: int) -> dict[tuple[str, str], int]:
        return {key: tally.count for key, tally in self._tables.get(overall, {}).items()}

    def top_targets(self, overall: int, k: int = 3) -> tuple[PredictedTarget, ...]:
        if self.trials == 0:
            return ()
        table = self._tables.get(overall, {})
        ranked = sorted(table.items(), key=lambda item: (-item[1].count, item[0][0]))
        shares = _percent_shares([tally.count for _, tally in ranked], self.trials)
        return tuple(
            PredictedTarget(
                player=player,
                position=position,
                probability=share,
                why=POSITION_RATIONALE.get(position, DEFAULT_RATIONALE),
                score_components=tally.average(),
            )
            for ((player, position), tally), share in zip(ranked[:k], shares)
        )


def _percent_shares(counts: list[int], trials: int) -> list[int]:
    """Largest-remainder percentages of ``trials``; the result never sums past 100.

    ``counts`` must already be in ranked order; equal remainders go to the
    earlier entry.
    """
    floors = [count * 100 // trials for count in counts]
    target = int(clamp(round(sum(counts) * 100 / trials), 0, 100))
    leftover = max(0, target - sum(floors))
    by_remainder = sorted(range(len(counts)), key=lambda i: -(counts[i] * 100 % trials))
    for i in by_remainder[:leftover]:
        floors[i] += 1
    return floors
