from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.ranking import POSITIONS

if TYPE_CHECKING:
    from fantasy_football_manager.domain.calibration import CalibrationWeights
    from fantasy_football_manager.domain.manager_dna import ManagerDna
    from fantasy_football_manager.domain.prediction import ScoreComponents
    from fantasy_football_manager.domain.ranking import RankingPoolEntry

NEUTRAL_TENDENCY = 1.0
DEFAULT_REACH_FREQUENCY = 0.3
DEFAULT_PANIC_SCORE = 0.3


def position_targets(qb_slots: int = 2) -> dict[str, int]:
    """Ideal number of players per position on a finished roster."""
    return {"QB": 1 if qb_slots <= 1 else 2, "RB": 5, "WR": 5, "TE": 2}


@dataclass(frozen=True)
class ManagerProfile:
    """Per-manager inputs to the pick scoring function."""

    manager: str
    team_index: int
    tendency: dict[str, float]
    reach_frequency: float = DEFAULT_REACH_FREQUENCY
    panic_score: float = DEFAULT_PANIC_SCORE
    rookie_appetite: float = 0.0

    @classmethod
    def from_dna(cls, dna: ManagerDna) -> ManagerProfile:
        return cls(
            manager=dna.manager,
            team_index=dna.team_index,
            tendency=dict(dna.tendency),
            reach_frequency=dna.reach_frequency,
            panic_score=dna.panic_score,
            rookie_appetite=dna.rookie_appetite,
        )

    @classmethod
    def neutral(cls, team_index: int, manager: str | None = None) -> ManagerProfile:
        return cls(
            manager=manager or f"Manager {team_index + 1}",
            team_index=team_index,
            tendency=dict.fromkeys(POSITIONS, NEUTRAL_TENDENCY),
        )


@dataclass(frozen=True)
class ForcedRun:
    """Force picks in ``[before_pick - window, before_pick)`` to come from *position*."""

    position: str
    before_pick: int
    window: int = 3

    def covers(self, overall: int) -> bool:
        return self.before_pick - self.window <= overall < self.before_pick


@dataclass(frozen=True)
class Scenario:
    name: str = "baseline"
    description: str = ""
    removed_players: tuple[str, ...] = ()
    forced_runs: tuple[ForcedRun, ...] = ()

    @property
    def is_baseline(self) -> bool:
        return not self.removed_players and not self.forced_runs


BASELINE = Scenario()


@dataclass(frozen=True)
class SimulationConfig:
    team_count: int
    rounds: int
    weights: CalibrationWeights | None = None
    candidate_limit: int = 40
    qb_slots: int = 2
    seed: int | None = None
    time_budget_seconds: float | None = None
    news_deltas: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.team_count < 1:
            msg = "team_count must be at least 1"
            raise ValueError(msg)
        if self.rounds < 1:
            msg = "rounds must be at least 1"
            raise ValueError(msg)

    @property
    def total_picks(self) -> int:
        return self.team_count * self.rounds


@dataclass
class RosterCounts:
    """Positions drafted so far by one manager within a single trial."""

    counts: dict[str, int] = field(default_factory=lambda: dict.fromkeys(POSITIONS, 0))

    def add(self, position: str) -> None:
        self.counts[position] = self.counts.get(position, 0) + 1

    def get(self, position: str) -> int:
        return self.counts.get(position, 0)


@dataclass(frozen=True)
class SimulationPick:
    overall: int
    round: int
    pick_in_round: int
    manager_index: int
    player: RankingPoolEntry
    score_components: ScoreComponents
    forced: bool = False


@dataclass(frozen=True)
class SimulationTrial:
    picks: tuple[SimulationPick, ...]
    available: dict[int, tuple[RankingPoolEntry, ...]] = field(default_factory=dict)

    def pick_at(self, overall: int) -> SimulationPick | None:
        index = overall - 1
        if 0 <= index < len(self.picks) and self.picks[index].overall == overall:
            return self.picks[index]
        return next((p for p in self.picks if p.overall == overall), None)
