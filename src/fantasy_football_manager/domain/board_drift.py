from dataclasses import dataclass, field

from fantasy_football_manager.domain.manager_dna import ManagerSignals
from fantasy_football_manager.domain.ranking import RankingPoolEntry


@dataclass(frozen=True)
class BoardDriftSnapshot:
    league_id: str
    week_key: str
    entries: tuple[RankingPoolEntry, ...]
    manager_dna: tuple[ManagerSignals, ...]
    saved_at: str
    is_dynasty: bool = True


@dataclass(frozen=True)
class DriftPlayer:
    name: str
    position: str
    team: str | None
    current_rank: float
    previous_rank: float
    drift: float
    direction: str
    magnitude: str
    reasons: tuple[str, ...]


@dataclass(frozen=True)
class SignalChange:
    signal: str
    previous: float
    current: float
    direction: str


@dataclass(frozen=True)
class ManagerTendencyChange:
    manager: str
    archetype: str
    previous_archetype: str | None
    changed_signals: tuple[SignalChange, ...]


@dataclass(frozen=True)
class WindowMover:
    name: str
    position: str
    drift: float = 0.0
    rank: float = 0.0


@dataclass(frozen=True)
class PickWindowImpact:
    round: int
    overall: int
    window_start: int
    window_end: int
    risers: tuple[WindowMover, ...]
    fallers: tuple[WindowMover, ...]
    new_entrants: tuple[WindowMover, ...]
    summary: str


@dataclass(frozen=True)
class BoardDriftReport:
    league_id: str
    week_key: str
    previous_week_key: str | None
    generated_at: str
    headline: str
    total_players_tracked: int
    average_drift: float
    top_risers: list[DriftPlayer] = field(default_factory=list)
    top_fallers: list[DriftPlayer] = field(default_factory=list)
    manager_changes: list[ManagerTendencyChange] = field(default_factory=list)
    pick_windows: list[PickWindowImpact] = field(default_factory=list)

    @property
    def is_baseline(self) -> bool:
        return self.previous_week_key is None
