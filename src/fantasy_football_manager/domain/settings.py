from dataclasses import dataclass
from enum import Enum


class LeagueFormat(Enum):
    DYNASTY = "dynasty"
    REDRAFT = "redraft"


@dataclass(frozen=True)
class LeagueSettings:
    league_id: str
    season: int
    team_count: int = 12
    rounds: int = 3
    format: LeagueFormat = LeagueFormat.DYNASTY
    qb_slots: int = 2

    @property
    def is_dynasty(self) -> bool:
        return self.format is LeagueFormat.DYNASTY


@dataclass(frozen=True)
class SimulationSettings:
    min_trials: int = 80
    max_trials: int = 500
    default_trials: int = 200
    candidate_limit: int = 40
    pool_size: int = 180
    seed: int | None = None

    def clamp_trials(self, requested: int | None) -> int:
        trials = self.default_trials if requested is None else requested
        return max(self.min_trials, min(self.max_trials, trials))


@dataclass(frozen=True)
class CalibrationSettings:
    learning_rate: float = 0.08
    ema: float = 0.7
    weight_min: float = 0.6
    weight_max: float = 1.6
