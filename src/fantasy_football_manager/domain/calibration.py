from dataclasses import dataclass, field

from fantasy_football_manager.domain.draft_pick import ActualDraftPick

COMPONENTS: tuple[str, ...] = ("adp", "need", "tendency", "news", "rookie")


@dataclass(frozen=True)
class CalibrationWeights:
    league_id: str
    season: int
    adp_weight: float = 1.0
    need_weight: float = 1.0
    tendency_weight: float = 1.0
    news_weight: float = 1.0
    rookie_weight: float = 1.0
    sample_size: int = 0
    updated_at: str | None = None

    def weight(self, component: str) -> float:
        return float(getattr(self, f"{component}_weight"))


@dataclass(frozen=True)
class CalibrationDeltas:
    adp: float = 0.0
    need: float = 0.0
    tendency: float = 0.0
    news: float = 0.0
    rookie: float = 0.0
    miss_count: int = 0

    def delta(self, component: str) -> float:
        return float(getattr(self, component))


@dataclass(frozen=True)
class BestPrediction:
    overall: int
    player: str
    probability: int


@dataclass(frozen=True)
class WorstMiss:
    overall: int
    predicted: str
    actual: str
    predicted_probability: int


@dataclass(frozen=True)
class ManagerAccuracy:
    manager: str
    total_picks: int
    exact_hits: int
    top3_hits: int
    avg_probability_of_actual: float
    best_prediction: BestPrediction | None = None
    worst_miss: WorstMiss | None = None

    @property
    def exact_hit_rate(self) -> float:
        return self.exact_hits / self.total_picks if self.total_picks else 0.0

    @property
    def top3_hit_rate(self) -> float:
        return self.top3_hits / self.total_picks if self.total_picks else 0.0


@dataclass(frozen=True)
class BiggestMiss:
    overall: int
    round: int
    pick: int
    manager: str
    predicted: str
    predicted_position: str
    predicted_probability: int
    actual: str
    actual_position: str
    reason: str
    insight: str


@dataclass(frozen=True)
class RetrospectiveReport:
    league_id: str
    season: int
    snapshot_id: int | None
    total_picks: int
    overall_accuracy: float
    top3_hit_rate: float
    manager_accuracy: list[ManagerAccuracy]
    biggest_misses: list[BiggestMiss]
    deltas: CalibrationDeltas
    weights: CalibrationWeights
    actual_picks: list[ActualDraftPick] = field(default_factory=list)
