from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoreComponents:
    """Percentage attribution of a pick score to the five scoring factors."""

    adp: float = 0.0
    need: float = 0.0
    tendency: float = 0.0
    news: float = 0.0
    rookie: float = 0.0

    @property
    def total(self) -> float:
        return self.adp + self.need + self.tendency + self.news + self.rookie


@dataclass(frozen=True)
class PredictedTarget:
    player: str
    position: str
    probability: int
    why: str = ""
    score_components: ScoreComponents = field(default_factory=ScoreComponents)


@dataclass(frozen=True)
class PredictedPick:
    overall: int
    round: int
    pick: int
    manager: str
    top_targets: tuple[PredictedTarget, ...]


@dataclass(frozen=True)
class PredictionSnapshot:
    league_id: str
    season: int
    picks: tuple[PredictedPick, ...]
    created_at: str
    id: int | None = None

    def pick_at(self, overall: int) -> PredictedPick | None:
        return next((p for p in self.picks if p.overall == overall), None)


@dataclass(frozen=True)
class ScenarioVariant:
    name: str
    description: str
    top_targets: tuple[PredictedTarget, ...]


@dataclass(frozen=True)
class PickForecast:
    overall: int
    round: int
    pick: int
    top_targets: tuple[PredictedTarget, ...]
    scenario_variants: tuple[ScenarioVariant, ...] = ()


@dataclass(frozen=True)
class PredictionReport:
    league_id: str
    season: int
    user_slot: int
    user_manager: str
    trials: int
    picks: tuple[PickForecast, ...]
    snapshot_id: int | None = None
