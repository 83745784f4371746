from dataclasses import dataclass, field


@dataclass(frozen=True)
class WeeklyPerformance:
    week: int
    points: float


@dataclass(frozen=True)
class ManagerHistory:
    team_index: int
    team_name: str = ""
    owner_name: str = ""
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    performances: tuple[WeeklyPerformance, ...] = field(default_factory=tuple)
    roster_player_ids: tuple[str, ...] = field(default_factory=tuple)
    is_dynasty: bool = True
    league_size: int = 12
    roster_id: int | None = None

    @property
    def display_name(self) -> str:
        return self.team_name or self.owner_name or f"Manager {self.team_index + 1}"
