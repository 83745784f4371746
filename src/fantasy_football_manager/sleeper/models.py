from dataclasses import dataclass


@dataclass(frozen=True)
class SleeperPlayer:
    player_id: str
    full_name: str
    position: str | None = None
    team: str | None = None
    age: float | None = None


@dataclass(frozen=True)
class SleeperRoster:
    roster_id: int
    owner_id: str | None
    players: tuple[str, ...]
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0


@dataclass(frozen=True)
class SleeperUser:
    user_id: str
    display_name: str
    team_name: str | None = None
