from dataclasses import dataclass
from enum import Enum


class Urgency(Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    WATCH = "watch"


@dataclass(frozen=True)
class SnipedBy:
    manager: str
    probability: int


@dataclass(frozen=True)
class SnipeAlert:
    player: str
    position: str
    rank: float
    value: float
    snipe_probability: int
    sniped_by: tuple[SnipedBy, ...]
    expected_value_lost: int
    urgency: Urgency


@dataclass(frozen=True)
class AvailablePlayer:
    player: str
    position: str
    probability: int


@dataclass(frozen=True)
class SnipeRadarEntry:
    overall: int
    round: int
    pick: int
    picks_before: int
    alerts: tuple[SnipeAlert, ...]
    top_available: tuple[AvailablePlayer, ...]


@dataclass(frozen=True)
class SnipeRadarReport:
    league_id: str
    user_slot: int
    user_manager: str
    trials: int
    entries: tuple[SnipeRadarEntry, ...]
