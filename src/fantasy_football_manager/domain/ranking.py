from dataclasses import dataclass, field

POSITIONS: tuple[str, ...] = ("QB", "RB", "WR", "TE")

DEFAULT_MARKET_VALUE = 2500.0
UNRANKED = 999.0


@dataclass(frozen=True)
class RankingPoolEntry:
    name: str
    position: str
    rank: float
    market_value: float = DEFAULT_MARKET_VALUE
    team: str | None = None
    age: float | None = None


@dataclass(frozen=True)
class RankingAdjustment:
    name: str
    delta: float
    reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class RankingPool:
    entries: tuple[RankingPoolEntry, ...]
    adjustments: tuple[RankingAdjustment, ...] = field(default_factory=tuple)
