from dataclasses import dataclass
from enum import Enum


class ReachLabel(Enum):
    CONSERVATIVE = "Conservative"
    MEASURED = "Measured"
    AGGRESSIVE = "Aggressive"
    WILD_CARD = "Wild Card"


class RookieLabel(Enum):
    VETERAN_ONLY = "Veteran-Only"
    BALANCED = "Balanced"
    ROOKIE_HEAVY = "Rookie-Heavy"
    YOUTH_MOVEMENT = "Youth Movement"


class StackLabel(Enum):
    INDEPENDENT = "Independent"
    LIGHT_STACKER = "Light Stacker"
    STACK_BUILDER = "Stack-Builder"
    STACK_DEPENDENT = "Stack-Dependent"


class PanicResponse(Enum):
    HOLD_STEADY = "Hold Steady"
    MILD_PIVOT = "Mild Pivot"
    REACTIVE = "Reactive"
    FULL_PANIC = "Full Panic"


class Archetype(Enum):
    GAMBLER = "The Gambler"
    CALCULATOR = "The Calculator"
    DYNASTY_ARCHITECT = "Dynasty Architect"
    WIN_NOW_COMMANDER = "Win-Now Commander"
    STACK_STRATEGIST = "Stack Strategist"
    BOOM_OR_BUST = "Boom-or-Bust"
    STEADY_OPERATOR = "Steady Operator"
    YOUTH_RAIDER = "Youth Raider"
    REBUILDER = "Rebuilder"
    BALANCED_DRAFTER = "Balanced Drafter"


@dataclass(frozen=True)
class RoundBias:
    early: int
    mid: int
    late: int


@dataclass(frozen=True)
class ManagerDna:
    manager: str
    team_index: int
    reach_frequency: float
    reach_label: ReachLabel
    positional_aggression: dict[str, RoundBias]
    rookie_appetite: float
    rookie_label: RookieLabel
    stack_tendency: float
    stack_label: StackLabel
    panic_score: float
    panic_response: PanicResponse
    archetype: Archetype
    tendency: dict[str, float]
    roster_counts: dict[str, int]


@dataclass(frozen=True)
class ManagerSignals:
    """The slice of a ManagerDna persisted in weekly board-drift snapshots."""

    manager: str
    archetype: str
    reach_frequency: float
    rookie_appetite: float
    stack_tendency: float
    panic_score: float

    @classmethod
    def from_dna(cls, dna: ManagerDna) -> "ManagerSignals":
        return cls(
            manager=dna.manager,
            archetype=dna.archetype.value,
            reach_frequency=dna.reach_frequency,
            rookie_appetite=dna.rookie_appetite,
            stack_tendency=dna.stack_tendency,
            panic_score=dna.panic_score,
        )
