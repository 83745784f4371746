"""Ordered archetype decision table.

Rules are evaluated top to bottom and the first matching predicate wins, so
specific label combinations must sit above the generic fallbacks.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from fantasy_football_manager.domain.manager_dna import (
    Archetype,
    PanicResponse,
    ReachLabel,
    RookieLabel,
    StackLabel,
)


@dataclass(frozen=True)
class ArchetypeInputs:
    reach: ReachLabel
    rookie: RookieLabel
    stack: StackLabel
    panic: PanicResponse
    win_rate: float
    is_dynasty: bool


ArchetypeRule = tuple[Callable[[ArchetypeInputs], bool], Archetype]

ARCHETYPE_RULES: tuple[ArchetypeRule, ...] = (
    (
        lambda i: i.reach is ReachLabel.WILD_CARD and i.panic is PanicResponse.FULL_PANIC,
        Archetype.GAMBLER,
    ),
    (
        lambda i: i.reach is ReachLabel.CONSERVATIVE and i.panic is PanicResponse.HOLD_STEADY and i.win_rate > 0.55,
        Archetype.CALCULATOR,
    ),
    (
        lambda i: i.rookie is RookieLabel.YOUTH_MOVEMENT and i.is_dynasty,
        Archetype.DYNASTY_ARCHITECT,
    ),
    (
        lambda i: i.rookie is RookieLabel.VETERAN_ONLY and i.win_rate > 0.6,
        Archetype.WIN_NOW_COMMANDER,
    ),
    (
        lambda i: i.stack in (StackLabel.STACK_DEPENDENT, StackLabel.STACK_BUILDER),
        Archetype.STACK_STRATEGIST,
    ),
    (
        lambda i: i.reach is ReachLabel.AGGRESSIVE and i.panic is PanicResponse.REACTIVE,
        Archetype.BOOM_OR_BUST,
    ),
    (
        lambda i: i.panic is PanicResponse.HOLD_STEADY and i.reach is ReachLabel.MEASURED,
        Archetype.STEADY_OPERATOR,
    ),
    (
        lambda i: i.rookie is RookieLabel.ROOKIE_HEAVY and i.reach is ReachLabel.AGGRESSIVE,
        Archetype.YOUTH_RAIDER,
    ),
    (
        lambda i: i.win_rate < 0.35,
        Archetype.REBUILDER,
    ),
)


def derive_archetype(
    inputs: ArchetypeInputs,
    rules: tuple[ArchetypeRule, ...] = ARCHETYPE_RULES,
) -> Archetype:
    for predicate, archetype in rules:
        if predicate(inputs):
            return archetype
    return Archetype.BALANCED_DRAFTER
