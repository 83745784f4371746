"""Which players other managers take before each of the user's picks."""

from __future__ import annotations

from collections import Counter, defaultdict
from typing import TYPE_CHECKING

from fantasy_football_manager.domain.snipe import (
    AvailablePlayer,
    SnipeAlert,
    SnipedBy,
    SnipeRadarEntry,
    Urgency,
)
from fantasy_football_manager.numeric import finite_or

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from fantasy_football_manager.domain.ranking import RankingPoolEntry
    from fantasy_football_manager.draft.simulation_models import SimulationTrial

CRITICAL_THRESHOLD = 65
WARNING_THRESHOLD = 35
MIN_ALERT_PROBABILITY = 10
MAX_ALERTS = 6
MAX_AVAILABLE = 4
REPLACEMENT_VALUE_SHARE = 0.7


def urgency_for(probability: int) -> Urgency:
    if probability >= CRITICAL_THRESHOLD:
        return Urgency.CRITICAL
    if probability >= WARNING_THRESHOLD:
        return Urgency.WARNING
    return Urgency.WATCH


class SnipeRadar:
    def __init__(self, user_index: int, user_overalls: Sequence[int], team_count: int, managers: Sequence[str]) -> None:
        self._user_index = user_index
        self._user_overalls = tuple(user_overalls)
        self._team_count = team_count
        self._managers = tuple(managers)
        self._trials = 0
        self._taken: dict[int, Counter[str]] = {o: Counter() for o in self._user_overalls}
        self._taken_by: dict[int, dict[str, Counter[str]]] = {o: defaultdict(Counter) for o in self._user_overalls}
        self._available: dict[int, Counter[tuple[str, str]]] = {o: Counter() for o in self._user_overalls}

    @property
    def trials(self) -> int:
        return self._trials

    def record(self, trial: SimulationTrial) -> None:
        self._trials += 1
        for pick in trial.picks:
            if pick.manager_index == self._user_index:
                continue
            manager = self._manager_name(pick.manager_index)
            for overall in self._user_overalls:
                if pick.overall < overall:
                    self._taken[overall][pick.player.name] += 1
                    self._taken_by[overall][pick.player.name][manager] += 1
        for overall in self._user_overalls:
            for entry in trial.available.get(overall, ()):
                self._available[overall][(entry.name, entry.position)] += 1

    def record_all(self, trials: Iterable[SimulationTrial]) -> SnipeRadar:
        for trial in trials:
            self.record(trial)
        return self

    def entries(self, pool: Sequence[RankingPoolEntry]) -> list[SnipeRadarEntry]:
        ranked = sorted(pool, key=lambda e: finite_or(e.rank, 999.0))
        result: list[SnipeRadarEntry] = []
        previous = 0
        for overall in self._user_overalls:
            result.append(
                SnipeRadarEntry(
                    overall=overall,
                    round=(overall - 1) // self._team_count + 1,
                    pick=(overall - 1) % self._team_count + 1,
                    picks_before=max(0, overall - previous - 1),
                    alerts=self._alerts(overall, ranked),
                    top_available=self._top_available(overall),
                )
            )
            previous = overall
        return result

    def _alerts(self, overall: int, ranked: Sequence[RankingPoolEntry]) -> tuple[SnipeAlert, ...]:
        if not self._trials:
            return ()
        low = max(1.0, overall - self._team_count * 1.5)
        alerts: list[SnipeAlert] = []
        for entry in ranked:
            rank = finite_or(entry.rank, 999.0)
            if not low <= rank <= overall + 10:
                continue
            taken = self._taken[overall].get(entry.name, 0)
            probability = round(taken / self._trials * 100)
            if not taken or probability < MIN_ALERT_PROBABILITY:
                continue
            value = finite_or(entry.market_value, 2500.0)
            replacement = next(
                (
                    finite_or(e.market_value, 2500.0)
                    for e in ranked
                    if e.position == entry.position and e.name != entry.name and finite_or(e.rank, 999.0) > rank
                ),
                value * REPLACEMENT_VALUE_SHARE,
            )
            sniped_by = tuple(
                SnipedBy(manager=manager, probability=round(count / self._trials * 100))
                for manager, count in self._taken_by[overall][entry.name].most_common(3)
            )
            alerts.append(
                SnipeAlert(
                    player=entry.name,
                    position=entry.position,
                    rank=rank,
                    value=value,
                    snipe_probability=probability,
                    sniped_by=sniped_by,
                    expected_value_lost=round((value - replacement) * probability / 100),
                    urgency=urgency_for(probability),
                )
            )
        alerts.sort(key=lambda a: (-a.snipe_probability, a.player))
        return tuple(alerts[:MAX_ALERTS])

    def _top_available(self, overall: int) -> tuple[AvailablePlayer, ...]:
        if not self._trials:
            return ()
        ranked = sorted(self._available[overall].items(), key=lambda item: (-item[1], item[0][0]))
        return tuple(
            AvailablePlayer(player=name, position=position, probability=round(count / self._trials * 100))
            for (name, position), count in ranked[:MAX_AVAILABLE]
        )

    def _manager_name(self, index: int) -> str:
        if 0 <= index < len(self._managers):
            return self._managers[index]
        return f"Manager {index + 1}"
