"""Week-over-week movement in the ranking board and in manager tendencies."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from fantasy_football_manager.cache.serialization import BoardDriftSnapshotSerializer
from fantasy_football_manager.dna.inference import infer_league_dna
from fantasy_football_manager.domain.board_drift import (
    BoardDriftReport,
    BoardDriftSnapshot,
    DriftPlayer,
    ManagerTendencyChange,
    PickWindowImpact,
    SignalChange,
    WindowMover,
)
from fantasy_football_manager.domain.manager_dna import ManagerSignals
from fantasy_football_manager.draft.simulation import user_pick_overalls
from fantasy_football_manager.rankings.name_utils import normalize_name

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from fantasy_football_manager.cache.protocol import CacheStore
    from fantasy_football_manager.domain.ranking import RankingAdjustment, RankingPoolEntry
    from fantasy_football_manager.sources import LeagueHistorySource, RankingSource

logger = logging.getLogger(__name__)

SNAPSHOT_NAMESPACE = "board_drift"
SNAPSHOT_TTL_SECONDS = 30 * 24 * 3600
BASELINE_HEADLINE = "Baseline established: first week tracked. Come back next week to see who's moving."
QUIET_HEADLINE = "Quiet week: no significant board movement detected."

STABLE_THRESHOLD = 0.5
MAJOR_DRIFT = 8
MODERATE_DRIFT = 4
SIGNAL_THRESHOLD = 0.05
TOP_MOVERS = 10
WINDOW_MOVERS = 5
WINDOW_SHARE = 0.4
WINDOW_PICKS = 3
MAX_REASONS = 3

_SIGNALS: tuple[tuple[str, str], ...] = (
    ("Reach Frequency", "reach_frequency"),
    ("Rookie Appetite", "rookie_appetite"),
    ("Stack Tendency", "stack_tendency"),
    ("Panic Score", "panic_score"),
)


def iso_week_key(moment: datetime) -> str:
    iso = moment.isocalendar()
    return f"{iso.year}-W{iso.week:02d}"


def snapshot_key(league_id: str, week_key: str) -> str:
    return f"board-drift-snapshot-{league_id}-{week_key}"


def magnitude_for(drift: float) -> str:
    size = abs(drift)
    if size >= MAJOR_DRIFT:
        return "major"
    if size >= MODERATE_DRIFT:
        return "moderate"
    return "minor"


def synthesize_reasons(drift: float, news_reasons: Sequence[str] = ()) -> tuple[str, ...]:
    """Provider news reasons when present, otherwise one reason bucketed by magnitude."""
    if news_reasons:
        return tuple(news_reasons[:MAX_REASONS])
    magnitude = magnitude_for(drift)
    rising = drift < 0
    if magnitude == "major":
        return ("Strong market momentum upward" if rising else "Market correction downward",)
    if magnitude == "moderate":
        return ("Increased draft demand" if rising else "Reduced draft interest",)
    return ("Normal week-to-week fluctuation",)


def compute_drift(
    current: Sequence[RankingPoolEntry],
    previous: Sequence[RankingPoolEntry],
    adjustments: Sequence[RankingAdjustment] = (),
) -> list[DriftPlayer]:
    previous_by_name = {normalize_name(e.name): e for e in previous}
    reasons_by_name = {normalize_name(a.name): a.reasons for a in adjustments}
    players: list[DriftPlayer] = []
    for entry in current:
        key = normalize_name(entry.name)
        prior = previous_by_name.get(key)
        if prior is None:
            continue
        drift = entry.rank - prior.rank
        if abs(drift) < STABLE_THRESHOLD:
            continue
        players.append(
            DriftPlayer(
                name=entry.name,
                position=entry.position,
                team=entry.team,
                current_rank=round(entry.rank, 1),
                previous_rank=round(prior.rank, 1),
                drift=round(drift, 1),
                direction="rising" if drift < 0 else "falling",
                magnitude=magnitude_for(drift),
                reasons=synthesize_reasons(drift, reasons_by_name.get(key, ())),
            )
        )
    return players


def diff_manager_signals(
    current: Sequence[ManagerSignals],
    previous: Sequence[ManagerSignals],
) -> list[ManagerTendencyChange]:
    previous_by_manager = {s.manager: s for s in previous}
    changes: list[ManagerTendencyChange] = []
    for signals in current:
        prior = previous_by_manager.get(signals.manager)
        if prior is None:
            continue
        changed: list[SignalChange] = []
        for label, attr in _SIGNALS:
            now, before = getattr(signals, attr), getattr(prior, attr)
            if abs(now - before) >= SIGNAL_THRESHOLD:
                changed.append(
                    SignalChange(
                        signal=label,
                        previous=round(before, 2),
                        current=round(now, 2),
                        direction="up" if now > before else "down",
                    )
                )
        if changed or prior.archetype != signals.archetype:
            changes.append(
                ManagerTendencyChange(
                    manager=signals.manager,
                    archetype=signals.archetype,
                    previous_archetype=prior.archetype,
                    changed_signals=tuple(changed),
                )
            )
    return changes


def project_pick_windows(
    players: Sequence[DriftPlayer],
    current: Sequence[RankingPoolEntry],
    previous: Sequence[RankingPoolEntry],
    user_slot: int,
    team_count: int,
) -> list[PickWindowImpact]:
    previous_by_name = {normalize_name(e.name): e for e in previous}
    half_width = int(team_count * WINDOW_SHARE)
    windows: list[PickWindowImpact] = []
    for round_number, overall in enumerate(user_pick_overalls(team_count, user_slot, WINDOW_PICKS), start=1):
        start, end = overall - half_width, overall + half_width

        def in_window(rank: float, lo: int = start, hi: int = end) -> bool:
            return lo <= rank <= hi

        risers = sorted(
            (p for p in players if p.direction == "rising" and in_window(p.current_rank)),
            key=lambda p: p.drift,
        )[:WINDOW_MOVERS]
        fallers = sorted(
            (p for p in players if p.direction == "falling" and in_window(p.current_rank)),
            key=lambda p: -p.drift,
        )[:WINDOW_MOVERS]
        entrants: list[WindowMover] = []
        for entry in current:
            prior = previous_by_name.get(normalize_name(entry.name))
            if prior is not None and in_window(entry.rank) and not in_window(prior.rank):
                entrants.append(WindowMover(name=entry.name, position=entry.position, rank=round(entry.rank, 1)))
        entrants = entrants[:WINDOW_MOVERS]

        windows.append(
            PickWindowImpact(
                round=round_number,
                overall=overall,
                window_start=start,
                window_end=end,
                risers=tuple(WindowMover(p.name, p.position, drift=p.drift, rank=p.current_rank) for p in risers),
                fallers=tuple(WindowMover(p.name, p.position, drift=p.drift, rank=p.current_rank) for p in fallers),
                new_entrants=tuple(entrants),
                summary=_window_summary(len(risers), len(fallers), len(entrants)),
            )
        )
    return windows


def _window_summary(risers: int, fallers: int, entrants: int) -> str:
    parts: list[str] = []
    if risers:
        parts.append(f"{risers} player{'s' if risers > 1 else ''} rising into your window")
    if fallers:
        parts.append(f"{fallers} falling into range")
    if entrants:
        parts.append(f"{entrants} new entrant{'s' if entrants > 1 else ''}")
    return ", ".join(parts) + "." if parts else "No significant movement in your draft window."


def build_headline(
    players: Sequence[DriftPlayer],
    risers: Sequence[DriftPlayer],
    fallers: Sequence[DriftPlayer],
) -> str:
    if risers and fallers:
        riser, faller = risers[0], fallers[0]
        return (
            f"{riser.name} surges {abs(riser.drift):g} spots while {faller.name} drops {faller.drift:g}. "
            f"{len(players)} players moved this week."
        )
    if not players:
        return QUIET_HEADLINE
    return f"{len(players)} players shifted positions this week. Average drift: {_average_drift(players):g} spots."


def _average_drift(players: Sequence[DriftPlayer]) -> float:
    if not players:
        return 0.0
    return round(sum(abs(p.drift) for p in players) / len(players), 1)


@dataclass(frozen=True)
class DriftRequest:
    league_id: str
    user_slot: int
    team_count: int = 12
    fmt: str = "dynasty"
    pool_size: int = 180

    def __post_init__(self) -> None:
        if not 1 <= self.user_slot <= self.team_count:
            msg = f"user_slot must be within 1..{self.team_count}, got {self.user_slot}"
            raise ValueError(msg)


class BoardDriftTracker:
    def __init__(
        self,
        rankings: RankingSource,
        histories: LeagueHistorySource,
        cache: CacheStore,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        snapshot_ttl_seconds: int = SNAPSHOT_TTL_SECONDS,
    ) -> None:
        self._rankings = rankings
        self._histories = histories
        self._cache = cache
        self._clock = clock
        self._snapshot_ttl_seconds = snapshot_ttl_seconds
        self._serializer = BoardDriftSnapshotSerializer()

    async def track(self, request: DriftRequest) -> BoardDriftReport:
        pool, histories = await asyncio.gather(
            self._rankings.fetch_pool(request.fmt, request.pool_size),
            self._histories.fetch_histories(request.league_id),
        )
        dna = infer_league_dna(histories, pool.entries)
        now = self._clock()
        week_key = iso_week_key(now)
        previous_week_key = iso_week_key(now - timedelta(days=7))

        snapshot = BoardDriftSnapshot(
            league_id=request.league_id,
            week_key=week_key,
            entries=pool.entries,
            manager_dna=tuple(ManagerSignals.from_dna(d) for d in dna),
            saved_at=now.isoformat(),
            is_dynasty=request.fmt == "dynasty",
        )
        await self._save(snapshot)
        previous = await self._load(request.league_id, previous_week_key)

        if previous is None:
            logger.info("No board snapshot for %s in %s; baseline established", request.league_id, previous_week_key)
            return BoardDriftReport(
                league_id=request.league_id,
                week_key=week_key,
                previous_week_key=None,
                generated_at=now.isoformat(),
                headline=BASELINE_HEADLINE,
                total_players_tracked=len(pool.entries),
                average_drift=0.0,
            )

        players = compute_drift(pool.entries, previous.entries, pool.adjustments)
        risers = sorted((p for p in players if p.direction == "rising"), key=lambda p: p.drift)[:TOP_MOVERS]
        fallers = sorted((p for p in players if p.direction == "falling"), key=lambda p: -p.drift)[:TOP_MOVERS]
        return BoardDriftReport(
            league_id=request.league_id,
            week_key=week_key,
            previous_week_key=previous.week_key,
            generated_at=now.isoformat(),
            headline=build_headline(players, risers, fallers),
            total_players_tracked=len(pool.entries),
            average_drift=_average_drift(players),
            top_risers=risers,
            top_fallers=fallers,
            manager_changes=diff_manager_signals(snapshot.manager_dna, previous.manager_dna),
            pick_windows=project_pick_windows(
                players, pool.entries, previous.entries, request.user_slot, request.team_count
            ),
        )

    async def _save(self, snapshot: BoardDriftSnapshot) -> None:
        key = snapshot_key(snapshot.league_id, snapshot.week_key)
        await asyncio.to_thread(
            self._cache.put,
            SNAPSHOT_NAMESPACE,
            key,
            self._serializer.serialize(snapshot),
            self._snapshot_ttl_seconds,
        )
        logger.debug("Saved board snapshot %s (%d entries)", key, len(snapshot.entries))

    async def _load(self, league_id: str, week_key: str) -> BoardDriftSnapshot | None:
        raw = await asyncio.to_thread(self._cache.get, SNAPSHOT_NAMESPACE, snapshot_key(league_id, week_key))
        return self._serializer.deserialize(raw) if raw is not None else None
