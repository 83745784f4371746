from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

import httpx

from fantasy_football_manager.cache.sources import CachedPlayerDirectory, CachedRankingSource
from fantasy_football_manager.cache.sqlite_store import SqliteCacheStore
from fantasy_football_manager.config import (
    AppConfig,
    load_calibration_settings,
    load_league_settings,
    load_simulation_settings,
)
from fantasy_football_manager.db.connection import create_connection
from fantasy_football_manager.domain.settings import LeagueSettings, SimulationSettings
from fantasy_football_manager.exceptions import ConfigError
from fantasy_football_manager.rankings.csv_source import CsvRankingSource
from fantasy_football_manager.rankings.ffc_source import FantasyFootballCalculatorSource
from fantasy_football_manager.repos.calibration_repo import SqliteCalibrationRepo
from fantasy_football_manager.repos.prediction_snapshot_repo import SqlitePredictionSnapshotRepo
from fantasy_football_manager.repos.retrospective_repo import SqliteRetrospectiveRepo
from fantasy_football_manager.services.board_drift import BoardDriftTracker
from fantasy_football_manager.services.prediction import PredictionService
from fantasy_football_manager.services.retrospective import RetrospectiveCalibrator
from fantasy_football_manager.sleeper.client import SleeperClient
from fantasy_football_manager.sleeper.draft_source import SleeperDraftResultsSource
from fantasy_football_manager.sleeper.league_source import SleeperLeagueHistorySource, SleeperPlayerDirectory
from fantasy_football_manager.sources import LeagueHistorySource, RankingSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineContext:
    league: LeagueSettings
    simulation: SimulationSettings
    rankings: RankingSource
    histories: LeagueHistorySource
    prediction: PredictionService
    drift: BoardDriftTracker
    retrospective: RetrospectiveCalibrator


def build_ranking_source(cfg: AppConfig, league: LeagueSettings, client: httpx.AsyncClient) -> RankingSource:
    source = str(cfg["rankings.source"]).lower()
    if source == "csv":
        raw_path = str(cfg["rankings.csv_path"]).strip()
        if not raw_path:
            raise ConfigError("rankings.csv_path is required when rankings.source is 'csv'")
        return CsvRankingSource(Path(raw_path).expanduser())
    if source == "ffc":
        return FantasyFootballCalculatorSource(
            season=league.season,
            teams=league.team_count,
            client=client,
            base_url=str(cfg["rankings.ffc_base_url"]),
        )
    raise ConfigError(f"Unknown rankings source {source!r}")


@asynccontextmanager
async def build_engine_context(cfg: AppConfig) -> AsyncIterator[EngineContext]:
    """Composition root: opens the DB and HTTP client, wires providers and services, closes both."""
    league = load_league_settings(cfg)
    if not league.league_id:
        raise ConfigError("No league id configured; pass --league or set league.id")
    simulation = load_simulation_settings(cfg)
    calibration = load_calibration_settings(cfg)

    cache = SqliteCacheStore(Path(str(cfg["cache.db_path"])).expanduser())
    purged = cache.purge_expired()
    if purged:
        logger.debug("Purged %d expired cache entries", purged)
    conn = create_connection(str(cfg["db.path"]), check_same_thread=False)
    http = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
    try:
        sleeper = SleeperClient(client=http, base_url=str(cfg["sleeper.base_url"]))
        players = CachedPlayerDirectory(SleeperPlayerDirectory(sleeper), cache, int(str(cfg["cache.players_ttl"])))
        histories = SleeperLeagueHistorySource(sleeper, players, weeks=int(str(cfg["sleeper.history_weeks"])))
        rankings = CachedRankingSource(
            build_ranking_source(cfg, league, http),
            cache,
            cache_key=f"{cfg['rankings.source']}-{league.season}-{league.team_count}",
            ttl_seconds=int(str(cfg["cache.rankings_ttl"])),
        )
        snapshots = SqlitePredictionSnapshotRepo(conn)
        calibration_repo = SqliteCalibrationRepo(conn)
        yield EngineContext(
            league=league,
            simulation=simulation,
            rankings=rankings,
            histories=histories,
            prediction=PredictionService(rankings, histories, snapshots, calibration_repo, simulation),
            drift=BoardDriftTracker(
                rankings, histories, cache, snapshot_ttl_seconds=int(str(cfg["cache.snapshot_ttl"]))
            ),
            retrospective=RetrospectiveCalibrator(
                SleeperDraftResultsSource(sleeper, players),
                snapshots,
                calibration_repo,
                SqliteRetrospectiveRepo(conn),
                calibration,
            ),
        )
    finally:
        await http.aclose()
        conn.close()
        logger.debug("Closed engine context for league %s", league.league_id)
