from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Annotated, TypeVar

import typer

from fantasy_football_manager.cli._logging import configure_logging
from fantasy_football_manager.cli._output import (
    print_drift_report,
    print_error,
    print_manager_dna,
    print_prediction_report,
    print_retrospective_report,
    print_snipe_report,
)
from fantasy_football_manager.cli.factory import EngineContext, build_engine_context
from fantasy_football_manager.config import AppConfig, create_config
from fantasy_football_manager.dna.inference import infer_league_dna
from fantasy_football_manager.domain.board_drift import BoardDriftReport
from fantasy_football_manager.domain.manager_dna import ManagerDna
from fantasy_football_manager.exceptions import FfmException
from fantasy_football_manager.services.board_drift import DriftRequest
from fantasy_football_manager.services.prediction import PredictionRequest

app = typer.Typer(name="ffm", help="Fantasy Football Manager: dynasty draft simulation and calibration")

# Module-level factory for dependency injection in tests
_context_factory: Callable[[AppConfig], AbstractAsyncContextManager[EngineContext]] = build_engine_context


def set_context_factory(factory: Callable[[AppConfig], AbstractAsyncContextManager[EngineContext]]) -> None:
    global _context_factory
    _context_factory = factory


def reset_context_factory() -> None:
    global _context_factory
    _context_factory = build_engine_context


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """Fantasy Football Manager: dynasty draft simulation and calibration."""
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_LeagueOpt = Annotated[str | None, typer.Option("--league", help="Sleeper league id")]
_SeasonOpt = Annotated[int | None, typer.Option("--season", help="Draft season")]
_SlotOpt = Annotated[int, typer.Option("--slot", help="Your draft slot (1-based)")]
_TeamsOpt = Annotated[int | None, typer.Option("--teams", help="Number of teams in the league")]
_RoundsOpt = Annotated[int | None, typer.Option("--rounds", help="Rounds to simulate")]
_TrialsOpt = Annotated[int | None, typer.Option("--trials", help="Monte Carlo trials (clamped to configured bounds)")]
_SeedOpt = Annotated[int | None, typer.Option("--seed", help="Random seed for reproducible runs")]
_BudgetOpt = Annotated[float | None, typer.Option("--time-budget", help="Wall-clock budget in seconds")]
_ConfigOpt = Annotated[str, typer.Option("--config", help="Path to the YAML config file")]


def _load_config(
    config_path: str,
    league: str | None,
    season: int | None,
    teams: int | None = None,
    rounds: int | None = None,
    seed: int | None = None,
) -> AppConfig:
    league_overrides: dict[str, object] = {}
    if teams is not None:
        league_overrides["team_count"] = teams
    if rounds is not None:
        league_overrides["rounds"] = rounds
    overrides: dict[str, object] = {"league": league_overrides}
    if seed is not None:
        overrides["simulation"] = {"seed": seed}
    return create_config(config_path, league_id=league, season=season, overrides=overrides)


T = TypeVar("T")


def _run(cfg: AppConfig, action: Callable[[EngineContext], Awaitable[T]]) -> T:
    async def go() -> T:
        async with _context_factory(cfg) as ctx:
            return await action(ctx)

    try:
        return asyncio.run(go())
    except (FfmException, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def _prediction_request(
    ctx: EngineContext,
    slot: int,
    trials: int | None,
    seed: int | None,
    time_budget: float | None,
) -> PredictionRequest:
    league = ctx.league
    return PredictionRequest(
        league_id=league.league_id,
        season=league.season,
        user_slot=slot,
        team_count=league.team_count,
        rounds=league.rounds,
        trials=trials,
        seed=seed,
        time_budget_seconds=time_budget,
        fmt=league.format.value,
        qb_slots=league.qb_slots,
    )


@app.command()
def predict(
    league: _LeagueOpt = None,
    season: _SeasonOpt = None,
    slot: _SlotOpt = 1,
    teams: _TeamsOpt = None,
    rounds: _RoundsOpt = None,
    trials: _TrialsOpt = None,
    seed: _SeedOpt = None,
    time_budget: _BudgetOpt = None,
    config: _ConfigOpt = "config.yaml",
) -> None:
    """Forecast who is likely available at each of your picks and save a prediction snapshot."""
    cfg = _load_config(config, league, season, teams, rounds, seed)
    report = _run(cfg, lambda ctx: ctx.prediction.predict(_prediction_request(ctx, slot, trials, seed, time_budget)))
    print_prediction_report(report)


@app.command()
def snipe(
    league: _LeagueOpt = None,
    season: _SeasonOpt = None,
    slot: _SlotOpt = 1,
    teams: _TeamsOpt = None,
    rounds: _RoundsOpt = None,
    trials: _TrialsOpt = None,
    seed: _SeedOpt = None,
    time_budget: _BudgetOpt = None,
    config: _ConfigOpt = "config.yaml",
) -> None:
    """Show which targets are likely to be taken before each of your picks."""
    cfg = _load_config(config, league, season, teams, rounds, seed)
    report = _run(
        cfg, lambda ctx: ctx.prediction.snipe_radar(_prediction_request(ctx, slot, trials, seed, time_budget))
    )
    print_snipe_report(report)


@app.command()
def drift(
    league: _LeagueOpt = None,
    season: _SeasonOpt = None,
    slot: _SlotOpt = 1,
    teams: _TeamsOpt = None,
    config: _ConfigOpt = "config.yaml",
) -> None:
    """Compare this week's board and manager tendencies with last week's snapshot."""
    cfg = _load_config(config, league, season, teams)

    async def action(ctx: EngineContext) -> BoardDriftReport:
        request = DriftRequest(
            league_id=ctx.league.league_id,
            user_slot=slot,
            team_count=ctx.league.team_count,
            fmt=ctx.league.format.value,
        )
        return await ctx.drift.track(request)

    print_drift_report(_run(cfg, action))


@app.command()
def retro(
    league: _LeagueOpt = None,
    season: _SeasonOpt = None,
    config: _ConfigOpt = "config.yaml",
) -> None:
    """Grade the latest prediction snapshot against the real draft and recalibrate."""
    cfg = _load_config(config, league, season)
    report = _run(cfg, lambda ctx: ctx.retrospective.run(ctx.league.league_id, ctx.league.season))
    print_retrospective_report(report)


@app.command()
def dna(
    league: _LeagueOpt = None,
    season: _SeasonOpt = None,
    config: _ConfigOpt = "config.yaml",
) -> None:
    """Profile every manager in the league from their roster and results."""
    cfg = _load_config(config, league, season)

    async def action(ctx: EngineContext) -> list[ManagerDna]:
        pool, histories = await asyncio.gather(
            ctx.rankings.fetch_pool(ctx.league.format.value, ctx.simulation.pool_size),
            ctx.histories.fetch_histories(ctx.league.league_id),
        )
        return infer_league_dna(histories, pool.entries)

    print_manager_dna(_run(cfg, action))
