from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from config import ConfigurationSet

from fantasy_football_manager.config import (
    create_config,
    load_calibration_settings,
    load_league_settings,
    load_simulation_settings,
)
from fantasy_football_manager.domain.settings import LeagueFormat
from fantasy_football_manager.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all FANTASY__ env vars so tests are isolated from the shell."""
    for key in list(os.environ):
        if key.startswith("FANTASY__"):
            monkeypatch.delenv(key)


def test_create_config_returns_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml")
    assert isinstance(cfg, ConfigurationSet)
    assert cfg["league.id"] == ""
    assert cfg["league.season"] == 2025
    assert cfg["rankings.source"] == "ffc"
    assert cfg["db.path"] == "~/.config/ffm/ffm.db"


def test_yaml_overrides_defaults(tmp_path: Path) -> None:
    yaml_file = tmp_path / "config.yaml"
    yaml_file.write_text("league:\n  id: '1180'\n  team_count: 10\nsimulation:\n  seed: 42\n")
    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["league.id"] == "1180"
    assert cfg["league.team_count"] == 10
    assert load_simulation_settings(cfg).seed == 42
    # Defaults still apply for unset keys
    assert cfg["league.rounds"] == 3


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_file = tmp_path / "config.yaml"
    yaml_file.write_text("league:\n  id: yaml_league\n")

    monkeypatch.setenv("FANTASY__LEAGUE__ID", "env_league")
    monkeypatch.setenv("FANTASY__LEAGUE__SEASON", "2030")

    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["league.id"] == "env_league"
    assert cfg["league.season"] == "2030"  # env vars are strings
    assert load_league_settings(cfg).season == 2030


def test_explicit_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FANTASY__LEAGUE__ID", "env_league")
    cfg = create_config(
        yaml_path="/nonexistent/config.yaml",
        league_id="cli_league",
        season=2027,
        overrides={"league": {"team_count": 14}, "simulation": {"seed": 5}},
    )
    league = load_league_settings(cfg)
    assert (league.league_id, league.season, league.team_count) == ("cli_league", 2027, 14)
    assert load_simulation_settings(cfg).seed == 5


def test_default_settings() -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml")
    league = load_league_settings(cfg)
    assert league.format is LeagueFormat.DYNASTY
    assert league.is_dynasty
    simulation = load_simulation_settings(cfg)
    assert (simulation.min_trials, simulation.max_trials, simulation.default_trials) == (80, 500, 200)
    assert simulation.seed is None
    calibration = load_calibration_settings(cfg)
    assert (calibration.ema, calibration.weight_min, calibration.weight_max) == (0.7, 0.6, 1.6)


def test_unknown_format_is_config_error() -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml", overrides={"league": {"format": "keeper"}})
    with pytest.raises(ConfigError, match="keeper"):
        load_league_settings(cfg)


def test_non_integer_is_config_error() -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml", overrides={"league": {"team_count": "twelve"}})
    with pytest.raises(ConfigError, match="league.team_count"):
        load_league_settings(cfg)


def test_non_integer_seed_is_config_error() -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml", overrides={"simulation": {"seed": "lucky"}})
    with pytest.raises(ConfigError, match="simulation.seed"):
        load_simulation_settings(cfg)


@pytest.mark.parametrize("seed", ["", "None", "none"])
def test_blank_seed_means_unseeded(seed: str) -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml", overrides={"simulation": {"seed": seed}})
    assert load_simulation_settings(cfg).seed is None


def test_inverted_trial_bounds_are_config_error() -> None:
    cfg = create_config(
        yaml_path="/nonexistent/config.yaml", overrides={"simulation": {"min_trials": 600, "max_trials": 100}}
    )
    with pytest.raises(ConfigError, match="min_trials"):
        load_simulation_settings(cfg)


@pytest.mark.parametrize(
    "overrides",
    [{"ema": 1.5}, {"weight_min": 2.0, "weight_max": 1.0}],
)
def test_invalid_calibration_is_config_error(overrides: dict[str, float]) -> None:
    cfg = create_config(yaml_path="/nonexistent/config.yaml", overrides={"calibration": overrides})
    with pytest.raises(ConfigError):
        load_calibration_settings(cfg)
