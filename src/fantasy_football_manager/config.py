from __future__ import annotations

from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from fantasy_football_manager.domain.settings import (
    CalibrationSettings,
    LeagueFormat,
    LeagueSettings,
    SimulationSettings,
)
from fantasy_football_manager.exceptions import ConfigError


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


THIRTY_DAYS = 30 * 24 * 3600

_DEFAULTS: dict[str, object] = {
    "league": {
        "id": "",
        "season": 2025,
        "team_count": 12,
        "rounds": 3,
        "format": "dynasty",
        "qb_slots": 2,
    },
    "simulation": {
        "min_trials": 80,
        "max_trials": 500,
        "default_trials": 200,
        "candidate_limit": 40,
        "pool_size": 180,
        "seed": "",
    },
    "calibration": {
        "learning_rate": 0.08,
        "ema": 0.7,
        "weight_min": 0.6,
        "weight_max": 1.6,
    },
    "cache": {
        "db_path": "~/.config/ffm/cache.db",
        "players_ttl": 86400,
        "rankings_ttl": 3600,
        "snapshot_ttl": THIRTY_DAYS,
    },
    "db": {
        "path": "~/.config/ffm/ffm.db",
    },
    "sleeper": {
        "base_url": "https://api.sleeper.app/v1",
        "history_weeks": 8,
    },
    "rankings": {
        "source": "ffc",
        "csv_path": "",
        "ffc_base_url": "https://fantasyfootballcalculator.com/api/v1",
    },
}


def create_config(
    yaml_path: str = "config.yaml",
    env_prefix: str = "FANTASY",
    defaults: dict[str, object] | None = None,
    *,
    league_id: str | None = None,
    season: int | None = None,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file.
        env_prefix: Prefix for environment variables, e.g. ``FANTASY__LEAGUE__ID``.
        defaults: Default configuration values.
        league_id: Override the league ID.
        season: Override the season.
        overrides: Additional nested overrides, e.g. ``{"simulation": {"seed": 7}}``.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]

    explicit = _build_overrides(league_id, season, overrides or {})
    if explicit:
        layers.insert(0, config_from_dict(explicit))

    return ConfigurationSet(*layers)


def _build_overrides(league_id: str | None, season: int | None, extra: dict[str, object]) -> dict[str, object]:
    merged: dict[str, object] = {section: dict(values) for section, values in extra.items() if isinstance(values, dict)}
    league_dict = merged.setdefault("league", {})
    assert isinstance(league_dict, dict)
    if league_id is not None:
        league_dict["id"] = league_id
    if season is not None:
        league_dict["season"] = season
    return {section: values for section, values in merged.items() if values}


def _int(cfg: AppConfig, key: str) -> int:
    try:
        return int(str(cfg[key]))
    except (KeyError, ValueError) as e:
        raise ConfigError(f"Invalid integer for {key}: {e}") from e


def _float(cfg: AppConfig, key: str) -> float:
    try:
        return float(str(cfg[key]))
    except (KeyError, ValueError) as e:
        raise ConfigError(f"Invalid number for {key}: {e}") from e


def _optional_int(cfg: AppConfig, key: str) -> int | None:
    raw = str(cfg[key]).strip()
    if not raw or raw.lower() == "none":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid integer for {key}: {e}") from e


def load_league_settings(cfg: AppConfig | None = None) -> LeagueSettings:
    if cfg is None:
        cfg = create_config()
    raw_format = str(cfg["league.format"]).lower()
    try:
        league_format = LeagueFormat(raw_format)
    except ValueError as e:
        raise ConfigError(f"Unknown league format {raw_format!r}") from e
    return LeagueSettings(
        league_id=str(cfg["league.id"]),
        season=_int(cfg, "league.season"),
        team_count=_int(cfg, "league.team_count"),
        rounds=_int(cfg, "league.rounds"),
        format=league_format,
        qb_slots=_int(cfg, "league.qb_slots"),
    )


def load_simulation_settings(cfg: AppConfig | None = None) -> SimulationSettings:
    if cfg is None:
        cfg = create_config()
    settings = SimulationSettings(
        min_trials=_int(cfg, "simulation.min_trials"),
        max_trials=_int(cfg, "simulation.max_trials"),
        default_trials=_int(cfg, "simulation.default_trials"),
        candidate_limit=_int(cfg, "simulation.candidate_limit"),
        pool_size=_int(cfg, "simulation.pool_size"),
        seed=_optional_int(cfg, "simulation.seed"),
    )
    if settings.min_trials > settings.max_trials:
        raise ConfigError("simulation.min_trials must not exceed simulation.max_trials")
    return settings


def load_calibration_settings(cfg: AppConfig | None = None) -> CalibrationSettings:
    if cfg is None:
        cfg = create_config()
    settings = CalibrationSettings(
        learning_rate=_float(cfg, "calibration.learning_rate"),
        ema=_float(cfg, "calibration.ema"),
        weight_min=_float(cfg, "calibration.weight_min"),
        weight_max=_float(cfg, "calibration.weight_max"),
    )
    if not 0.0 <= settings.ema <= 1.0:
        raise ConfigError("calibration.ema must be within [0, 1]")
    if settings.weight_min > settings.weight_max:
        raise ConfigError("calibration.weight_min must not exceed calibration.weight_max")
    return settings
