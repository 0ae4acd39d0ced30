"""Configuration loading and resolution."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG: dict[str, Any] = {
    "calibration": {
        "limit_to_range": False,
    },
    "table": {
        "raw_column": "raw",
        "calibrated_column": "calibrated",
    },
    "apply": {
        "column": "value",
        "output_column": "calibrated",
    },
    "plot": {
        "margin_frac": 0.1,
        "n_samples": 200,
    },
}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries and return a new dictionary."""

    out = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping at root: {p}")
    return data


def resolve_config(
    table_settings: dict[str, Any] | None = None,
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve run configuration from defaults, table file settings, and an optional user file."""

    resolved = deepcopy(DEFAULT_CONFIG)
    if table_settings:
        resolved = deep_merge(resolved, table_settings)
    if config_path is not None:
        resolved = deep_merge(resolved, load_yaml(config_path))
    if overrides:
        resolved = deep_merge(resolved, overrides)
    _validate_values(resolved)
    return resolved


def _validate_values(cfg: dict[str, Any]) -> None:
    limit = cfg.get("calibration", {}).get("limit_to_range")
    if not isinstance(limit, bool):
        raise ConfigError(f"calibration.limit_to_range must be a boolean, got {limit!r}")

    for section, key in (
        ("table", "raw_column"),
        ("table", "calibrated_column"),
        ("apply", "column"),
        ("apply", "output_column"),
    ):
        name = cfg.get(section, {}).get(key)
        if not isinstance(name, str) or not name:
            raise ConfigError(f"{section}.{key} must be a non-empty string")

    margin = cfg.get("plot", {}).get("margin_frac")
    if isinstance(margin, bool) or not isinstance(margin, (int, float)) or margin < 0:
        raise ConfigError(f"plot.margin_frac must be a non-negative number, got {margin!r}")

    n_samples = cfg.get("plot", {}).get("n_samples")
    if isinstance(n_samples, bool) or not isinstance(n_samples, int) or n_samples < 2:
        raise ConfigError(f"plot.n_samples must be an integer >= 2, got {n_samples!r}")
