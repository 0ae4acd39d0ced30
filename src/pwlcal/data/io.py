"""I/O helpers for calibration tables and value files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import yaml

from pwlcal.core.config import DEFAULT_CONFIG
from pwlcal.core.types import CalibrationTable
from pwlcal.data.schema import (
    CSV_SUFFIXES,
    PARQUET_SUFFIXES,
    REQUIRED_YAML_FIELDS,
    SETTINGS_SECTIONS,
    TABLE_SUFFIXES,
    YAML_SUFFIXES,
)


class TableIOError(FileNotFoundError):
    """Raised when an expected table or value file is missing."""


def ensure_table_path(table_path: str | Path) -> Path:
    p = Path(table_path)
    if not p.exists():
        raise TableIOError(f"Calibration table does not exist: {p}")
    if p.suffix.lower() not in TABLE_SUFFIXES:
        supported = ", ".join(sorted(TABLE_SUFFIXES))
        raise ValueError(f"Unsupported table format '{p.suffix}'. Supported: {supported}")
    return p


def load_table_settings(table_path: str | Path) -> dict[str, Any]:
    """Return the configuration sections embedded in a YAML table ({} for other formats)."""

    p = ensure_table_path(table_path)
    if p.suffix.lower() not in YAML_SUFFIXES:
        return {}
    data = _read_yaml_table(p)
    return {key: data[key] for key in SETTINGS_SECTIONS if isinstance(data.get(key), dict)}


def load_table(table_path: str | Path, config: dict[str, Any] | None = None) -> CalibrationTable:
    """Load raw/calibrated knots from a YAML, CSV or Parquet table.

    Values are returned as given; ordering and finiteness are checked by
    :func:`pwlcal.calibration.validators.validate_table`, not here.
    """
    p = ensure_table_path(table_path)
    cfg = config or DEFAULT_CONFIG
    suffix = p.suffix.lower()
    settings = load_table_settings(p)

    if suffix in YAML_SUFFIXES:
        data = _read_yaml_table(p)
        missing = [name for name in REQUIRED_YAML_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Table {p} is missing fields: {', '.join(missing)}")
        raw = _as_list(data["raw"], "raw", p)
        calibrated = _as_list(data["calibrated"], "calibrated", p)
    else:
        frame = pd.read_csv(p) if suffix in CSV_SUFFIXES else pd.read_parquet(p)
        raw_col = cfg["table"]["raw_column"]
        cal_col = cfg["table"]["calibrated_column"]
        missing = [col for col in (raw_col, cal_col) if col not in frame.columns]
        if missing:
            raise ValueError(f"Table {p} is missing columns: {', '.join(missing)}")
        raw = frame[raw_col].to_numpy()
        calibrated = frame[cal_col].to_numpy()

    limit = cfg.get("calibration", {}).get("limit_to_range", False)
    if config is None:
        limit = settings.get("calibration", {}).get("limit_to_range", limit)
    return CalibrationTable(
        raw=np.asarray(raw),
        calibrated=np.asarray(calibrated),
        limit_to_range=bool(limit),
        source=p,
    )


def load_values(values_path: str | Path, column: str) -> pd.DataFrame:
    p = Path(values_path)
    if not p.exists():
        raise TableIOError(f"Values file does not exist: {p}")
    frame = pd.read_parquet(p) if p.suffix.lower() in PARQUET_SUFFIXES else pd.read_csv(p)
    if column not in frame.columns:
        raise ValueError(f"Column '{column}' not found in {p}; available: {', '.join(map(str, frame.columns))}")
    return frame


def write_values(frame: pd.DataFrame, out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if p.suffix.lower() in PARQUET_SUFFIXES:
        frame.to_parquet(p, index=False)
    else:
        frame.to_csv(p, index=False)
    return p


def _read_yaml_table(p: Path) -> dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Table file must be a mapping: {p}")
    return data


def _as_list(value: Any, name: str, p: Path) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"'{name}' in {p} must be a list")
    return value
