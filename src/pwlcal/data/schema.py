"""Table file constants."""

from __future__ import annotations

YAML_SUFFIXES = {".yaml", ".yml"}
CSV_SUFFIXES = {".csv"}
PARQUET_SUFFIXES = {".parquet"}
TABLE_SUFFIXES = YAML_SUFFIXES | CSV_SUFFIXES | PARQUET_SUFFIXES

REQUIRED_YAML_FIELDS = ["raw", "calibrated"]
# Top-level YAML keys merged into the run configuration.
SETTINGS_SECTIONS = ["calibration", "table", "apply", "plot"]
