"""Helpers shared by the table-driven subcommands."""

from __future__ import annotations

import argparse
from typing import Any

from pwlcal.calibration.calibrator import Calibrator
from pwlcal.core.config import resolve_config
from pwlcal.core.types import CalibrationTable, ValidationReport
from pwlcal.data.io import load_table, load_table_settings


def add_table_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("table", help="Calibration table (.yaml, .csv or .parquet)")
    parser.add_argument("--config", default=None, help="Optional YAML config overriding defaults")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--clamp",
        dest="limit_to_range",
        action="store_const",
        const=True,
        default=None,
        help="Clamp outputs to the calibrated range of the table",
    )
    mode.add_argument(
        "--extrapolate",
        dest="limit_to_range",
        action="store_const",
        const=False,
        help="Extrapolate past the table using the boundary segments",
    )


def load_calibrator(args: argparse.Namespace) -> tuple[Calibrator, CalibrationTable, dict[str, Any]]:
    """Resolve config, load the table and fit it. The calibrator may be unfitted."""

    overrides: dict[str, Any] = {}
    if getattr(args, "limit_to_range", None) is not None:
        overrides["calibration"] = {"limit_to_range": bool(args.limit_to_range)}
    cfg = resolve_config(
        table_settings=load_table_settings(args.table),
        config_path=getattr(args, "config", None),
        overrides=overrides,
    )
    table = load_table(args.table, cfg)
    calibrator = Calibrator(
        table.raw,
        table.calibrated,
        limit_output_to_calibration_range=table.limit_to_range,
    )
    calibrator.begin()
    return calibrator, table, cfg


def print_issues(report: ValidationReport | None) -> None:
    if report is None:
        return
    if not report.issues:
        print("No issues found")
    for issue in report.issues:
        print(f"- {issue.level.upper()} [{issue.code}] {issue.message}")
