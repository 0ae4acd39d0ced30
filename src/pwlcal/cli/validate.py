"""Implementation of `pwlcal validate`."""

from __future__ import annotations

import argparse
import json

from pwlcal.calibration.validators import report_to_dict, validate_table
from pwlcal.cli.common import print_issues
from pwlcal.core.config import resolve_config
from pwlcal.data.io import load_table, load_table_settings


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("validate", help="Validate a calibration table")
    parser.add_argument("table", help="Calibration table (.yaml, .csv or .parquet)")
    parser.add_argument("--config", default=None, help="Optional YAML config overriding defaults")
    parser.add_argument("--json", action="store_true", help="Print report as JSON")
    parser.set_defaults(func=cmd_validate)


def cmd_validate(args: argparse.Namespace) -> int:
    cfg = resolve_config(load_table_settings(args.table), config_path=args.config)
    table = load_table(args.table, cfg)
    report = validate_table(table.raw, table.calibrated)

    if args.json:
        print(json.dumps(report_to_dict(report), indent=2, sort_keys=True))
    else:
        status = "PASS" if report.valid else "FAIL"
        print(f"Validation: {status}")
        print(f"Calibration points: {report.num_points}")
        print_issues(report)

    return 0 if report.valid else 2
