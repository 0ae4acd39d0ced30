"""Implementation of `pwlcal apply`."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pwlcal.cli.common import add_table_arguments, load_calibrator, print_issues
from pwlcal.data.io import load_values, write_values

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("apply", help="Calibrate raw values against a table")
    add_table_arguments(parser)
    parser.add_argument("values", nargs="*", type=float, help="Raw values to calibrate")
    parser.add_argument("--input", default=None, help="CSV or Parquet file with raw values")
    parser.add_argument("--column", default=None, help="Input column holding raw values")
    parser.add_argument("--output-column", default=None, help="Column name for calibrated values")
    parser.add_argument("--output", default=None, help="Output file (defaults to <input>.calibrated.csv)")
    parser.set_defaults(func=cmd_apply)


def cmd_apply(args: argparse.Namespace) -> int:
    if not args.values and not args.input:
        raise ValueError("Provide raw values on the command line or an --input file")

    calibrator, _, cfg = load_calibrator(args)
    if not calibrator.fitted:
        print(f"Fit failed for {args.table}; refusing to pass values through uncalibrated")
        print_issues(calibrator.report)
        return 2

    for value in args.values:
        print(f"{value:g}\t{calibrator.calibrate(value):.6g}")

    if args.input:
        column = args.column or cfg["apply"]["column"]
        output_column = args.output_column or cfg["apply"]["output_column"]
        frame = load_values(args.input, column)
        frame[output_column] = calibrator.calibrate_many(frame[column].to_numpy(dtype=float))
        out = Path(args.output) if args.output else _default_out(Path(args.input))
        write_values(frame, out)
        logger.info("Calibrated %d values from column '%s'", len(frame), column)
        print(f"Calibrated values written to {out}")
    return 0


def _default_out(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}.calibrated.csv")
