"""Implementation of `pwlcal fit`."""

from __future__ import annotations

import argparse
from pathlib import Path

from pwlcal.calibration.fit import build_calibration_payload, write_calibration
from pwlcal.cli.common import add_table_arguments, load_calibrator, print_issues


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("fit", help="Fit segment coefficients and write them as JSON")
    add_table_arguments(parser)
    parser.add_argument("--out", default=None, help="Calibration JSON output path")
    parser.set_defaults(func=cmd_fit)


def cmd_fit(args: argparse.Namespace) -> int:
    calibrator, table, _ = load_calibrator(args)
    if not calibrator.fitted:
        print(f"Fit failed for {args.table}")
        print_issues(calibrator.report)
        return 2

    mode = "clamp" if calibrator.limit_output_to_calibration_range else "extrapolate"
    print(f"Fitted {len(calibrator.segments)} segments ({mode})")
    for seg in calibrator.segments:
        print(
            f"  [{seg.index}] {seg.raw_lo:g} .. {seg.raw_hi:g}: "
            f"m={seg.slope:.6g} b={seg.intercept:.6g}"
        )

    payload = build_calibration_payload(
        calibrator.segments,
        limit_to_range=calibrator.limit_output_to_calibration_range,
        table_path=table.source,
    )
    out = Path(args.out) if args.out else _default_out(Path(args.table))
    write_calibration(payload, out)
    print(f"Calibration written to {out}")
    return 0


def _default_out(table_path: Path) -> Path:
    return table_path.with_name(f"{table_path.stem}.calibration.json")
