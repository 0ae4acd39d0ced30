"""Implementation of `pwlcal plot`."""

from __future__ import annotations

import argparse

from pwlcal.cli.common import add_table_arguments, load_calibrator, print_issues
from pwlcal.viz.plots import plot_calibration


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("plot", help="Plot the fitted calibration curve")
    add_table_arguments(parser)
    parser.add_argument("--out", required=True, help="Output image path (.png)")
    parser.add_argument("--title", default=None, help="Figure title")
    parser.set_defaults(func=cmd_plot)


def cmd_plot(args: argparse.Namespace) -> int:
    calibrator, _, cfg = load_calibrator(args)
    if not calibrator.fitted:
        print(f"Fit failed for {args.table}")
        print_issues(calibrator.report)
        return 2

    out = plot_calibration(
        calibrator,
        args.out,
        margin_frac=float(cfg["plot"]["margin_frac"]),
        n_samples=int(cfg["plot"]["n_samples"]),
        title=args.title,
    )
    print(f"Plot written to {out}")
    return 0
