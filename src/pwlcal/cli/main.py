"""Main CLI entrypoint."""

from __future__ import annotations

import argparse
import sys

from pwlcal.cli import apply, fit, plot, validate
from pwlcal.core.logging import setup_logging
from pwlcal.core.versioning import package_version


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pwlcal", description="Piecewise-linear calibration toolkit")
    subparsers = parser.add_subparsers(dest="command")

    validate.register(subparsers)
    fit.register(subparsers)
    apply.register(subparsers)
    plot.register(subparsers)

    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {package_version()}")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=getattr(args, "verbose", False))

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        print("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
