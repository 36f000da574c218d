"""
Command-line entry point.

Usage:
    # Check a fixture file (rates as plain fractions)
    nanomoney check fixtures.csv

    # Rates written as percentages (15.11 for 15.11%)
    nanomoney check fixtures.csv --percent

    # Generate a fixture grid: amounts 7.00..19.99, rates 15.10%..15.99%
    nanomoney generate fixtures.csv --amount-start 700 --amount-stop 2000
"""

from __future__ import annotations
from typing import Dict, List, Optional
import argparse
import logging
import sys

from pydantic import ValidationError

from .fixtures import (
    check_fixtures,
    generate_fixtures,
    read_fixtures,
    write_fixtures,
)
from .settings import RunnerConfig


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nanomoney",
        description="Check or generate regression fixtures for Money multiplication.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: NANOMONEY_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Run every row of a fixture CSV")
    check.add_argument("path", help="CSV file with amount,rate,expected rows")
    check.add_argument(
        "--percent",
        action="store_true",
        default=None,
        help="Rates are percentages and are shifted two places before use",
    )
    check.add_argument(
        "--no-fail",
        action="store_true",
        help="Exit 0 even when rows mismatch, fail or are malformed",
    )

    generate = subparsers.add_parser("generate", help="Write a fixture grid")
    generate.add_argument("path", help="Output CSV file")
    generate.add_argument("--amount-start", type=int, default=700, help="First amount, in cents")
    generate.add_argument("--amount-stop", type=int, default=2000, help="Amount upper bound (exclusive)")
    generate.add_argument("--rate-start", type=int, default=1510, help="First rate, in hundredths of a percent")
    generate.add_argument("--rate-stop", type=int, default=1600, help="Rate upper bound (exclusive)")

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, object]:
    """Settings given on the command line; they take precedence over the environment."""
    overrides: Dict[str, object] = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if getattr(args, "percent", False):
        overrides["percent_rates"] = True
    if getattr(args, "no_fail", False):
        overrides["fail_on_mismatch"] = False
    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    log_format = "%(asctime)s [%(levelname)s] %(message)s"
    try:
        config = RunnerConfig(**_overrides(args))
    except ValidationError as e:
        logging.basicConfig(format=log_format)
        logger.error("Invalid configuration: %s", e)
        return 2

    logging.basicConfig(
        level=config.log_level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "generate":
        rows = generate_fixtures(
            range(args.amount_start, args.amount_stop),
            range(args.rate_start, args.rate_stop),
        )
        write_fixtures(args.path, rows)
        return 0

    try:
        report = check_fixtures(read_fixtures(args.path, percent_rates=config.percent_rates))
    except OSError as e:
        logger.error("Cannot read fixtures: %s", e)
        return 2

    if report.ok or not config.fail_on_mismatch:
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
