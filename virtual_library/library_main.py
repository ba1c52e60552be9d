"""Console entry point: build a catalog, seed it and start the command loop."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import structlog

from library_catalog import LOAN_PERIOD_DAYS, PENALTY_PER_DAY, LibraryCatalog
from library_cli import CommandDispatcher
from library_errors import SeedError
import library_logging
import library_seed


logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="virtual-library",
        description="Interactive in-memory virtual library",
    )
    parser.add_argument("--seed", metavar="PATH", help="JSON file with 'books' and 'users' to load at startup")
    parser.add_argument("--no-demo", action="store_true", help="start without the built-in demo books and users")
    parser.add_argument("--loan-days", type=int, default=LOAN_PERIOD_DAYS, help="loan period in days")
    parser.add_argument("--penalty-per-day", type=int, default=PENALTY_PER_DAY, help="penalty points per overdue day")
    parser.add_argument("--log-level", default="WARNING", help="logging level (DEBUG, INFO, WARNING, ...)")
    return parser


def build_catalog(args: argparse.Namespace) -> LibraryCatalog:
    catalog = LibraryCatalog(loan_period_days=args.loan_days, penalty_per_day=args.penalty_per_day)
    if not args.no_demo:
        library_seed.load_demo_data(catalog)
    if args.seed:
        library_seed.load_seed_file(catalog, args.seed)
    return catalog


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    library_logging.configure(args.log_level)
    try:
        catalog = build_catalog(args)
    except SeedError as exc:
        logger.error("seed loading failed", code=exc.code, detail=exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    print("Library data initialized.")
    try:
        CommandDispatcher(catalog).run(input, sys.stdout)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(run())
