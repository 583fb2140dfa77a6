"""
regionstats.cli — Command-line entry point.

Usage:
    regionstats
    regionstats --dir datasets -d popden,trains -a W06000011 -y 2010-2015
    regionstats -d complete-pop -m pop --json
    python -m regionstats.cli --help

Options:
    --dir           Directory (or http(s) base URL) holding the source files.
    -d/--datasets   Comma-separated dataset codes, or "all" (default).
    -a/--areas      Comma-separated area terms, or "all" (default).
    -m/--measures   Comma-separated measure codenames, or "all" (default).
    -y/--years      YYYY, YYYY-ZZZZ, or 0 / 0-0 for every year (default).
    -j/--json       Print the JSON export instead of tables.

Exit codes:
    0: Success. Individual datasets may still have failed (see stderr).
    1: The area lookup file could not be imported.
    2: Invalid arguments.
"""

from __future__ import annotations

import argparse
import logging
import re
import sys

from regionstats.areas import AreaCollection
from regionstats.datasets import DATASETS, InputFileSource, resolve_datasets
from regionstats.errors import RegionStatsError
from regionstats.filters import (
    AreaFilter,
    MeasureFilter,
    YearFilter,
    area_filter,
    measure_filter,
    year_filter,
)
from regionstats.loader import load_areas, load_datasets
from regionstats.render import export_json, render_table

logger = logging.getLogger("regionstats.cli")

EXIT_OK: int = 0
EXIT_AREAS_UNAVAILABLE: int = 1
EXIT_INVALID_ARGUMENTS: int = 2

_YEAR_RE = re.compile(r"([0-9]{4})")
_YEAR_RANGE_RE = re.compile(r"([0-9]{4})-([0-9]{4})")
_NO_YEARS = frozenset({"0", "0-0"})


def _build_parser() -> argparse.ArgumentParser:
    codes = ", ".join(ds.code for ds in DATASETS)
    parser = argparse.ArgumentParser(
        prog="regionstats",
        description="Import and summarise regional statistics datasets.",
    )
    parser.add_argument(
        "--dir",
        default="datasets",
        help="Directory or base URL for input data files (default: datasets).",
    )
    parser.add_argument(
        "-d", "--datasets",
        action="append",
        default=None,
        help=f"Dataset(s) to import, comma-separated, or 'all'. Known: {codes}.",
    )
    parser.add_argument(
        "-a", "--areas",
        action="append",
        default=None,
        help="Area(s) to import, matched against codes and names, or 'all'.",
    )
    parser.add_argument(
        "-m", "--measures",
        action="append",
        default=None,
        help="Measure codename(s) to import, or 'all'.",
    )
    parser.add_argument(
        "-y", "--years",
        default="0",
        help="A year (YYYY) or inclusive range (YYYY-ZZZZ); 0 for all years.",
    )
    parser.add_argument(
        "-j", "--json",
        action="store_true",
        dest="json_output",
        help="Print the output as JSON instead of tables.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for messages on stderr (default: WARNING).",
    )
    return parser


def split_list(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated option values."""
    items: list[str] = []
    for value in values or []:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


def parse_years(value: str) -> YearFilter:
    """Parse YYYY, YYYY-ZZZZ, 0 or 0-0.

    Raises:
        ValueError: for any other input, or a range that ends before it starts.
    """
    value = value.strip()
    if value in _NO_YEARS:
        return year_filter()

    match = _YEAR_RE.fullmatch(value)
    if match:
        year = int(match.group(1))
        return year_filter(year, year)

    match = _YEAR_RANGE_RE.fullmatch(value)
    if match:
        return year_filter(int(match.group(1)), int(match.group(2)))

    raise ValueError(f"Invalid input for years argument: {value}")


def parse_filters(args: argparse.Namespace) -> tuple[
    list[InputFileSource], AreaFilter, MeasureFilter, YearFilter
]:
    datasets = resolve_datasets(split_list(args.datasets))
    areas = area_filter(split_list(args.areas))
    measures = measure_filter(split_list(args.measures))
    years = parse_years(args.years)
    return datasets, areas, measures, years


def main(argv: list[str] | None = None) -> int:
    """Run the importer. Returns exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        datasets, areas_flt, measures_flt, years_flt = parse_filters(args)
    except ValueError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGUMENTS

    areas = AreaCollection()
    try:
        load_areas(areas, args.dir, areas_flt)
    except RegionStatsError as exc:
        logger.error("Error importing areas: %s", exc)
        return EXIT_AREAS_UNAVAILABLE

    load_datasets(areas, args.dir, datasets, areas_flt, measures_flt, years_flt)

    if args.json_output:
        print(export_json(areas))
    else:
        sys.stdout.write(render_table(areas))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
