"""Command-line entry point: read a config and an event log, write both reports.

Usage:
  biathlon-report config.json events \\
      --log-output output_log.txt \\
      --results-output result_table.txt
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .errors import ConfigError
from .events import read_events
from .race import run_race
from .ranking import compute_results, format_results
from .validation import load_config

logger = logging.getLogger(__name__)


def _write_lines(path: Path, lines: Iterable[str]) -> None:
    with path.open("w", encoding="utf-8") as fh:
        for line in lines:
            fh.write(line + "\n")


def _echo(title: str, lines: Sequence[str]) -> None:
    print(title)
    for line in lines:
        print(line)
    print(f"End {title}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="biathlon-report",
        description="Replay a biathlon event log and produce the results table",
    )
    ap.add_argument("config", help="Race configuration JSON file")
    ap.add_argument("events", help="Event log file, one event per line")
    ap.add_argument(
        "--log-output", default="output_log.txt", help="Narrative log output path"
    )
    ap.add_argument(
        "--results-output", default="result_table.txt", help="Results table output path"
    )
    ap.add_argument("--quiet", action="store_true", help="Do not echo reports to stdout")
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (ConfigError, OSError) as e:
        print(f"error loading configuration: {e}", file=sys.stderr)
        return 1

    try:
        with open(args.events, encoding="utf-8") as fh:
            events = read_events(fh)
    except OSError as e:
        print(f"error reading events file: {e}", file=sys.stderr)
        return 1

    logger.debug(f"Loaded {len(events)} events from {args.events}")
    state = run_race(events, config)
    rows = format_results(compute_results(state.competitors.values(), config))

    if not args.quiet:
        _echo("Output Log", state.log)
        print()
        _echo("Resulting Table", rows)

    try:
        _write_lines(Path(args.log_output), state.log)
        _write_lines(Path(args.results_output), rows)
    except OSError as e:
        print(f"error writing output: {e}", file=sys.stderr)
        return 1
    return 0
