"""CLI entrypoint for the race strategy simulator.

Usage::

    python main.py strategy.dsl
    python main.py --example monza
    cat strategy.dsl | python main.py -
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from race_strategy import __version__
from race_strategy.config import load_domain_tables
from race_strategy.core.advisories import sort_warnings
from race_strategy.core.simulation import SimulationResult
from race_strategy.core.tables import DEFAULT_TABLES
from race_strategy.dsl.specification import EXAMPLES
from race_strategy.pipeline import StrategyRun, run_strategy


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parse a race strategy DSL file and predict the race outcome.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        default="-",
        help="Path to a strategy DSL file, or '-' to read stdin (default).",
    )
    parser.add_argument(
        "--example",
        choices=sorted(EXAMPLES),
        help="Run a bundled example document instead of SOURCE.",
    )
    parser.add_argument(
        "--tables",
        type=Path,
        help="YAML file with domain table overrides.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    return parser


def read_source(args: argparse.Namespace) -> str:
    if args.example:
        return EXAMPLES[args.example]
    if args.source == "-":
        return sys.stdin.read()
    return Path(args.source).read_text(encoding="utf-8")


def print_report(run: StrategyRun) -> None:
    """Print diagnostics, or the prediction, stint table and advisories."""
    parse_result = run.parse_result
    for warning in parse_result.warnings:
        print(f"WARNING: {warning}")

    if run.simulation is None:
        print(f"Strategy rejected ({len(parse_result.diagnostics)} problems):")
        for diagnostic in parse_result.diagnostics:
            print(f"  {diagnostic}")
        return

    for issue in run.validation_issues:
        print(f"NOTE: {issue}")

    result: SimulationResult = run.simulation
    rng = result.predicted_position_range
    print(f"\nStrategy : {result.strategy_label}")
    print(f"Circuit  : {result.race_config.track_name}")
    print("-" * 56)
    print(f"  Predicted finish : P{result.predicted_finish_position} "
          f"(range P{rng.min}-P{rng.max})")
    print(f"  Positions gained : {result.positions_gained:+d}")
    print(f"  Race time        : {result.total_race_time:.1f} s")
    print(f"  Pit stops        : {result.total_pit_stops} "
          f"({result.total_pit_time_loss:.1f} s in pit lane)")
    print(f"  P(points)        : {result.probability_of_points:.0%}")
    print(f"  P(beat start)    : {result.probability_of_beating_start_position:.0%}")

    print(f"\n  {'Stint':>5}  {'Tire':<12}  {'Laps':>4}  {'Avg (s)':>8}  "
          f"{'Best (s)':>8}  {'Pos':>7}")
    for stint in result.stint_metrics:
        print(
            f"  {stint.stint_number:5d}  {stint.tire_compound.value:<12}  "
            f"{stint.total_laps:4d}  {stint.avg_lap_time:8.3f}  "
            f"{stint.best_lap_time:8.3f}  "
            f"P{stint.start_position}->P{stint.end_position}"
        )

    print("\nAdvisories:")
    for warning in sort_warnings(result.warnings):
        print(f"  [{warning.severity.value.upper():8}] "
              f"{warning.category.value}: {warning.message}")

    print(f"\nRace profile: {result.race_profile.overtaking_chance_summary}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code.

    Exit codes: 0 on success, 1 when the strategy is rejected, 2 when the
    source cannot be read.
    """
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    tables = load_domain_tables(args.tables) if args.tables else DEFAULT_TABLES

    print(f"Race Strategy Simulator v{__version__}")
    print("=" * 56)

    try:
        text = read_source(args)
    except OSError as exc:
        print(f"error: cannot read {args.source}: {exc.strerror}", file=sys.stderr)
        return 2

    run = run_strategy(text, tables=tables)
    print_report(run)
    return 0 if run.success else 1


if __name__ == "__main__":
    sys.exit(main())
