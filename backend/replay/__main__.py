"""CLI entry point for replaying recorded prices.

Usage:
    python -m replay prices.csv
    python -m replay prices.csv --preset strict --simulate
    python -m replay prices.csv --policy level-comparison --start-balance 5000 -o out.json
    python -m replay prices.csv --config overlay.yaml --entity example.com
"""

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from signal_core.models import PRESETS, CrossoverPolicy, EngineConfig

from replay.report import ReportFormatter
from replay.runner import DEFAULT_INTERVAL_MS, ReplayRunner, load_prices_csv

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay a recorded price series through the signal engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m replay prices.csv
  python -m replay prices.csv --preset strict --simulate
  python -m replay prices.csv --policy level-comparison -o out.json
        """,
    )
    parser.add_argument("csv_path", type=Path, help="CSV with timestamp,value rows")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS.keys()),
        default="classic",
        help="Engine preset (default: classic)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="overlay.yaml to take the engine config from (overrides --preset)",
    )
    parser.add_argument(
        "--entity",
        type=str,
        default=None,
        help="Entity key whose overrides to apply from --config",
    )
    parser.add_argument(
        "--policy",
        choices=[p.value for p in CrossoverPolicy],
        default=None,
        help="Crossover policy override",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Run the paper-trading simulator",
    )
    parser.add_argument(
        "--start-balance",
        type=float,
        default=None,
        help="Simulator start balance",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=DEFAULT_INTERVAL_MS,
        help=f"Spacing for rows without a timestamp (default: {DEFAULT_INTERVAL_MS})",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output file path for JSON results",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EngineConfig:
    """Resolve preset/config file plus CLI overrides into an EngineConfig."""
    if args.config is not None:
        from signal_app.overlay_config import load_overlay_config

        overlay = load_overlay_config(args.config)
        base = overlay.config_for(args.entity) if args.entity else overlay.get_engine_config()
    else:
        base = PRESETS[args.preset]

    updates: dict = {}
    if args.policy is not None:
        updates["crossover_policy"] = args.policy
    if args.simulate:
        updates["simulate_trading"] = True
    if args.start_balance is not None:
        updates["sim_start_balance"] = args.start_balance
    return EngineConfig(**{**base.model_dump(), **updates})


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = build_config(args)
    except (ValidationError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if not args.csv_path.exists():
        logger.error(f"File not found: {args.csv_path}")
        return 1

    samples = load_prices_csv(args.csv_path)
    result = ReplayRunner(config, interval_ms=args.interval_ms).run(samples)

    ReportFormatter.print_console(result)
    if args.output:
        ReportFormatter.save_json(result, args.output)
        logger.info(f"Results written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
