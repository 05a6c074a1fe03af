"""Command-line entry point: render the whole target catalog.

Pipeline:
    1. Parse arguments and configure logging
    2. Build the static configuration (CLI flags override single fields)
    3. Resolve the job selection (size class, patterns)
    4. Build the transfer LUTs (once, before any job runs)
    5. Run the scheduler, optionally restricted to one size class

Exit codes:
    0  success
    1  fatal I/O failure (an output could not be written)
    2  invalid configuration or selection

Any other failure inside a worker aborts the run and propagates with its
traceback.

CLI:
    make-targets                      # every size class
    make-targets tvx2                 # one size class
    make-targets tv --mode dither --patterns rings,check --densities 10,30
    make-targets --list
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from maketargets.patterns.registry import PATTERNS
from maketargets.scheduler import RenderScheduler, enumerate_jobs
from maketargets.utils import fs, validators
from maketargets.utils.color import build_luts
from maketargets.utils.logging_config import setup_logging, shutdown

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _csv(cast):
    def parse(value: str):
        try:
            return tuple(cast(v.strip()) for v in value.split(",") if v.strip())
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e)) from e
    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="make-targets",
        description="Render procedural display test targets as 16-bit PNGs",
    )
    parser.add_argument(
        "size_class",
        nargs="?",
        default=None,
        help="Render only this size class (default: all)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for rendered files (default: current directory)",
    )
    parser.add_argument(
        "--mode",
        choices=["clamp", "dither", "none"],
        default=None,
        help="Post-process variant for continuous-tone patterns (default: clamp)",
    )
    parser.add_argument(
        "--patterns",
        type=_csv(str),
        default=None,
        help="Comma-separated pattern names (default: all)",
    )
    parser.add_argument(
        "--densities",
        type=_csv(int),
        default=None,
        help="Comma-separated densities (default: 2,5,10,30,60,120,480)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads (default: CPU count)",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        default=None,
        help="Write manifest.yaml with SHA-256 of every output",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List size classes and patterns, then exit",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--json-logs", action="store_true", help="JSON line log format")
    parser.add_argument("--no-color", action="store_true", help="Plain console log levels")
    return parser


def _print_catalog(config: validators.RenderConfig) -> None:
    print("Size classes:")
    for sc in config.size_classes:
        print(f"  {sc.name:8s} {sc.width}x{sc.height}")
    print("Patterns:")
    for p in PATTERNS.values():
        print(f"  {p.name:20s} {p.family.value:9s} density = {p.density_meaning}")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level=args.log_level,
        log_file=args.log_file,
        json=args.json_logs,
        color=not args.no_color,
        context={"app": "maketargets"},
    )

    try:
        config = validators.default_config(
            output_dir=args.output_dir,
            postprocess_mode=args.mode,
            patterns=args.patterns,
            densities=args.densities,
            workers=args.workers,
            manifest=args.manifest,
        )
    except ValidationError as e:
        logger.error("Invalid configuration:\n%s", e)
        return 2

    if args.list:
        _print_catalog(config)
        return 0

    # Selection errors are reported before any rendering starts
    try:
        enumerate_jobs(config, args.size_class)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    luts = build_luts()
    scheduler = RenderScheduler(config, luts)
    try:
        scheduler.run(only=args.size_class)
    except fs.PersistenceError as e:
        logger.critical("Fatal I/O error: %s", e)
        return 1
    finally:
        shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
