#!/usr/bin/env python3
"""Generate a synthetic SQL audit log file."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from sqllog_synth.config import settings
from sqllog_synth.core.generator import generate_sql_logs
from sqllog_synth.models.generator_config import GeneratorConfig, OutputFormat

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate synthetic SQL execution audit logs."
    )
    # Parsed leniently in _parse_row_count so a bad value falls back to the default.
    parser.add_argument(
        "-r",
        "--rows",
        dest="rows",
        nargs="?",
        const=None,
        default=None,
        help=f"Total rows to generate (default: {settings.DEFAULT_ROW_COUNT}).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file path (default: sql_logs.tsv, or .parquet for --format parquet).",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.TSV.value,
        help="Output file format.",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Fixed number of simulated connections (default: random 10-50).",
    )
    parser.add_argument(
        "--distribute-remainder",
        action="store_true",
        help="Give leftover rows to the first workers instead of dropping them.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: {settings.LOG_LEVEL}).",
    )
    return parser


def _parse_row_count(raw: Optional[str]) -> int:
    """Return the requested row count, or the default when absent or invalid."""
    if raw is None:
        return settings.DEFAULT_ROW_COUNT
    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            "Invalid row count %r; using default %d", raw, settings.DEFAULT_ROW_COUNT
        )
        return settings.DEFAULT_ROW_COUNT
    if value < 0:
        logger.warning(
            "Negative row count %d; using default %d", value, settings.DEFAULT_ROW_COUNT
        )
        return settings.DEFAULT_ROW_COUNT
    return value


def _default_output_path(output_format: str) -> str:
    if output_format == OutputFormat.PARQUET:
        return settings.DEFAULT_OUTPUT_PATH.rsplit(".", 1)[0] + ".parquet"
    return settings.DEFAULT_OUTPUT_PATH


def _configure_logging(level_name: Optional[str]) -> None:
    level_name = (level_name or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Translate parsed CLI arguments into a GeneratorConfig."""
    return GeneratorConfig(
        total_rows=_parse_row_count(args.rows),
        output_path=args.output or _default_output_path(args.output_format),
        output_format=args.output_format,
        workers=args.workers,
        distribute_remainder=args.distribute_remainder,
        buffer_size=settings.SINK_BUFFER_SIZE,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = build_config(args)
    except ValidationError as e:
        parser.error(str(e))

    try:
        summary = generate_sql_logs(config)
    except OSError as e:
        logger.error("Failed to write %s: %s", config.output_path, e)
        return 1
    except KeyboardInterrupt:
        print("[sqllog-synth] interrupted", file=sys.stderr)
        return 130

    print(f"SQL logs generated and saved to {summary.output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
