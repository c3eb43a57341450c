"""Command-line entry for calendarbot_report."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Optional

from . import run_report
from .config_loader import load_config
from .report_exceptions import ReportError
from .report_logging import configure_report_logging, init_logging

logger = logging.getLogger("calendarbot_report")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for calendarbot_report CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="calendarbot_report",
        description="Summarize calendar time per organization as CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m calendarbot_report --config report.yaml
  python -m calendarbot_report --ics calendar.ics --start 2021-03-01 --end 2021-07-02
        """,
    )
    parser.add_argument("--config", metavar="PATH", help="YAML config file")
    parser.add_argument("--ics", metavar="PATH", help="iCalendar export to read")
    parser.add_argument("--output", metavar="PATH", help="CSV report to write")
    parser.add_argument("--debug-json", metavar="PATH", help="Write all occurrences as JSON")
    parser.add_argument("--start", metavar="DATE", help="Analysis window start")
    parser.add_argument("--end", metavar="DATE", help="Analysis window end")
    parser.add_argument("--timezone", metavar="TZ", help="IANA timezone (default: UTC)")
    parser.add_argument("--log-level", metavar="LEVEL", help="Logging level (default: INFO)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Run the calendarbot_report CLI."""
    args = _create_parser().parse_args(argv)
    init_logging(args.log_level or "INFO")

    overrides = {
        "ics_source_file": args.ics,
        "output_csv": args.output,
        "debug_json": args.debug_json,
        "window_start": args.start,
        "window_end": args.end,
        "timezone": args.timezone,
        "log_level": args.log_level,
    }

    try:
        config = load_config(args.config, overrides)
        init_logging(config.log_level)
        configure_report_logging(debug_mode=args.debug or config.log_level == "DEBUG")
        run_report(config)
    except ReportError as e:
        logger.error("%s", e)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
