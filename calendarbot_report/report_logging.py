"""
Central logging configuration for calendarbot_report.

Sets up a colorized console handler and quiets third-party loggers while
keeping calendarbot_report diagnostics visible.
"""

import logging
import os
import sys
from typing import Optional

from colorlog import ColoredFormatter

# HH:MM:SS  LEVEL   logger.name: message
LOG_FORMAT = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}

REPORT_MODULES = [
    "calendarbot_report",
    "calendarbot_report.calendar.report_ics_reader",
    "calendarbot_report.domain.occurrence_resolver",
    "calendarbot_report.domain.org_classifier",
    "calendarbot_report.domain.pipeline",
]

NOISY_LOGGERS = {
    "icalendar": logging.WARNING,
    "dateutil": logging.WARNING,
}


def _env_debug() -> bool:
    return os.getenv("CALENDARBOT_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to stderr.

    Only installs a handler when none is present, so repeated calls and
    test harness handlers are left alone. CALENDARBOT_DEBUG forces DEBUG.
    """
    if _env_debug():
        level_name = "DEBUG"

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt="%H:%M:%S", log_colors=LOG_COLORS))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def configure_report_logging(debug_mode: bool = False, force_debug: Optional[bool] = None) -> None:
    """
    Configure logger levels for calendarbot_report.

    Args:
        debug_mode: Whether to enable debug logging for calendarbot_report modules
        force_debug: Override debug mode setting (None to use env var detection)

    Environment Variables:
        CALENDARBOT_DEBUG: Set to '1', 'true', 'yes' to force debug logging
        CALENDARBOT_LOG_LEVEL: Override root log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_log_level = os.getenv("CALENDARBOT_LOG_LEVEL", "").upper()

    if force_debug is not None:
        final_debug = force_debug
    elif _env_debug():
        final_debug = True
    else:
        final_debug = debug_mode

    root_logger = logging.getLogger()
    if env_log_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        root_logger.setLevel(getattr(logging, env_log_level))
    elif final_debug:
        root_logger.setLevel(logging.DEBUG)

    logger_config: dict[str, int] = dict(NOISY_LOGGERS)
    module_level = logging.DEBUG if final_debug else logging.INFO
    for module in REPORT_MODULES:
        logger_config[module] = module_level

    for logger_name, level in logger_config.items():
        logging.getLogger(logger_name).setLevel(level)


def get_logging_status() -> dict[str, str]:
    """
    Get current logging configuration status.

    Returns:
        Dictionary mapping logger names to their current levels
    """
    status = {"root": logging.getLevelName(logging.getLogger().level)}
    for logger_name in [*REPORT_MODULES, *NOISY_LOGGERS]:
        status[logger_name] = logging.getLevelName(logging.getLogger(logger_name).level)
    return status
