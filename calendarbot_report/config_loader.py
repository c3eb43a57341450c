"""calendarbot_report.config_loader

Config loader for calendarbot_report.

- Reads a YAML mapping (JSON files load too, as JSON is valid YAML).
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
- Window bounds and organization rules are validated eagerly so a bad
  config aborts the run before the calendar is read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from calendarbot_report.calendar.report_datetime_utils import (
    parse_datetime_value,
    resolve_timezone,
)
from calendarbot_report.calendar.report_models import AnalysisWindow, OrganizationRule
from calendarbot_report.report_exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("calendarbot_report.yaml")


@dataclass
class Config:
    """Typed configuration for calendarbot_report.

    Fields:
        window_start: start of the analysis window (aware datetime)
        window_end: end of the analysis window (aware datetime)
        ics_source_file: iCalendar export to read
        output_csv: CSV report to write
        debug_json: optional path for the pre-filter occurrence dump
        timezone_name: IANA zone for floating times, window dates and output
        organizations: ordered organization rules, first match wins
        skip_email_addresses: attendee addresses left out of the report
        log_level: logging level name
    """

    window_start: datetime
    window_end: datetime
    ics_source_file: str = "calendar.ics"
    output_csv: str = "calendar.csv"
    debug_json: str | None = None
    timezone_name: str = "UTC"
    organizations: list[OrganizationRule] = field(default_factory=list)
    skip_email_addresses: list[str] = field(default_factory=list)
    log_level: str = "INFO"

    @property
    def timezone(self) -> tzinfo:
        return resolve_timezone(self.timezone_name)

    @property
    def window(self) -> AnalysisWindow:
        return AnalysisWindow(start=self.window_start, end=self.window_end)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Raises:
            ConfigurationError: If the window, timezone or rules are invalid
        """
        if data is None:
            data = {}

        timezone_name = str(data.get("timezone") or "UTC")
        try:
            tz = resolve_timezone(timezone_name)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        def _window_bound(key: str) -> datetime:
            raw = data.get(key)
            if raw is None or raw == "":
                raise ConfigurationError(f"Config is missing required `{key}`")
            try:
                return parse_datetime_value(raw, tz)
            except ValueError as e:
                raise ConfigurationError(f"Config {key}={raw!r} is not a valid date") from e

        window_start = _window_bound("window_start")
        window_end = _window_bound("window_end")
        if not window_start < window_end:
            raise ConfigurationError(
                f"window_start {window_start} must be before window_end {window_end}"
            )

        organizations = _parse_organizations(data.get("organizations"))

        skip_raw = data.get("skip_email_addresses") or []
        if not isinstance(skip_raw, (list, tuple)):
            logger.warning("Config `skip_email_addresses` is not a list; coercing to single-item list")
            skip_raw = [skip_raw]
        skip_email_addresses = [str(address) for address in skip_raw]

        debug_json = data.get("debug_json")
        log_level = data.get("log_level", "INFO")
        log_level = str(log_level).upper() if log_level is not None else "INFO"

        return cls(
            window_start=window_start,
            window_end=window_end,
            ics_source_file=str(data.get("ics_source_file") or "calendar.ics"),
            output_csv=str(data.get("output_csv") or "calendar.csv"),
            debug_json=str(debug_json) if debug_json else None,
            timezone_name=timezone_name,
            organizations=organizations,
            skip_email_addresses=skip_email_addresses,
            log_level=log_level,
        )


def _parse_organizations(raw: Any) -> list[OrganizationRule]:
    if raw is None:
        logger.warning("Config has no `organizations`; every occurrence will be filtered out")
        return []
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError("Config `organizations` must be a list")

    rules = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Organization #{index + 1} must be a mapping")
        try:
            rules.append(OrganizationRule.model_validate(entry))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid organization #{index + 1}: {e}") from e
        if rules[-1].email_filter is None and rules[-1].name_filter is None:
            logger.warning("Organization %r has no email_filter or name_filter", rules[-1].name)
    return rules


def _load_yaml(path: Path) -> Any:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Unable to parse config {path}: {e}") from e
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config(path: str | Path | None = None, overrides: dict[str, Any] | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to
              ./calendarbot_report.yaml (relative to current working dir).
        overrides: Values taking precedence over the file (e.g. CLI flags);
                   None values are ignored.

    Returns:
        Config dataclass instance

    Raises:
        ConfigurationError: If an explicitly given file is missing, the
            top level is not a mapping, or values fail validation.
    """
    p = Path(path) if path else DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    raw: Any = {}
    if p.exists():
        raw = _load_yaml(p)
        if not isinstance(raw, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
            raise ConfigurationError("Config file must contain a mapping at top level")
        logger.info("Loaded configuration from %s", p)
    elif path:
        raise ConfigurationError(f"Config file {p} not found")
    else:
        logger.info("Config file %s not found; using command line values only", p)

    merged = dict(raw)
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    cfg = Config.from_dict(merged)
    logger.debug("Configuration values: %s", cfg)
    return cfg
