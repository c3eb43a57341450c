"""Batch report run: read the calendar, run the pipeline, write the outputs."""

from __future__ import annotations

import logging

from calendarbot_report.calendar.report_ics_reader import read_calendar_file
from calendarbot_report.config_loader import Config
from calendarbot_report.domain.pipeline import ReportPipeline, ReportResult
from calendarbot_report.output.report_writer import write_csv_report, write_debug_json

logger = logging.getLogger(__name__)


def build_report(config: Config) -> ReportResult:
    """Produce the CSV report (and optional debug JSON) described by config.

    The calendar is read and fully processed before anything is written, so
    a read failure leaves no partial output behind.

    Raises:
        CalendarSourceError: If the calendar file cannot be read or parsed
        OutputWriteError: If the CSV or debug JSON file cannot be written
    """
    tz = config.timezone
    raw_events = read_calendar_file(config.ics_source_file, tz)

    pipeline = ReportPipeline(
        window=config.window,
        rules=config.organizations,
        skip_email_addresses=config.skip_email_addresses,
        timezone=tz,
    )
    result = pipeline.run(raw_events)
    logger.info(
        "Parsed %d iCal entries from %s.", result.occurrences_out, config.ics_source_file
    )

    write_csv_report(config.output_csv, result.records)
    if config.debug_json:
        write_debug_json(config.debug_json, result.occurrences)

    if result.warnings:
        logger.warning("Report finished with %d warnings", len(result.warnings))
    return result
