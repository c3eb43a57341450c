"""iCalendar input and data models for calendar reports."""

from .report_ics_reader import ReportICSReader, parse_calendar, read_calendar_file
from .report_models import (
    AnalysisWindow,
    Classification,
    EventDuration,
    Individual,
    Occurrence,
    OrganizationRule,
    OutputRecord,
    RawEvent,
)
from .report_participant_parser import extract_participants

__all__ = [
    "AnalysisWindow",
    "Classification",
    "EventDuration",
    "Individual",
    "Occurrence",
    "OrganizationRule",
    "OutputRecord",
    "RawEvent",
    "ReportICSReader",
    "extract_participants",
    "parse_calendar",
    "read_calendar_file",
]
