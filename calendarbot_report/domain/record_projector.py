"""Projection of classified occurrences into flat report rows."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import tzinfo
from typing import Optional

from calendarbot_report.calendar.report_datetime_utils import format_start
from calendarbot_report.calendar.report_models import (
    RECURRING_LABEL,
    UNCLASSIFIED_LABEL,
    Classification,
    Individual,
    OutputRecord,
)

logger = logging.getLogger(__name__)


class RecordProjector:
    """Maps classified occurrences to OutputRecords."""

    def __init__(
        self,
        skip_email_addresses: Iterable[str] = (),
        timezone: Optional[tzinfo] = None,
    ):
        """Initialize projector.

        Args:
            skip_email_addresses: Attendee emails left out of the attendee column
            timezone: Zone used to render start times (the occurrence's own when None)
        """
        self.skip_email_addresses = frozenset(skip_email_addresses)
        self.timezone = timezone

    def attendee_names(self, attendees: Optional[list[Individual]]) -> str:
        """Join attendee display names, leaving out skipped addresses."""
        if not attendees:
            return ""
        return ", ".join(
            attendee.name
            for attendee in attendees
            if attendee.email not in self.skip_email_addresses
        )

    def project(self, classification: Classification) -> OutputRecord:
        occurrence = classification.occurrence
        return OutputRecord(
            organization=classification.organization or UNCLASSIFIED_LABEL,
            recurrence=RECURRING_LABEL if occurrence.is_recurring else "",
            start=format_start(occurrence.start_time, self.timezone),
            duration_minutes=occurrence.duration.minutes,
            subject=occurrence.subject,
            organizer=occurrence.organizer.name if occurrence.organizer else "",
            attendees=self.attendee_names(occurrence.attendees),
        )

    def project_all(self, classifications: Iterable[Classification]) -> list[OutputRecord]:
        return [self.project(classification) for classification in classifications]
