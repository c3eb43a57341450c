"""Report pipeline for calendarbot_report.

Composes the report components in a fixed order:

    raw events -> OccurrenceResolver -> OrganizationClassifier -> RecordProjector

Each component can be used on its own; the pipeline only wires them and
collects statistics. Everything runs synchronously in a single pass.

Usage:
    pipeline = ReportPipeline(window, rules, skip_email_addresses=["me@example.com"])
    result = pipeline.run(raw_events)
    for record in result.records:
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Optional

from calendarbot_report.calendar.report_models import (
    AnalysisWindow,
    Classification,
    Occurrence,
    OrganizationRule,
    OutputRecord,
    RawEvent,
)
from calendarbot_report.domain.occurrence_resolver import OccurrenceResolver
from calendarbot_report.domain.org_classifier import OrganizationClassifier
from calendarbot_report.domain.record_projector import RecordProjector
from calendarbot_report.report_exceptions import RecurrenceExpansionError

logger = logging.getLogger(__name__)


@dataclass
class ReportResult:
    """Result of a pipeline run.

    ``occurrences`` holds every occurrence in the window before
    classification (the debug dump); ``records`` holds the report rows.
    """

    occurrences: list[Occurrence] = field(default_factory=list)
    classified: list[Classification] = field(default_factory=list)
    records: list[OutputRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    # Statistics
    events_in: int = 0
    events_skipped: int = 0

    @property
    def occurrences_out(self) -> int:
        return len(self.occurrences)

    @property
    def records_out(self) -> int:
        return len(self.records)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)
        logger.warning("%s", message)


class ReportPipeline:
    """Runs the resolve, classify and project stages over raw events."""

    def __init__(
        self,
        window: AnalysisWindow,
        rules: Sequence[OrganizationRule],
        skip_email_addresses: Iterable[str] = (),
        timezone: Optional[tzinfo] = None,
    ) -> None:
        self.resolver = OccurrenceResolver(window)
        self.classifier = OrganizationClassifier(rules)
        self.projector = RecordProjector(skip_email_addresses, timezone)

    @property
    def window(self) -> AnalysisWindow:
        return self.resolver.window

    def expand(self, raw_events: Iterable[RawEvent], result: ReportResult) -> list[Occurrence]:
        """Resolve all events, keeping raw-event order.

        Series whose recurrence rule cannot be expanded are skipped with a
        warning.
        """
        occurrences: list[Occurrence] = []
        for raw_event in raw_events:
            result.events_in += 1
            try:
                occurrences.extend(self.resolver.resolve(raw_event))
            except RecurrenceExpansionError as e:
                result.events_skipped += 1
                result.add_warning(f"Skipping event {raw_event.uid or raw_event.subject!r}: {e}")
        return occurrences

    def run(self, raw_events: Iterable[RawEvent]) -> ReportResult:
        """Execute all stages in sequence.

        Args:
            raw_events: Events from the calendar reader, in source order

        Returns:
            ReportResult with occurrences, classifications and rows
        """
        result = ReportResult()

        result.occurrences = self.expand(raw_events, result)
        logger.debug(
            "Expanded %d events into %d occurrences", result.events_in, result.occurrences_out
        )

        result.classified = self.classifier.classify_all(result.occurrences)
        logger.debug(
            "Classified %d of %d occurrences", len(result.classified), result.occurrences_out
        )

        result.records = self.projector.project_all(result.classified)
        result.metadata["window_start"] = self.window.start.isoformat()
        result.metadata["window_end"] = self.window.end.isoformat()
        return result


def run_pipeline(
    raw_events: Iterable[RawEvent],
    window: AnalysisWindow,
    rules: Sequence[OrganizationRule],
    skip_email_addresses: Iterable[str] = (),
    timezone: Optional[tzinfo] = None,
) -> ReportResult:
    """Build a ReportPipeline and run it over raw events."""
    return ReportPipeline(window, rules, skip_email_addresses, timezone).run(raw_events)
