"""Recurrence expansion and occurrence resolution for calendar reports.

Turns one RawEvent into the occurrences that intersect the analysis window.
For a series, candidate start dates come from two places:

1. the recurrence rule (RRULE/RDATE), enumerated inside the window with
   both bounds inclusive, and
2. the override keys (RECURRENCE-ID days) lying outside the window, since an
   instance may have been moved from outside the window to inside it.

Each candidate is then resolved against the overrides first and the
exception dates second, both looked up by calendar day, and clipped to the
window once its final start and end are known.
"""

import logging
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

from dateutil.rrule import rruleset, rrulestr

from calendarbot_report.calendar.report_datetime_utils import calendar_day, day_start_utc
from calendarbot_report.calendar.report_models import (
    AnalysisWindow,
    Occurrence,
    Participants,
    RawEvent,
)
from calendarbot_report.calendar.report_participant_parser import extract_participants
from calendarbot_report.report_exceptions import RecurrenceExpansionError

logger = logging.getLogger(__name__)


class ResolvedInstance(NamedTuple):
    """Subject, start and duration chosen for one candidate date."""

    subject: str
    start: datetime
    duration: timedelta


class OccurrenceResolver:
    """Expands raw events into occurrences confined to an analysis window.

    The resolver holds no state besides the window, so resolving the same
    event twice yields the same sequence.
    """

    def __init__(self, window: AnalysisWindow):
        """Initialize resolver.

        Args:
            window: Analysis window shared by the whole run
        """
        self.window = window

    def resolve(self, raw_event: RawEvent) -> list[Occurrence]:
        """Expand one raw event into its occurrences inside the window.

        Args:
            raw_event: Event as produced by the calendar reader

        Returns:
            Occurrences in chronological candidate order (possibly empty)

        Raises:
            RecurrenceExpansionError: If the recurrence rule cannot be parsed
        """
        participants = extract_participants(raw_event.organizer, raw_event.attendees)
        if raw_event.is_recurring:
            return self._resolve_series(raw_event, participants)
        return self._resolve_single(raw_event, participants)

    def _resolve_single(self, raw_event: RawEvent, participants: Participants) -> list[Occurrence]:
        duration = raw_event.end - raw_event.start
        start = raw_event.start
        end = start + duration

        if self.window.excludes(start, end):
            logger.debug("Event %r outside analysis window, skipping", raw_event.subject)
            return []

        return [self._occurrence(raw_event.subject, start, end, False, participants)]

    def _resolve_series(self, raw_event: RawEvent, participants: Participants) -> list[Occurrence]:
        base_duration = raw_event.end - raw_event.start
        candidates = self.collect_candidates(raw_event)

        occurrences = []
        for candidate in candidates:
            resolved = self.resolve_candidate(raw_event, candidate, base_duration)
            if resolved is None:
                continue

            end = resolved.start + resolved.duration
            if self.window.excludes(resolved.start, end):
                logger.debug(
                    "Recurrence of %r at %s falls outside analysis window",
                    raw_event.subject,
                    resolved.start,
                )
                continue

            occurrences.append(
                self._occurrence(resolved.subject, resolved.start, end, True, participants)
            )

        logger.debug(
            "Resolved series %r: %d candidates -> %d occurrences",
            raw_event.subject,
            len(candidates),
            len(occurrences),
        )
        return occurrences

    def enumerate_rule_dates(self, raw_event: RawEvent) -> list[datetime]:
        """Enumerate the rule's start dates inside the window (bounds inclusive).

        Raises:
            RecurrenceExpansionError: If python-dateutil rejects the RRULE
        """
        rule_set = rruleset()
        if raw_event.recurrence_rule:
            try:
                rule_set = rrulestr(
                    raw_event.recurrence_rule, dtstart=raw_event.start, forceset=True
                )
            except (ValueError, TypeError) as e:
                raise RecurrenceExpansionError(
                    f"Invalid RRULE {raw_event.recurrence_rule!r} for {raw_event.subject!r}: {e}"
                ) from e
        else:
            # DTSTART is always the first instance of an RDATE-only series
            rule_set.rdate(raw_event.start)

        for rdate in raw_event.recurrence_dates:
            rule_set.rdate(rdate)

        try:
            return list(rule_set.between(self.window.start, self.window.end, inc=True))
        except (ValueError, TypeError) as e:
            raise RecurrenceExpansionError(
                f"Failed to expand recurrence of {raw_event.subject!r}: {e}"
            ) from e

    def collect_candidates(self, raw_event: RawEvent) -> list[datetime]:
        """Build the de-duplicated, chronologically ordered candidate dates.

        Override days whose midnight lies strictly inside the window are not
        added, the rule already produced them. An override day that already
        has a candidate is not added twice.
        """
        candidates = self.enumerate_rule_dates(raw_event)
        seen_days = {calendar_day(candidate) for candidate in candidates}

        for day in raw_event.recurrence_overrides:
            candidate = day_start_utc(day)
            if self.window.contains(candidate) or day in seen_days:
                continue
            seen_days.add(day)
            candidates.append(candidate)

        return sorted(candidates)

    def resolve_candidate(
        self,
        raw_event: RawEvent,
        candidate: datetime,
        base_duration: timedelta,
    ) -> Optional[ResolvedInstance]:
        """Apply override, exception and default rules to one candidate date.

        Returns:
            The resolved instance, or None when an exception date cancels it
        """
        key = calendar_day(candidate)

        override = raw_event.recurrence_overrides.get(key)
        if override is not None:
            return ResolvedInstance(override.subject, override.start, override.end - override.start)

        if key in raw_event.exception_dates:
            logger.debug("Recurrence of %r on %s cancelled by EXDATE", raw_event.subject, key)
            return None

        return ResolvedInstance(raw_event.subject, candidate, base_duration)

    @staticmethod
    def _occurrence(
        subject: str,
        start: datetime,
        end: datetime,
        is_recurring: bool,
        participants: Participants,
    ) -> Occurrence:
        return Occurrence(
            subject=subject,
            start_time=start,
            end_time=end,
            is_recurring=is_recurring,
            organizer=participants.organizer,
            attendees=participants.attendees,
        )


def resolve_occurrences(raw_event: RawEvent, window: AnalysisWindow) -> list[Occurrence]:
    """Convenience wrapper around OccurrenceResolver.resolve."""
    return OccurrenceResolver(window).resolve(raw_event)
