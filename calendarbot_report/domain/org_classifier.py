"""Organization attribution for resolved occurrences."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from re import Pattern
from typing import Optional

from calendarbot_report.calendar.report_models import (
    Classification,
    Individual,
    Occurrence,
    OrganizationRule,
)

logger = logging.getLogger(__name__)


def _matches(pattern: Optional[Pattern[str]], value: str) -> bool:
    return bool(pattern is not None and value and pattern.search(value))


def individual_matches(rule: OrganizationRule, person: Optional[Individual]) -> bool:
    """Check one participant against a rule's email and name filters."""
    if person is None:
        return False
    return _matches(rule.email_filter, person.email) or _matches(rule.name_filter, person.name)


def organizer_or_attendee_matches(rule: OrganizationRule, occurrence: Occurrence) -> bool:
    """Check whether the organizer or any attendee matches a rule."""
    if individual_matches(rule, occurrence.organizer):
        return True
    return any(individual_matches(rule, attendee) for attendee in occurrence.attendees or [])


class OrganizationClassifier:
    """Assigns at most one organization label per occurrence.

    Rules are evaluated in configured order and the first match wins.
    """

    def __init__(self, rules: Sequence[OrganizationRule]):
        self.rules = list(rules)

    def classify(self, occurrence: Occurrence) -> Optional[str]:
        """Return the name of the first matching rule, or None."""
        for rule in self.rules:
            if organizer_or_attendee_matches(rule, occurrence):
                return rule.name
        return None

    def classify_all(self, occurrences: Iterable[Occurrence]) -> list[Classification]:
        """Classify occurrences, dropping those no rule matches.

        Order of the input is preserved.
        """
        classified = []
        for occurrence in occurrences:
            organization = self.classify(occurrence)
            if organization is None:
                logger.debug(
                    "No organization matched %r at %s",
                    occurrence.subject,
                    occurrence.start_time,
                )
                continue
            classified.append(Classification(occurrence=occurrence, organization=organization))
        return classified
