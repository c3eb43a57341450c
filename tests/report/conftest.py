from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any

import pytest

from calendarbot_report.calendar.report_models import (
    AnalysisWindow,
    Individual,
    OrganizationRule,
)


@pytest.fixture
def april_window() -> AnalysisWindow:
    """Analysis window covering 2021-04-01 .. 2021-04-30 (UTC midnight bounds)."""
    return AnalysisWindow(
        start=datetime(2021, 4, 1, tzinfo=UTC),
        end=datetime(2021, 4, 30, tzinfo=UTC),
    )


@pytest.fixture
def org_rules() -> list[OrganizationRule]:
    """Organization rules in configured order (first match wins)."""
    return [
        OrganizationRule(name="Company1", email_filter="company1.com"),
        OrganizationRule(name="Customer2", email_filter="customer2.com"),
        OrganizationRule(name="Microsoft", email_filter="microsoft.com"),
        OrganizationRule(name="Apple Computer", email_filter="apple"),
    ]


@pytest.fixture
def organizer() -> Individual:
    return Individual(name="Pat Organizer", email="pat@company1.com")


@pytest.fixture
def ics_builder() -> Callable[..., str]:
    """Build a VCALENDAR document from VEVENT bodies.

    Each argument is the list of property lines of one VEVENT.
    """

    def _build(*events: list[str]) -> str:
        lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//calendarbot//report tests//EN"]
        for props in events:
            lines.append("BEGIN:VEVENT")
            lines.extend(props)
            lines.append("END:VEVENT")
        lines.append("END:VCALENDAR")
        return "\r\n".join(lines) + "\r\n"

    return _build


@pytest.fixture(autouse=True)
def clean_test_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Ensure logging env overrides don't leak in from the host."""
    monkeypatch.delenv("CALENDARBOT_DEBUG", raising=False)
    monkeypatch.delenv("CALENDARBOT_LOG_LEVEL", raising=False)
    yield
