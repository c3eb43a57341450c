"""
Unit tests for calendarbot_report.domain.record_projector.RecordProjector
"""

from datetime import UTC, datetime

import pytest

from calendarbot_report.calendar.report_datetime_utils import resolve_timezone
from calendarbot_report.calendar.report_models import Classification, Individual, Occurrence
from calendarbot_report.domain.record_projector import RecordProjector

pytestmark = [pytest.mark.unit, pytest.mark.fast]


@pytest.fixture
def meeting(organizer) -> Occurrence:
    return Occurrence(
        subject="Planning",
        start_time=datetime(2021, 4, 6, 9, 0, tzinfo=UTC),
        end_time=datetime(2021, 4, 6, 10, 30, tzinfo=UTC),
        is_recurring=True,
        organizer=organizer,
        attendees=[
            Individual(name="Me", email="me@apple.com"),
            Individual(name="Ann", email="ann@customer2.com"),
            Individual(name="Bob", email="bob@customer2.com"),
        ],
    )


def test_project_fills_all_columns(meeting: Occurrence) -> None:
    projector = RecordProjector(skip_email_addresses=["me@apple.com"])

    record = projector.project(Classification(occurrence=meeting, organization="Customer2"))

    assert record.to_row() == [
        "Customer2",
        "Recurring",
        "2021-04-06 09:00",
        "90",
        "Planning",
        "Pat Organizer",
        "Ann, Bob",
    ]


def test_skip_list_uses_exact_addresses(meeting: Occurrence) -> None:
    projector = RecordProjector(skip_email_addresses=["ME@apple.com", "apple.com"])

    assert projector.attendee_names(meeting.attendees) == "Me, Ann, Bob"


def test_missing_fields_render_empty() -> None:
    item = Occurrence(
        subject="Solo",
        start_time=datetime(2021, 4, 6, 9, tzinfo=UTC),
        end_time=datetime(2021, 4, 6, 9, 15, tzinfo=UTC),
    )

    record = RecordProjector().project(Classification(occurrence=item))

    assert record.organization == "?"
    assert record.recurrence == ""
    assert record.organizer == ""
    assert record.attendees == ""
    assert record.duration_minutes == 15


def test_start_rendered_in_configured_timezone(meeting: Occurrence) -> None:
    projector = RecordProjector(timezone=resolve_timezone("America/New_York"))

    record = projector.project(Classification(occurrence=meeting, organization="Company1"))

    assert record.start == "2021-04-06 05:00"


def test_project_all_keeps_order(meeting: Occurrence) -> None:
    other = meeting.model_copy(update={"subject": "Retro"})
    records = RecordProjector().project_all(
        [
            Classification(occurrence=meeting, organization="A"),
            Classification(occurrence=other, organization="B"),
        ]
    )

    assert [(r.organization, r.subject) for r in records] == [("A", "Planning"), ("B", "Retro")]
