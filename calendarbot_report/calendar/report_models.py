"""Data models for calendar report processing."""

import math
from datetime import datetime
from re import Pattern
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
    model_validator,
)

from .report_datetime_utils import (
    CalendarDay,
    calendar_day,
    ensure_timezone_aware,
    milliseconds_between,
)

MAILTO_PREFIX = "mailto:"

RECURRING_LABEL = "Recurring"
UNCLASSIFIED_LABEL = "?"

CSV_HEADERS = [
    "Organization",
    "Recurrence",
    "Start",
    "Duration (Minutes)",
    "Subject",
    "Organizer",
    "Attendees",
]


class Individual(BaseModel):
    """A calendar participant (organizer or attendee)."""

    name: str = Field(default="", description="Display name")
    email: str = Field(default="", description="Email address without mailto: prefix")

    model_config = ConfigDict(frozen=True)


def clean_display_name(name: str) -> str:
    """Strip one pair of surrounding double quotes from a CN value."""
    if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
        return name[1:-1]
    return name


def clean_email(email_uri: str) -> str:
    """Strip a leading ``mailto:`` scheme from a calendar address."""
    if email_uri[: len(MAILTO_PREFIX)].lower() == MAILTO_PREFIX:
        return email_uri[len(MAILTO_PREFIX) :]
    return email_uri


def individual(name: Any, email_uri: Any) -> Individual:
    """Build an Individual from raw CN and calendar-address values."""
    return Individual(
        name=clean_display_name(str(name or "")),
        email=clean_email(str(email_uri or "")),
    )


class Participants(BaseModel):
    """Normalized organizer and attendees of an event.

    ``attendees`` is None when the source had no attendee field at all and
    an empty list when the field was present but empty.
    """

    organizer: Optional[Individual] = None
    attendees: Optional[list[Individual]] = None

    model_config = ConfigDict(frozen=True)


class EventDuration(BaseModel):
    """Length of an occurrence.

    Holds a single millisecond delta; the day/hour/minute/second values are
    derived views of it and cannot drift apart.
    """

    milliseconds: float = Field(..., description="end - start in milliseconds")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_milliseconds(cls, milliseconds: float) -> "EventDuration":
        return cls(milliseconds=milliseconds)

    @classmethod
    def between(cls, start: Optional[datetime], end: Optional[datetime]) -> "EventDuration":
        """Duration from start to end (zero when either bound is missing)."""
        return cls(milliseconds=milliseconds_between(start, end))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def seconds(self) -> float:
        return self.milliseconds / 1000

    @computed_field  # type: ignore[prop-decorator]
    @property
    def minutes(self) -> float:
        return self.milliseconds / 60000

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hours(self) -> float:
        return self.milliseconds / 3600000

    @computed_field  # type: ignore[prop-decorator]
    @property
    def days(self) -> float:
        return self.milliseconds / 86400000


class RawEvent(BaseModel):
    """A VEVENT as handed over by the iCalendar reader.

    Override and exception keys are calendar days; string or datetime keys
    are truncated with ``calendar_day`` on construction.
    """

    uid: str = Field(default="", description="iCalendar UID")
    subject: str = Field(default="", description="SUMMARY text")
    start: datetime = Field(..., description="DTSTART of the defining instance")
    end: datetime = Field(..., description="DTEND of the defining instance")

    # Recurrence
    recurrence_rule: Optional[str] = Field(default=None, description="RRULE text")
    recurrence_dates: list[datetime] = Field(default_factory=list, description="RDATE values")
    recurrence_overrides: dict[CalendarDay, "RawEvent"] = Field(
        default_factory=dict, description="RECURRENCE-ID instances keyed by calendar day"
    )
    exception_dates: frozenset[CalendarDay] = Field(
        default_factory=frozenset, description="EXDATE calendar days"
    )

    # Participants in raw form (vCalAddress, list, mapping or Individual)
    organizer: Any = None
    attendees: Any = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("start", "end")
    @classmethod
    def _aware_times(cls, value: datetime) -> datetime:
        return ensure_timezone_aware(value)

    @field_validator("recurrence_dates")
    @classmethod
    def _aware_recurrence_dates(cls, value: list[datetime]) -> list[datetime]:
        return [ensure_timezone_aware(dt) for dt in value]

    @field_validator("recurrence_overrides", mode="before")
    @classmethod
    def _truncate_override_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {calendar_day(key): override for key, override in value.items()}
        return value

    @field_validator("exception_dates", mode="before")
    @classmethod
    def _truncate_exception_dates(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        return frozenset(calendar_day(item) for item in value)

    @property
    def is_recurring(self) -> bool:
        """True when the event defines a series (RRULE or RDATE)."""
        return bool(self.recurrence_rule or self.recurrence_dates)


RawEvent.model_rebuild()


class Occurrence(BaseModel):
    """One concrete instance of an event inside the analysis window."""

    subject: str = Field(..., description="Event subject/title")
    start_time: datetime = Field(..., description="Occurrence start")
    end_time: datetime = Field(..., description="Occurrence end")
    is_recurring: bool = Field(default=False, description="Generated from a series")
    organizer: Optional[Individual] = Field(default=None, description="Event organizer")
    attendees: Optional[list[Individual]] = Field(default=None, description="Event attendees")

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def duration(self) -> EventDuration:
        return EventDuration.between(self.start_time, self.end_time)

    @field_serializer("start_time", "end_time")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()


class AnalysisWindow(BaseModel):
    """Fixed date range that occurrences must intersect."""

    start: datetime
    end: datetime

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end")
    @classmethod
    def _aware_bounds(cls, value: datetime) -> datetime:
        return ensure_timezone_aware(value)

    @model_validator(mode="after")
    def _check_order(self) -> "AnalysisWindow":
        if not self.start < self.end:
            raise ValueError(f"window start {self.start} must be before end {self.end}")
        return self

    def contains(self, instant: datetime) -> bool:
        """True when the instant lies strictly between the window bounds."""
        return self.start < instant < self.end

    def excludes(self, start: datetime, end: datetime) -> bool:
        """True when [start, end] ends before the window or starts after it.

        Comparisons are strict: touching a bound keeps the occurrence.
        """
        return end < self.start or start > self.end


class OrganizationRule(BaseModel):
    """Organization attribution rule; patterns are searched, not anchored."""

    name: str = Field(..., min_length=1, description="Organization label")
    email_filter: Optional[Pattern[str]] = Field(default=None, description="Email regex")
    name_filter: Optional[Pattern[str]] = Field(default=None, description="Display name regex")


class Classification(BaseModel):
    """An occurrence paired with the organization it was attributed to."""

    occurrence: Occurrence
    organization: Optional[str] = None

    model_config = ConfigDict(frozen=True)


def format_minutes(minutes: float) -> str:
    """Render minutes without a trailing ``.0`` for whole values."""
    if math.isfinite(minutes) and float(minutes).is_integer():
        return str(int(minutes))
    return str(minutes)


class OutputRecord(BaseModel):
    """One report row."""

    organization: str
    recurrence: str
    start: str
    duration_minutes: float
    subject: str
    organizer: str
    attendees: str

    model_config = ConfigDict(frozen=True)

    def to_row(self) -> list[str]:
        """Column values in CSV_HEADERS order."""
        return [
            self.organization,
            self.recurrence,
            self.start,
            format_minutes(self.duration_minutes),
            self.subject,
            self.organizer,
            self.attendees,
        ]
