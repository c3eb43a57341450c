"""iCalendar reader for calendar report processing.

Parses VEVENT components with icalendar and groups them by UID into
RawEvent records: the component without RECURRENCE-ID is the series master,
components with RECURRENCE-ID become its per-day overrides.
"""

import logging
from datetime import UTC, date, datetime, timedelta, tzinfo
from pathlib import Path
from typing import Any, Optional, Union

from icalendar import Calendar, Event as ICalEvent, vRecur

from calendarbot_report.report_exceptions import CalendarSourceError

from .report_datetime_utils import CalendarDay, calendar_day, to_datetime
from .report_models import RawEvent

logger = logging.getLogger(__name__)


class ReportICSReader:
    """Reads an ICS export into RawEvent records."""

    def __init__(self, default_timezone: Optional[tzinfo] = None) -> None:
        """Initialize reader.

        Args:
            default_timezone: Zone for floating times and all-day dates (UTC by default)
        """
        self.default_timezone = default_timezone or UTC

    def read_file(self, path: Union[str, Path]) -> list[RawEvent]:
        """Read and parse an ICS file.

        Raises:
            CalendarSourceError: If the file cannot be read or parsed
        """
        p = Path(path)
        logger.debug("Reading calendar source %s", p)
        try:
            content = p.read_bytes()
        except OSError as e:
            raise CalendarSourceError(f"Unable to read calendar file {p}: {e}") from e
        return self.parse(content)

    def parse(self, content: Union[str, bytes]) -> list[RawEvent]:
        """Parse ICS content into RawEvents in source order.

        Raises:
            CalendarSourceError: If the content is not valid iCalendar data
        """
        try:
            calendar = Calendar.from_ical(content)
        except ValueError as e:
            raise CalendarSourceError(f"Invalid iCalendar content: {e}") from e

        components = calendar.walk("VEVENT")
        logger.debug("Found %d VEVENT components", len(components))
        return self.group_components(components)

    def group_components(self, components: list[ICalEvent]) -> list[RawEvent]:
        """Group VEVENT components by UID and attach overrides to their masters.

        Masters keep the order in which they appear. Overrides without a
        master are reported as standalone events.
        """
        masters: dict[str, ICalEvent] = {}
        order: list[str] = []
        overrides: dict[str, list[ICalEvent]] = {}

        for index, component in enumerate(components):
            uid = str(component.get("UID") or f"_no_uid_{index}")
            if component.get("RECURRENCE-ID") is not None:
                overrides.setdefault(uid, []).append(component)
                if uid not in order:
                    order.append(uid)
                continue
            if uid in masters:
                logger.debug("Duplicate master component for UID %s, keeping first", uid)
                continue
            masters[uid] = component
            if uid not in order:
                order.append(uid)

        events: list[RawEvent] = []
        for uid in order:
            master = masters.get(uid)
            if master is None:
                logger.debug("RECURRENCE-ID instances of %s have no master", uid)
                for orphan in overrides.get(uid, []):
                    event = self.parse_component(orphan)
                    if event is not None:
                        events.append(event)
                continue

            override_map = self._build_override_map(uid, overrides.get(uid, []))
            event = self.parse_component(master, override_map)
            if event is not None:
                events.append(event)

        return events

    def parse_component(
        self,
        component: ICalEvent,
        overrides: Optional[dict[CalendarDay, RawEvent]] = None,
    ) -> Optional[RawEvent]:
        """Convert one VEVENT into a RawEvent.

        Returns:
            The RawEvent, or None when DTSTART is missing
        """
        uid = str(component.get("UID") or "")
        try:
            start, end = self._parse_event_times(component)
        except ValueError as e:
            logger.warning("Event %s %s, skipping", uid or "<no-uid>", e)
            return None

        return RawEvent(
            uid=uid,
            subject=str(component.get("SUMMARY") or ""),
            start=start,
            end=end,
            recurrence_rule=self._rrule_string(component),
            recurrence_dates=self._collect_date_list(component, "RDATE"),
            recurrence_overrides=overrides or {},
            exception_dates=frozenset(
                calendar_day(dt) for dt in self._collect_date_list(component, "EXDATE")
            ),
            organizer=component.get("ORGANIZER"),
            attendees=component.get("ATTENDEE"),
        )

    def _build_override_map(
        self, uid: str, components: list[ICalEvent]
    ) -> dict[CalendarDay, RawEvent]:
        override_map: dict[CalendarDay, RawEvent] = {}
        for component in components:
            recurrence_id = self._to_datetime(component.decoded("RECURRENCE-ID"))
            event = self.parse_component(component)
            if event is None:
                continue
            key = calendar_day(recurrence_id)
            if key in override_map:
                logger.debug("Multiple overrides of %s on %s, keeping the last", uid, key)
            override_map[key] = event
        return override_map

    def _parse_event_times(self, component: ICalEvent) -> tuple[datetime, datetime]:
        """Decode DTSTART/DTEND, falling back to DURATION or a zero length.

        Raises:
            ValueError: If DTSTART is missing
        """
        if component.get("DTSTART") is None:
            raise ValueError("missing DTSTART")
        start = self._to_datetime(component.decoded("DTSTART"))

        if component.get("DTEND") is not None:
            end = self._to_datetime(component.decoded("DTEND"))
        elif component.get("DURATION") is not None:
            duration = component.decoded("DURATION")
            end = start + duration if isinstance(duration, timedelta) else start
        else:
            end = start

        return start, end

    def _rrule_string(self, component: ICalEvent) -> Optional[str]:
        """Return the RRULE text with UNTIL normalized to UTC.

        python-dateutil refuses a floating or date-only UNTIL once DTSTART is
        timezone-aware, and every DTSTART handed out here is aware.
        """
        rrule_prop = component.get("RRULE")
        if rrule_prop is None:
            return None
        if isinstance(rrule_prop, list):
            if len(rrule_prop) > 1:
                logger.warning("Multiple RRULE properties on %s; using the first", component.get("UID"))
            rrule_prop = rrule_prop[0]

        rule = vRecur(rrule_prop)
        until_values = rule.get("UNTIL")
        if until_values:
            if not isinstance(until_values, list):
                until_values = [until_values]
            rule["UNTIL"] = [self._to_datetime(value).astimezone(UTC) for value in until_values]
        return rule.to_ical().decode("utf-8")

    def _collect_date_list(self, component: ICalEvent, name: str) -> list[datetime]:
        """Collect EXDATE/RDATE values; each property may hold several dates."""
        props = component.get(name)
        if props is None:
            return []
        if not isinstance(props, list):
            props = [props]

        values: list[datetime] = []
        for prop in props:
            for ddd in getattr(prop, "dts", []):
                value = getattr(ddd, "dt", None)
                if isinstance(value, (date, datetime)):
                    values.append(self._to_datetime(value))
                else:
                    logger.debug("Ignoring unsupported %s value %r", name, value)
        return values

    def _to_datetime(self, value: Any) -> datetime:
        return to_datetime(value, self.default_timezone)


def read_calendar_file(path: Union[str, Path], default_timezone: Optional[tzinfo] = None) -> list[RawEvent]:
    """Read an ICS file into RawEvents."""
    return ReportICSReader(default_timezone).read_file(path)


def parse_calendar(content: Union[str, bytes], default_timezone: Optional[tzinfo] = None) -> list[RawEvent]:
    """Parse ICS content into RawEvents."""
    return ReportICSReader(default_timezone).parse(content)
