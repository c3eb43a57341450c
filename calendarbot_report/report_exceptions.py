"""Custom exception hierarchy for calendar report generation.

Only failures that abort a run (bad configuration, unreadable calendar
source) or that take a single series out of the report (an unusable
recurrence rule) get their own types. Malformed event data is not detected
here and flows through the pipeline as-is.
"""


class ReportError(Exception):
    """Base exception for all calendar report errors.

    The CLI catches this type to log a single error line and exit non-zero
    before any output file is written.
    """


class ConfigurationError(ReportError):
    """Report configuration is missing or invalid.

    Raised when:
    - The config file is not a mapping
    - The analysis window bounds are missing or cannot be parsed
    - The window start is not before the window end
    - The timezone name is not a valid IANA timezone
    - An organization rule has no name or an invalid pattern
    """


class CalendarSourceError(ReportError):
    """The calendar source could not be read or parsed.

    Raised when:
    - The ICS file does not exist or cannot be read
    - The content is not a valid iCalendar stream

    The whole run is aborted; no partial output is produced.
    """


class RecurrenceExpansionError(ReportError):
    """A recurrence rule could not be turned into candidate dates.

    Raised by the occurrence resolver when python-dateutil rejects the
    RRULE text of a series. The pipeline skips that series and records a
    warning.
    """


class OutputWriteError(ReportError):
    """A report output file could not be written.

    Raised when:
    - The CSV report path is not writable
    - The debug JSON path is not writable
    """
