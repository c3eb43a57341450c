"""CSV report and debug JSON output for calendarbot_report."""

import csv
import io
import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Union

from calendarbot_report.calendar.report_models import CSV_HEADERS, Occurrence, OutputRecord
from calendarbot_report.report_exceptions import OutputWriteError

logger = logging.getLogger(__name__)


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(f"Unable to write {path}: {e}") from e


def render_csv(records: Iterable[OutputRecord]) -> str:
    """Render records as CSV text with a header row.

    Values containing the delimiter, quotes or newlines are quoted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(record.to_row())
    return buffer.getvalue()


def write_csv_report(path: Union[str, Path], records: list[OutputRecord]) -> Path:
    """Write the CSV report and return its path.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    p = Path(path)
    _write_text(p, render_csv(records))
    logger.info("Saved %d CSV entries in %s.", len(records), p)
    return p


def render_debug_json(occurrences: Iterable[Occurrence]) -> str:
    """Serialize occurrences (with computed durations) as indented JSON."""
    return json.dumps(
        [occurrence.model_dump(mode="json") for occurrence in occurrences],
        indent=2,
    )


def write_debug_json(path: Union[str, Path], occurrences: list[Occurrence]) -> Path:
    """Write the pre-filter occurrence dump and return its path.

    Raises:
        OutputWriteError: If the file cannot be written
    """
    p = Path(path)
    _write_text(p, render_debug_json(occurrences))
    logger.info("Saved iCal transformation JSON in %s.", p)
    return p
