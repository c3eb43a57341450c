"""calendarbot_report - organization time report from an iCalendar export.

Expands events and recurring series inside an analysis window, attributes
each occurrence to an organization by participant matching and writes one
CSV row per attributed occurrence.
"""

__version__ = "0.1.0"

from typing import Any


def run_report(config: Any) -> Any:
    """Run a report for a loaded Config.

    Imports the runner lazily to keep package import light.
    """
    from .report_runner import build_report

    return build_report(config)
