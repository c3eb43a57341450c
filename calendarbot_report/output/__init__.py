"""Report output writers."""

from .report_writer import render_csv, write_csv_report, write_debug_json

__all__ = ["render_csv", "write_csv_report", "write_debug_json"]
