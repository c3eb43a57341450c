"""Shared pytest configuration for calendarbot_report tests."""

from typing import Any


def pytest_configure(config: Any) -> None:
    """Configure pytest with report test markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "fast: Tests without file or process I/O overhead")
    config.addinivalue_line("markers", "integration: File-based end-to-end report runs")
