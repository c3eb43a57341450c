"""
End-to-end tests: ICS file -> build_report -> CSV / debug JSON, and the CLI.
"""

import csv
import json
from pathlib import Path

import pytest

from calendarbot_report.__main__ import main
from calendarbot_report.config_loader import load_config
from calendarbot_report.report_runner import build_report

pytestmark = pytest.mark.integration


EVENTS = [
    [
        "UID:standup-1",
        "SUMMARY:Standup",
        "DTSTART:20210405T090000Z",
        "DTEND:20210405T093000Z",
        "RRULE:FREQ=WEEKLY;BYDAY=MO",
        "EXDATE:20210419T090000Z",
        "ORGANIZER;CN=Pat:mailto:pat@company1.com",
        "ATTENDEE;CN=Me:mailto:me@apple.com",
        "ATTENDEE;CN=Lee:mailto:lee@microsoft.com",
    ],
    [
        "UID:standup-1",
        "SUMMARY:Standup",
        "RECURRENCE-ID:20210426T090000Z",
        "DTSTART:20210426T100000Z",
        "DTEND:20210426T103000Z",
    ],
    [
        "UID:review-1",
        "SUMMARY:Review, quarterly",
        "DTSTART:20210414T130000Z",
        "DTEND:20210414T143000Z",
        'ATTENDEE;CN="Smith, Ann":mailto:ann@customer2.com',
    ],
    [
        "UID:dentist",
        "SUMMARY:Dentist",
        "DTSTART:20210415T080000Z",
        "DTEND:20210415T090000Z",
    ],
    [
        "UID:old",
        "SUMMARY:Old meeting",
        "DTSTART:20210301T080000Z",
        "DTEND:20210301T090000Z",
        "ORGANIZER;CN=Pat:mailto:pat@company1.com",
    ],
]

CONFIG = """\
window_start: 2021-04-01
window_end: 2021-04-30
ics_source_file: {ics}
output_csv: {csv}
skip_email_addresses:
  - me@apple.com
organizations:
  - name: Company1
    email_filter: company1.com
  - name: Customer2
    email_filter: customer2.com
  - name: Microsoft
    email_filter: microsoft.com
"""


@pytest.fixture
def workspace(tmp_path: Path, ics_builder) -> dict[str, Path]:
    ics = tmp_path / "calendar.ics"
    ics.write_text(ics_builder(*EVENTS), encoding="utf-8")
    out = tmp_path / "calendar.csv"
    config = tmp_path / "report.yaml"
    config.write_text(CONFIG.format(ics=ics, csv=out), encoding="utf-8")
    return {"ics": ics, "csv": out, "config": config, "dir": tmp_path}


def read_rows(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_build_report_writes_expected_rows(workspace) -> None:
    result = build_report(load_config(workspace["config"]))

    rows = read_rows(workspace["csv"])
    assert rows[0][0] == "Organization"
    assert rows[1:] == [
        ["Company1", "Recurring", "2021-04-05 09:00", "30", "Standup", "Pat", "Lee"],
        ["Company1", "Recurring", "2021-04-12 09:00", "30", "Standup", "Pat", "Lee"],
        ["Company1", "Recurring", "2021-04-26 10:00", "30", "Standup", "Pat", "Lee"],
        ["Customer2", "", "2021-04-14 13:00", "90", "Review, quarterly", "", "Smith, Ann"],
    ]
    assert result.occurrences_out == 5
    assert result.warnings == []


def test_debug_json_contains_unclassified_occurrences(workspace) -> None:
    debug = workspace["dir"] / "debug.json"
    build_report(load_config(workspace["config"], {"debug_json": str(debug)}))

    data = json.loads(debug.read_text(encoding="utf-8"))
    assert [item["subject"] for item in data] == [
        "Standup",
        "Standup",
        "Standup",
        "Review, quarterly",
        "Dentist",
    ]
    assert data[-1]["duration"]["hours"] == 1


def test_output_timezone_shifts_start_column(workspace) -> None:
    build_report(load_config(workspace["config"], {"timezone": "America/New_York"}))

    rows = read_rows(workspace["csv"])
    assert rows[1][2] == "2021-04-05 05:00"


def test_cli_success(workspace) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(workspace["config"])])

    assert exc_info.value.code == 0
    assert len(read_rows(workspace["csv"])) == 5


def test_cli_flags_override_config(workspace) -> None:
    other = workspace["dir"] / "other.csv"

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(workspace["config"]), "--output", str(other), "--end", "2021-04-10"])

    assert exc_info.value.code == 0
    assert len(read_rows(other)) == 2
    assert not workspace["csv"].exists()


def test_cli_invalid_window_exits_nonzero(workspace, caplog) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(workspace["config"]), "--start", "2021-05-01"])

    assert exc_info.value.code == 1
    assert "must be before" in caplog.text
    assert not workspace["csv"].exists()


def test_cli_unwritable_output_exits_nonzero(workspace, caplog) -> None:
    target = workspace["dir"] / "no-such-dir" / "calendar.csv"

    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(workspace["config"]), "--output", str(target)])

    assert exc_info.value.code == 1
    assert "Unable to write" in caplog.text


def test_cli_missing_calendar_exits_nonzero(workspace) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--config", str(workspace["config"]), "--ics", str(workspace["dir"] / "missing.ics")])

    assert exc_info.value.code == 1
    assert not workspace["csv"].exists()


def test_example_config_loads() -> None:
    example = Path(__file__).resolve().parents[3] / "config" / "calendarbot_report.yaml.example"

    config = load_config(example)

    assert [rule.name for rule in config.organizations] == [
        "Company1",
        "Customer2",
        "Microsoft",
        "Apple Computer",
    ]
    assert config.organizations[0].email_filter.search("pat@company1.com")
    assert config.debug_json == "calendar.debug.json"
