from __future__ import annotations

import re
from pathlib import Path

from sheetmigrate.cli.main import main

SUMMARY_RE = re.compile(
    r"^SUMMARY status=(success|partial|failed) table=(\S+) attempted=(\d+) "
    r"succeeded=(\d+) failed=(\d+) elapsed_sec=([0-9.]+)( stage=[a-z_]+)?$"
)
LABELS = ("DEBUG ", "INFO ", "WARN ", "ERROR ", "SUMMARY ")


def _summary_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.startswith("SUMMARY")]


def test_summary_is_last_line_and_well_formed(people_db: Path, make_excel, clean_logging, capsys):
    xlsx = make_excel("people.xlsx", [["Name", "Email"], ["Ann", "a@x.io"], ["Bob", "a@x.io"]])

    main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"])

    out = capsys.readouterr().out
    lines = out.splitlines()
    assert _summary_lines(out) == [lines[-1]]
    m = SUMMARY_RE.match(lines[-1])
    assert m is not None
    assert m.group(1) == "partial"
    attempted, succeeded, failed = (int(m.group(i)) for i in (3, 4, 5))
    assert attempted == succeeded + failed == 2
    assert m.group(7) is None


def test_every_line_is_labeled(people_db: Path, make_excel, clean_logging, capsys):
    xlsx = make_excel("people.xlsx", [["Name"], ["Ann"]])

    main(["--source", str(xlsx), "--target", str(people_db), "--table", "people", "--debug"])

    lines = capsys.readouterr().out.splitlines()
    assert lines
    assert all(line.startswith(LABELS) for line in lines)


def test_failed_summary_names_stage(people_db: Path, make_excel, clean_logging, capsys):
    xlsx = make_excel("people.xlsx", [["Name", "Phone"], ["Ann", "555"]])

    main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"])

    m = SUMMARY_RE.match(_summary_lines(capsys.readouterr().out)[-1])
    assert m is not None
    assert m.group(1) == "failed"
    assert m.group(7) == " stage=reconcile"
