from __future__ import annotations

import json
from pathlib import Path

from conftest import fetch_rows
from sheetmigrate.cli.main import main


def test_cli_inserts_all_rows(people_db: Path, make_excel, clean_logging, capsys):
    xlsx = make_excel(
        "people.xlsx",
        [
            ["id", "name", "email"],
            [1, "Ann", "ann@example.com"],
            [2, "Bob", "bob@example.com"],
        ],
    )

    code = main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"])

    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY status=success table=people attempted=2 succeeded=2 failed=0" in out
    assert "INFO Column mapping (case_insensitive): id->ID, name->Name, email->Email" in out
    assert fetch_rows(people_db, "SELECT ID, Name, Email FROM people ORDER BY ID") == [
        (1, "Ann", "ann@example.com"),
        (2, "Bob", "bob@example.com"),
    ]
    assert not Path("logs").exists()


def test_cli_remembers_selected_paths(people_db: Path, make_excel, clean_logging):
    xlsx = make_excel("people.xlsx", [["Name"], ["Ann"]])

    assert main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"]) == 0

    saved = json.loads(Path(".sheetmigrate-paths.json").read_text(encoding="utf-8"))
    assert saved == {"source": str(xlsx), "target": str(people_db)}


def test_cli_reads_config_file(temp_workdir: Path, people_db: Path, make_excel, clean_logging, capsys):
    (temp_workdir / "config" / "migrate.yml").write_text(
        "preferences_file: null\nlogs_directory: out/logs\n", encoding="utf-8"
    )
    xlsx = make_excel("people.xlsx", [["Name", "Email"], ["Ann", "a@x.io"], ["Bob", "a@x.io"]])

    code = main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"])

    assert code == 2
    assert len(list((temp_workdir / "out" / "logs").glob("errors-*.log"))) == 1
    assert not (temp_workdir / ".sheetmigrate-paths.json").exists()
    assert "SUMMARY status=partial" in capsys.readouterr().out


def test_cli_ignores_blank_spacer_column(people_db: Path, make_excel, clean_logging, capsys):
    xlsx = make_excel(
        "people.xlsx",
        [
            ["id", None, "name"],
            [1, None, "Alice"],
        ],
    )

    code = main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"])

    assert code == 0
    assert "Column mapping (case_insensitive): id->ID, name->Name" in capsys.readouterr().out
    assert fetch_rows(people_db, "SELECT ID, Name, Email FROM people") == [(1, "Alice", None)]
