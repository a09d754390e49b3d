from __future__ import annotations

import os
from datetime import UTC, datetime
from pathlib import Path

from sheetmigrate.cli.main import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, exit_code_for, main
from sheetmigrate.models.migration_result import MigrationResult, MigrationStage, MigrationStatus

T = datetime(2024, 1, 1, tzinfo=UTC)


def _result(status: MigrationStatus) -> MigrationResult:
    return MigrationResult(status, MigrationStage.REPORT, T, T)


def test_exit_code_for_each_status():
    assert exit_code_for(_result(MigrationStatus.SUCCESS)) == EXIT_SUCCESS_ALL
    assert exit_code_for(_result(MigrationStatus.PARTIAL)) == EXIT_PARTIAL_FAILURE
    assert exit_code_for(_result(MigrationStatus.FAILED)) == EXIT_FATAL


def test_prompts_for_missing_choices(people_db: Path, make_excel, clean_logging, monkeypatch, capsys):
    xlsx = make_excel("people.xlsx", [["Name"], ["Ann"]])
    answers = iter([str(xlsx), str(people_db), "1"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(answers))

    code = main([])

    out = capsys.readouterr().out
    assert code == 0
    assert "Select the table to insert data:" in out
    assert "  1) people" in out


def test_remembered_paths_are_offered(people_db: Path, make_excel, clean_logging, monkeypatch):
    xlsx = make_excel("people.xlsx", [["Name"], ["Ann"]])
    assert main(["--source", str(xlsx), "--target", str(people_db), "--table", "people"]) == 0

    prompts: list[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return ""

    monkeypatch.setattr("builtins.input", fake_input)
    assert main(["--table", "people"]) == 0
    assert len(prompts) == 2
    assert f"[{xlsx}]" in prompts[0]
    assert f"[{people_db}]" in prompts[1]


def test_env_file_is_loaded(temp_workdir: Path, clean_logging, monkeypatch):
    (temp_workdir / ".env").write_text("SHEETMIGRATE_TEST_VALUE=from-dotenv\n", encoding="utf-8")
    monkeypatch.delenv("SHEETMIGRATE_TEST_VALUE", raising=False)
    monkeypatch.setattr("builtins.input", lambda _prompt: (_ for _ in ()).throw(EOFError()))

    assert main([]) == EXIT_FATAL

    assert os.environ.get("SHEETMIGRATE_TEST_VALUE") == "from-dotenv"
    monkeypatch.delenv("SHEETMIGRATE_TEST_VALUE", raising=False)
