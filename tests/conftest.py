# Shared pytest fixtures
from __future__ import annotations

import sqlite3
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from sheetmigrate.logging.init import reset_logging

PEOPLE_DDL = """
CREATE TABLE people (
    ID INTEGER PRIMARY KEY,
    Name TEXT NOT NULL,
    Email TEXT UNIQUE
);
"""


def create_sqlite_db(path: Path, ddl: str) -> Path:
    conn = sqlite3.connect(path)
    try:
        conn.executescript(ddl)
        conn.commit()
    finally:
        conn.close()
    return path


def fetch_rows(path: Path, sql: str) -> list[tuple]:
    conn = sqlite3.connect(path)
    try:
        return conn.execute(sql).fetchall()
    finally:
        conn.close()


def write_excel(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
    """Write ``rows`` (header row first) to the first sheet of an .xlsx file."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    for var in ("DATABASE_URL", "PGDSN"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture()
def people_db(temp_workdir: Path) -> Path:
    return create_sqlite_db(temp_workdir / "data" / "app.db", PEOPLE_DDL)


@pytest.fixture()
def make_excel(temp_workdir: Path) -> Callable[..., Path]:
    def _make(name: str, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
        return write_excel(temp_workdir / "data" / name, rows, sheet_name=sheet_name)
    return _make


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()
