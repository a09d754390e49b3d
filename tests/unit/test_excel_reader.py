from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from conftest import write_excel
from sheetmigrate.errors import SourceReadError
from sheetmigrate.excel.reader import normalize_sheet, read_rows, read_sheet


def test_read_rows_first_row_is_header(tmp_path: Path):
    path = write_excel(tmp_path / "people.xlsx", [
        ["id", "name", "email"],
        [1, "Alice", "alice@example.com"],
        [2, "Bob", "bob@example.com"],
    ])
    rows = read_rows(path)
    assert rows == [
        {"id": 1, "name": "Alice", "email": "alice@example.com"},
        {"id": 2, "name": "Bob", "email": "bob@example.com"},
    ]


def test_only_first_sheet_is_read(tmp_path: Path):
    path = tmp_path / "multi.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame([["a"], [1]]).to_excel(writer, sheet_name="First", header=False, index=False)
        pd.DataFrame([["b"], [2]]).to_excel(writer, sheet_name="Second", header=False, index=False)
    sheet = read_sheet(path)
    assert sheet.sheet_name == "First"
    assert sheet.rows == [{"a": 1}]


def test_empty_cells_become_none_and_na_strings_are_kept(tmp_path: Path):
    path = write_excel(tmp_path / "na.xlsx", [
        ["code", "note"],
        ["NA", None],
        ["null", "x"],
    ])
    assert read_rows(path) == [{"code": "NA", "note": None}, {"code": "null", "note": "x"}]


def test_blank_rows_are_skipped(tmp_path: Path):
    path = write_excel(tmp_path / "gaps.xlsx", [
        ["id", "name"],
        [1, "A"],
        [None, None],
        [2, "B"],
    ])
    assert [r["id"] for r in read_rows(path)] == [1, 2]


def test_header_only_sheet_has_no_rows(tmp_path: Path):
    path = write_excel(tmp_path / "header.xlsx", [["id", "name"]])
    sheet = read_sheet(path)
    assert sheet.columns == ["id", "name"]
    assert sheet.rows == []


def test_missing_file_is_source_read_error(tmp_path: Path):
    with pytest.raises(SourceReadError, match="cannot read spreadsheet"):
        read_rows(tmp_path / "missing.xlsx")


def test_corrupt_file_is_source_read_error(tmp_path: Path):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(b"not a zip archive")
    with pytest.raises(SourceReadError):
        read_rows(bad)


def test_normalize_sheet_header_names():
    df = pd.DataFrame([
        [" id ", float("nan"), "name", "name", float("nan")],
        [1, "x", "a", "b", "y"],
    ])
    sheet = normalize_sheet(df, "S")
    assert sheet.columns == ["id", "__EMPTY", "name", "name_1", "__EMPTY_1"]
    assert sheet.rows == [{"id": 1, "__EMPTY": "x", "name": "a", "name_1": "b", "__EMPTY_1": "y"}]


def test_normalize_sheet_converts_scalars():
    df = pd.DataFrame(
        [
            ["n", "when", "flag"],
            [pd.Series([5], dtype="int64").iloc[0], pd.Timestamp("2024-03-01 12:30:00"), True],
        ],
        dtype=object,
    )
    row = normalize_sheet(df, "S").rows[0]
    assert row == {"n": 5, "when": "2024-03-01T12:30:00", "flag": True}
    assert type(row["n"]) is int


def test_normalize_empty_frame():
    sheet = normalize_sheet(pd.DataFrame(), "Empty")
    assert sheet.columns == []
    assert sheet.rows == []


def test_dates_read_from_workbook_are_iso_strings(tmp_path: Path):
    path = write_excel(tmp_path / "dates.xlsx", [["when"], [datetime(2024, 1, 2, 3, 4, 5)]])
    assert read_rows(path) == [{"when": "2024-01-02T03:04:05"}]


def test_blank_spacer_column_is_dropped(tmp_path: Path):
    path = write_excel(tmp_path / "spacer.xlsx", [
        ["id", None, "name"],
        [1, None, "Alice"],
        [2, None, "Bob"],
    ])
    sheet = read_sheet(path)
    assert sheet.columns == ["id", "name"]
    assert sheet.rows == [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]


def test_blank_header_over_data_is_kept():
    df = pd.DataFrame([
        ["id", float("nan"), float("nan"), "name"],
        [1, float("nan"), "note", "Alice"],
    ])
    sheet = normalize_sheet(df, "S")
    assert sheet.columns == ["id", "__EMPTY", "name"]
    assert sheet.rows == [{"id": 1, "__EMPTY": "note", "name": "Alice"}]
