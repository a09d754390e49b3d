from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from ..errors import SourceReadError

"""Spreadsheet reader: first sheet only, first row is the header.

Rows come back as plain dicts (header -> scalar):
- only truly empty cells become None; strings such as "NA" or "null" are kept
- numpy scalars become Python scalars, date/time cells become ISO-8601 strings
- blank header cells become "__EMPTY", "__EMPTY_1", ...; repeated headers get
  "_1", "_2", ... suffixes
- columns with a blank header and no data at all are dropped
- rows where every cell is empty are skipped
"""

__all__ = [
    "SheetData",
    "read_first_sheet",
    "normalize_sheet",
    "read_sheet",
    "read_rows",
]

EMPTY_HEADER = "__EMPTY"


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]


def read_first_sheet(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first sheet of ``path`` raw (no header applied)."""
    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise SourceReadError(f"workbook has no sheets: {path}")
            name = str(xls.sheet_names[0])
            # keep_default_na=False + na_values=[""]: only empty cells are NaN
            df = xls.parse(xls.sheet_names[0], header=None, keep_default_na=False, na_values=[""])
    except SourceReadError:
        raise
    except Exception as e:
        raise SourceReadError(f"cannot read spreadsheet {path}: {e}") from e
    return name, df


def _is_empty(val: Any) -> bool:
    if val is None:
        return True
    if isinstance(val, str):
        return False
    try:
        return bool(pd.isna(val))
    except (TypeError, ValueError):
        return False


def _to_scalar(val: Any) -> Any:
    if _is_empty(val):
        return None
    if isinstance(val, (pd.Timestamp, datetime, date, time)):
        return val.isoformat()
    if isinstance(val, np.generic):
        return val.item()
    return val


def _header_names(raw_header: list[Any]) -> list[str]:
    names: list[str] = []
    used: set[str] = set()
    suffixes: dict[str, int] = {}
    for cell in raw_header:
        base = "" if _is_empty(cell) else str(_to_scalar(cell)).strip()
        if not base:
            base = EMPTY_HEADER
        name = base
        while name in used:
            suffixes[base] = suffixes.get(base, 0) + 1
            name = f"{base}_{suffixes[base]}"
        used.add(name)
        names.append(name)
    return names


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply the first row as header and convert the rest into row dicts."""
    if df.shape[0] == 0:
        return SheetData(sheet_name=sheet_name, columns=[], rows=[])
    # spacer columns (blank header, no data) produce no key at all
    keep = [
        pos for pos in range(df.shape[1])
        if not all(_is_empty(v) for v in df.iloc[:, pos].tolist())
    ]
    df = df.iloc[:, keep]
    columns = _header_names(df.iloc[0].tolist())
    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        values = raw.tolist()
        if all(_is_empty(v) for v in values):
            continue
        rows.append({col: _to_scalar(val) for col, val in zip(columns, values, strict=False)})
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_sheet(path: Path) -> SheetData:
    sheet_name, df = read_first_sheet(Path(path))
    return normalize_sheet(df, sheet_name)


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Read the data rows of the first sheet of ``path``."""
    return read_sheet(path).rows
