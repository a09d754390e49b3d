from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from ..models.column_mapping import ColumnMapping

"""Row projection: rename spreadsheet keys to table column names.

Values pass through untouched. A mapped key missing from a row projects to
None, so rows with optional trailing columns still insert (as NULL).
Keys outside the mapping are dropped.
"""

__all__ = [
    "project_row",
    "iter_project",
    "project",
]


def project_row(row: Mapping[str, Any], mapping: ColumnMapping) -> dict[str, Any]:
    return {dst: row.get(src) for src, dst in mapping}


def iter_project(rows: Iterable[Mapping[str, Any]], mapping: ColumnMapping) -> Iterator[dict[str, Any]]:
    """Lazy variant: each projected row exists only until the consumer drops it."""
    for row in rows:
        yield project_row(row, mapping)


def project(rows: Iterable[Mapping[str, Any]], mapping: ColumnMapping) -> list[dict[str, Any]]:
    return list(iter_project(rows, mapping))
