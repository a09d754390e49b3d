from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import RowInsertError, StatementExecutionError, StatementPrepareError
from ..models.insertion_report import InsertionReport
from .store import Store, quote_ident

"""Row-by-row INSERT through one prepared statement.

- The statement is prepared once; a prepare failure aborts before any row.
- Every row is executed on its own (autocommit store). A failing row becomes a
  RowInsertError in the report and the loop moves on to the next row.
- The statement is finalized after the last row whatever happened; a finalize
  failure is reported but does not undo inserted rows.
"""

__all__ = [
    "RowMetrics",
    "build_insert_sql",
    "insert_rows",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowMetrics:
    """Outcome of one row execution, passed to the row callback."""
    index: int
    ok: bool
    elapsed_seconds: float


def build_insert_sql(table: str, columns: Sequence[str], placeholders: Sequence[str]) -> str:
    if len(columns) != len(placeholders):
        raise ValueError("columns and placeholders differ in length")
    cols_sql = ", ".join(quote_ident(c) for c in columns)
    return f"INSERT INTO {quote_ident(table)} ({cols_sql}) VALUES ({', '.join(placeholders)})"


def insert_rows(
    store: Store,
    table: str,
    target_columns: Sequence[str],
    rows: Iterable[Mapping[str, Any]],
    row_callback: Callable[[RowMetrics], None] | None = None,
) -> InsertionReport:
    """Insert projected rows into ``table``.

    Parameters
    ----------
    store: open store handle
    table: target table name
    target_columns: column list of the INSERT, in this exact order
    rows: projected rows (table column -> value); missing columns bind NULL
    row_callback: optional, called after every row with RowMetrics

    Raises
    ------
    StatementPrepareError: the statement could not be prepared (no row attempted)
    """
    columns = list(target_columns)
    if not columns:
        raise StatementPrepareError(f"no target columns for table '{table}'")

    sql = build_insert_sql(table, columns, store.placeholders(len(columns)))
    statement = store.prepare(sql, len(columns))
    logger.debug(f"prepared: {sql}")

    report = InsertionReport(table=table)
    try:
        for index, row in enumerate(rows):
            values = [row.get(col) for col in columns]
            start = time.perf_counter()
            try:
                statement.run(values)
            except StatementExecutionError as e:
                error = RowInsertError(index, str(e))
                report.record_failure(error)
                logger.warning(f"row {index} not inserted: {e}")
                ok = False
            else:
                report.record_success()
                ok = True
            if row_callback is not None:
                row_callback(RowMetrics(index=index, ok=ok, elapsed_seconds=time.perf_counter() - start))
    finally:
        try:
            statement.finalize()
        except StatementExecutionError as e:
            report.finalize_error = str(e)
            logger.error(f"statement finalize failed for table '{table}': {e}")

    return report
