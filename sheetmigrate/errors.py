from __future__ import annotations

from collections.abc import Sequence

"""Error taxonomy for the spreadsheet -> table migration.

Every terminal failure derives from MigrationError and carries an
``error_type`` label (UPPER_SNAKE) that is written to the JSON Lines error log.
RowInsertError is the only member that is collected into the InsertionReport
instead of being raised out of the run.
"""

__all__ = [
    "MigrationError",
    "SelectionError",
    "NoTablesError",
    "SchemaQueryError",
    "SourceReadError",
    "EmptySourceError",
    "UnmappableColumnError",
    "ColumnConflictError",
    "StatementPrepareError",
    "StatementExecutionError",
    "RowInsertError",
    "StoreConnectionError",
    "describe_error",
]


class MigrationError(Exception):
    """Base class for failures that halt a migration run."""

    error_type = "MIGRATION_ERROR"


class SelectionError(MigrationError):
    """Bad or missing path / table selection."""

    error_type = "SELECTION_ERROR"


class NoTablesError(MigrationError):
    error_type = "NO_TABLES"


class SchemaQueryError(MigrationError):
    error_type = "SCHEMA_QUERY_ERROR"


class SourceReadError(MigrationError):
    error_type = "SOURCE_READ_ERROR"


class EmptySourceError(MigrationError):
    error_type = "EMPTY_SOURCE"


class UnmappableColumnError(MigrationError):
    """A spreadsheet column has no counterpart in the target table."""

    error_type = "UNMAPPABLE_COLUMN"

    def __init__(self, column: str, table_columns: Sequence[str] = (), message: str | None = None) -> None:
        self.column = column
        self.table_columns = list(table_columns)
        if message is None:
            message = (
                f"spreadsheet column '{column}' has no match in table columns "
                f"{self.table_columns}"
            )
        super().__init__(message)


class ColumnConflictError(UnmappableColumnError):
    """Two spreadsheet columns resolve to the same table column."""

    error_type = "COLUMN_CONFLICT"

    def __init__(self, column: str, other: str, target: str) -> None:
        self.other = other
        self.target = target
        super().__init__(
            column,
            message=(
                f"spreadsheet columns '{other}' and '{column}' both map to "
                f"table column '{target}'"
            ),
        )


class StatementPrepareError(MigrationError):
    error_type = "STATEMENT_PREPARE_ERROR"


class StatementExecutionError(MigrationError):
    """Raised by a prepared statement when one execution fails."""

    error_type = "STATEMENT_EXECUTION_ERROR"


class RowInsertError(MigrationError):
    """Per-row insert failure. Accumulated, never fatal to the batch."""

    error_type = "ROW_INSERT_ERROR"

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        self.message = message
        super().__init__(f"row {index}: {message}")


class StoreConnectionError(MigrationError):
    error_type = "CONNECTION_ERROR"


def describe_error(exc: BaseException) -> str:
    """Render an exception and its ``__cause__`` chain on one line."""
    parts: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        parts.append(text)
        current = current.__cause__
    return " <- caused by: ".join(parts)
