from __future__ import annotations

import logging

from ..errors import SchemaQueryError, StatementExecutionError
from ..models.table_schema import TableSchema
from .store import Store, quote_ident

"""Schema inspection: table names and ordered column names.

Column order is the store's declaration order; it is the canonical order used
for the INSERT column list later on.
"""

__all__ = [
    "list_tables",
    "list_columns",
    "inspect_table",
]

logger = logging.getLogger(__name__)

_TABLES_SQL = {
    # rowid order of sqlite_master == creation order; sqlite_% tables are internal
    "sqlite": (
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
        "ORDER BY rowid"
    ),
    "postgres": (
        "SELECT table_name FROM information_schema.tables "
        "WHERE table_schema = current_schema() AND table_type = 'BASE TABLE' "
        "ORDER BY table_name"
    ),
}


def list_tables(store: Store) -> list[str]:
    sql = _TABLES_SQL.get(store.dialect)
    if sql is None:
        raise SchemaQueryError(f"schema inspection not supported for dialect '{store.dialect}'")
    try:
        rows = store.fetch_all(sql)
    except StatementExecutionError as e:
        raise SchemaQueryError(f"cannot list tables: {e}") from e
    tables = [str(r[0]) for r in rows]
    logger.debug(f"tables: {tables}")
    return tables


def list_columns(store: Store, table: str) -> list[str]:
    """Return the column names of ``table`` in declaration order.

    Raises:
        SchemaQueryError: the query failed or the table does not exist
    """
    try:
        if store.dialect == "sqlite":
            # PRAGMA does not accept bound parameters; the name is quoted instead
            rows = store.fetch_all(f"PRAGMA table_info({quote_ident(table)})")
            columns = [str(r[1]) for r in sorted(rows, key=lambda r: r[0])]
        elif store.dialect == "postgres":
            rows = store.fetch_all(
                "SELECT column_name FROM information_schema.columns "
                "WHERE table_schema = current_schema() AND table_name = %s "
                "ORDER BY ordinal_position",
                (table,),
            )
            columns = [str(r[0]) for r in rows]
        else:
            raise SchemaQueryError(f"schema inspection not supported for dialect '{store.dialect}'")
    except StatementExecutionError as e:
        raise SchemaQueryError(f"cannot list columns of table '{table}': {e}") from e

    if not columns:
        raise SchemaQueryError(f"table not found: {table}")
    return columns


def inspect_table(store: Store, table: str) -> TableSchema:
    return TableSchema(table=table, columns=tuple(list_columns(store, table)))
