from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from itertools import count
from pathlib import Path
from typing import Any

import psycopg2

from ..errors import StatementExecutionError, StatementPrepareError, StoreConnectionError
from ..models.config_models import DatabaseConfig

"""Relational store handles.

A store exposes the small surface the migration needs:
- fetch_all(): read-only queries (schema inspection)
- prepare(): compile one parameterized statement, returned as a PreparedStatement
- placeholders(): the dialect's positional parameter markers
- close()

Both stores run in autocommit mode: every executed INSERT commits on its own,
so a failing row never rolls back rows that were already inserted.

Driver exceptions are translated here so callers only deal with
StatementPrepareError / StatementExecutionError / StoreConnectionError.
"""

__all__ = [
    "Store",
    "PreparedStatement",
    "SqliteStore",
    "PostgresStore",
    "open_store",
    "quote_ident",
    "resolve_dsn",
]

logger = logging.getLogger(__name__)


def quote_ident(name: str) -> str:
    """Quote an SQL identifier (table / column) with double quotes."""
    return '"' + name.replace('"', '""') + '"'


def _trace_sql(statement: str) -> None:
    logger.debug(f"sql: {statement}")


class PreparedStatement:
    """A compiled statement reused for every row, strictly sequentially."""

    sql: str

    def run(self, values: Sequence[Any]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def finalize(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class Store:
    dialect = "generic"
    target = ""

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:  # pragma: no cover
        raise NotImplementedError

    def prepare(self, sql: str, param_count: int) -> PreparedStatement:  # pragma: no cover
        raise NotImplementedError

    def placeholders(self, count: int) -> list[str]:  # pragma: no cover
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover
        raise NotImplementedError

    def __enter__(self) -> Store:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


# --------------------------------------------------------------------------- sqlite

class SqliteStatement(PreparedStatement):
    """sqlite3 statement bound to one cursor.

    The sqlite3 module keeps compiled statements in a per-connection cache keyed
    by SQL text, so executing the same text on the same cursor reuses the
    statement compiled in SqliteStore.prepare().
    """

    def __init__(self, conn: sqlite3.Connection, sql: str) -> None:
        self.sql = sql
        self._cursor: sqlite3.Cursor | None = conn.cursor()

    def run(self, values: Sequence[Any]) -> None:
        if self._cursor is None:
            raise StatementExecutionError("statement already finalized")
        try:
            self._cursor.execute(self.sql, tuple(values))
        except (sqlite3.Error, OverflowError) as e:
            raise StatementExecutionError(str(e)) from e

    def finalize(self) -> None:
        if self._cursor is None:
            return
        cursor, self._cursor = self._cursor, None
        try:
            cursor.close()
        except sqlite3.Error as e:
            raise StatementExecutionError(f"finalize failed: {e}") from e


class SqliteStore(Store):
    """Existing SQLite database file opened read-write (never created)."""

    dialect = "sqlite"

    def __init__(self, path: str | Path, *, verbose: bool = False) -> None:
        file = Path(path)
        self.target = str(file)
        if not file.is_file():
            raise StoreConnectionError(f"database file not found: {file}")
        uri = f"{file.resolve().as_uri()}?mode=rw"
        self._conn: sqlite3.Connection | None = None
        try:
            conn = sqlite3.connect(uri, uri=True, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreConnectionError(f"cannot open database {file}: {e}") from e
        try:
            # sqlite opens lazily; touch the header so non-database files fail here
            conn.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as e:
            conn.close()
            raise StoreConnectionError(f"cannot open database {file}: {e}") from e
        if verbose:
            conn.set_trace_callback(_trace_sql)
        self._conn = conn

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreConnectionError(f"database {self.target} is closed")
        return self._conn

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        try:
            return self.connection.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StatementExecutionError(str(e)) from e

    def prepare(self, sql: str, param_count: int) -> PreparedStatement:
        conn = self.connection
        try:
            # EXPLAIN compiles without executing: unknown tables/columns fail here
            conn.execute(f"EXPLAIN {sql}", (None,) * param_count).fetchall()
        except sqlite3.Error as e:
            raise StatementPrepareError(f"cannot prepare statement [{sql}]: {e}") from e
        return SqliteStatement(conn, sql)

    def placeholders(self, count: int) -> list[str]:
        return ["?"] * count

    def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        conn.close()


# ----------------------------------------------------------------------- postgres

class PostgresStatement(PreparedStatement):
    """Server-side prepared statement (PREPARE / EXECUTE / DEALLOCATE)."""

    def __init__(self, cursor: Any, name: str, sql: str, param_count: int, verbose: bool = False) -> None:
        self.sql = sql
        self.name = name
        self._cursor = cursor
        self._verbose = verbose
        self._execute_sql = f"EXECUTE {name} ({', '.join(['%s'] * param_count)})"

    def run(self, values: Sequence[Any]) -> None:
        if self._cursor is None:
            raise StatementExecutionError("statement already finalized")
        if self._verbose:
            _trace_sql(self._execute_sql)
        try:
            self._cursor.execute(self._execute_sql, tuple(values))
        except psycopg2.Error as e:
            raise StatementExecutionError(str(e).strip()) from e

    def finalize(self) -> None:
        if self._cursor is None:
            return
        cursor, self._cursor = self._cursor, None
        try:
            cursor.execute(f"DEALLOCATE {self.name}")
        except psycopg2.Error as e:
            raise StatementExecutionError(f"finalize failed: {str(e).strip()}") from e
        finally:
            cursor.close()


class PostgresStore(Store):
    """PostgreSQL connection via psycopg2, autocommit."""

    dialect = "postgres"
    _statement_ids = count(1)

    def __init__(self, dsn: str, *, verbose: bool = False) -> None:
        self._verbose = verbose
        self._conn: Any = None
        try:
            conn = psycopg2.connect(dsn)
        except psycopg2.Error as e:
            raise StoreConnectionError(f"cannot connect to postgres: {str(e).strip()}") from e
        conn.autocommit = True
        self._conn = conn
        self.target = conn.dsn  # password is masked by psycopg2

    def _cursor(self) -> Any:
        if self._conn is None:
            raise StoreConnectionError("postgres connection is closed")
        return self._conn.cursor()

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        if self._verbose:
            _trace_sql(sql)
        try:
            with self._cursor() as cur:
                cur.execute(sql, tuple(params))
                return cur.fetchall()
        except psycopg2.Error as e:
            raise StatementExecutionError(str(e).strip()) from e

    def prepare(self, sql: str, param_count: int) -> PreparedStatement:
        name = f"sheetmigrate_insert_{next(self._statement_ids)}"
        prepare_sql = f"PREPARE {name} AS {sql}"
        if self._verbose:
            _trace_sql(prepare_sql)
        cur = self._cursor()
        try:
            cur.execute(prepare_sql)
        except psycopg2.Error as e:
            cur.close()
            raise StatementPrepareError(f"cannot prepare statement [{sql}]: {str(e).strip()}") from e
        return PostgresStatement(cur, name, sql, param_count, verbose=self._verbose)

    def placeholders(self, count: int) -> list[str]:
        return [f"${i}" for i in range(1, count + 1)]

    def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        conn.close()


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Resolve the PostgreSQL DSN.

    Priority:
        1. DATABASE_URL / PGDSN environment variables (.env is loaded by the CLI)
        2. ``dsn`` from the config file
        3. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE,
           each falling back to the config's database section
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def open_store(db_cfg: DatabaseConfig, target: str | None = None) -> Iterator[Store]:
    """Open the store for one run and always close it on exit.

    ``target`` is the database file for sqlite, or an explicit DSN for postgres
    (resolved with resolve_dsn() when omitted).
    """
    store: Store
    if db_cfg.driver == "sqlite":
        if not target:
            raise StoreConnectionError("sqlite driver needs a database file path")
        store = SqliteStore(target, verbose=db_cfg.verbose)
    elif db_cfg.driver == "postgres":
        store = PostgresStore(target or resolve_dsn(db_cfg), verbose=db_cfg.verbose)
    else:
        raise StoreConnectionError(f"unsupported database driver: {db_cfg.driver}")
    logger.debug(f"store opened: {store.dialect} {store.target}")
    try:
        yield store
    finally:
        store.close()
        logger.debug(f"store closed: {store.dialect} {store.target}")
