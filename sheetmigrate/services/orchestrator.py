from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..db.insert import insert_rows
from ..db.schema import inspect_table, list_tables
from ..db.store import Store, open_store
from ..errors import EmptySourceError, MigrationError, NoTablesError, describe_error
from ..excel.reader import read_rows
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.column_mapping import ColumnMapping
from ..models.config_models import DatabaseConfig, MigrateConfig
from ..models.insertion_report import InsertionReport
from ..models.migration_result import MigrationResult, MigrationStage, MigrationStatus
from .progress import RowProgress
from .projector import iter_project
from .reconcile import reconcile
from .selection import PathSelector, TableChooser

"""Migration orchestration: one spreadsheet into one table.

Stages run strictly in order, no back-edges:
SELECT_SOURCE -> SELECT_TARGET -> SELECT_TABLE -> INSPECT_SCHEMA -> READ_SOURCE
-> RECONCILE -> PROJECT -> INSERT -> REPORT

Any MigrationError before INSERT is terminal: nothing is inserted, the store
is closed, and the result carries the failing stage plus the cause chain.
Row failures during INSERT are collected in the InsertionReport and the run
still completes (status PARTIAL).
"""

__all__ = [
    "run_migration",
]

logger = logging.getLogger(__name__)

RowReader = Callable[[Path], Sequence[dict[str, Any]]]
StoreOpener = Callable[[DatabaseConfig, str | None], AbstractContextManager[Store]]


@dataclass
class _RunState:
    stage: MigrationStage = MigrationStage.SELECT_SOURCE
    source: str | None = None
    target: str | None = None
    table: str | None = None
    mapping: ColumnMapping | None = None

    def enter(self, stage: MigrationStage) -> None:
        self.stage = stage
        logger.debug(f"stage: {stage.value}")


def _source_name(state: _RunState) -> str:
    return Path(state.source).name if state.source else ""


def _migrate(
    config: MigrateConfig,
    state: _RunState,
    selector: PathSelector,
    chooser: TableChooser,
    presets: dict[str, str | None],
    reader: RowReader,
    store_opener: StoreOpener,
    show_progress: bool,
) -> InsertionReport:
    state.enter(MigrationStage.SELECT_SOURCE)
    state.source = selector.select_path("source", config.source_extensions, preset=presets["source"])
    logger.info(f"Selected source file: {state.source}")

    state.enter(MigrationStage.SELECT_TARGET)
    target = presets["target"]
    if config.database.is_file_backed:
        target = selector.select_path("target", config.target_extensions, preset=target)

    with store_opener(config.database, target) as store:
        state.target = store.target
        logger.info(f"Selected target database: {store.dialect} {store.target}")

        state.enter(MigrationStage.SELECT_TABLE)
        tables = list_tables(store)
        if not tables:
            raise NoTablesError("No tables found in the database.")
        state.table = chooser.choose_table(tables, preset=presets["table"])
        logger.info(f"Selected table: {state.table}")

        state.enter(MigrationStage.INSPECT_SCHEMA)
        schema = inspect_table(store, state.table)
        logger.info(f"Table columns: {', '.join(schema.columns)}")

        state.enter(MigrationStage.READ_SOURCE)
        rows = reader(Path(state.source))
        if not rows:
            raise EmptySourceError(f"spreadsheet has no data rows: {state.source}")
        # first row defines the spreadsheet column set
        spreadsheet_columns = list(rows[0].keys())
        logger.info(f"Spreadsheet columns: {', '.join(spreadsheet_columns)} ({len(rows)} rows)")

        state.enter(MigrationStage.RECONCILE)
        state.mapping = reconcile(spreadsheet_columns, schema.columns, config.matching)
        logger.info(f"Column mapping ({config.matching.value}): {state.mapping.describe()}")

        state.enter(MigrationStage.PROJECT)
        projected = iter_project(rows, state.mapping)

        state.enter(MigrationStage.INSERT)
        if show_progress:
            with RowProgress(len(rows)) as progress:
                return insert_rows(
                    store, state.table, state.mapping.target_columns, projected, row_callback=progress
                )
        return insert_rows(store, state.table, state.mapping.target_columns, projected)


def run_migration(
    config: MigrateConfig,
    selector: PathSelector,
    chooser: TableChooser,
    *,
    source: str | None = None,
    target: str | None = None,
    table: str | None = None,
    reader: RowReader = read_rows,
    store_opener: StoreOpener = open_store,
    error_log: ErrorLogBuffer | None = None,
    show_progress: bool = True,
) -> MigrationResult:
    """Run one migration and return its result.

    Args:
        config: loaded configuration
        selector: source / target file selection
        chooser: table selection
        source, target, table: preset answers (skip the matching prompt)
        reader: spreadsheet reader, ``path -> rows``
        store_opener: context manager factory ``(db_config, target) -> Store``
        error_log: buffer receiving one ErrorRecord per failure (flushed here)
        show_progress: display the tqdm row bar (TTY only)

    Only MigrationError subclasses are turned into a FAILED result; anything
    else propagates after the store has been closed.
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer(Path(config.logs_directory))
    state = _RunState()
    presets = {"source": source, "target": target, "table": table}

    try:
        report = _migrate(config, state, selector, chooser, presets, reader, store_opener, show_progress)
    except MigrationError as e:
        cause = describe_error(e)
        logger.error(f"{state.stage.value}: {cause}")
        error_log.append(
            ErrorRecord.create(
                source=_source_name(state),
                table=state.table or "",
                row=-1,
                error_type=e.error_type,
                db_message=cause,
            )
        )
        _flush_error_log(error_log)
        return MigrationResult(
            status=MigrationStatus.FAILED,
            stage=state.stage,
            start_time=start_time,
            end_time=datetime.now(UTC),
            source=state.source,
            target=state.target,
            table=state.table,
            mapping=state.mapping,
            report=None,
            error=cause,
            error_type=e.error_type,
        )

    state.enter(MigrationStage.REPORT)
    for failure in report.failures:
        error_log.append(
            ErrorRecord.create(
                source=_source_name(state),
                table=report.table,
                row=failure.index + 1,
                error_type=failure.error.error_type,
                db_message=failure.message,
            )
        )
    if report.finalize_error is not None:
        error_log.append(
            ErrorRecord.create(
                source=_source_name(state),
                table=report.table,
                row=-1,
                error_type="STATEMENT_FINALIZE_ERROR",
                db_message=report.finalize_error,
            )
        )
    _flush_error_log(error_log)

    status = MigrationStatus.SUCCESS if report.all_succeeded else MigrationStatus.PARTIAL
    logger.info(
        f"Inserted {report.succeeded}/{report.attempted} rows into {report.table} "
        f"({report.failed} failed)"
    )
    return MigrationResult(
        status=status,
        stage=state.stage,
        start_time=start_time,
        end_time=datetime.now(UTC),
        source=state.source,
        target=state.target,
        table=state.table,
        mapping=state.mapping,
        report=report,
    )


def _flush_error_log(error_log: ErrorLogBuffer) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")
        return
    if path is not None:
        logger.info(f"Error log written: {path}")
