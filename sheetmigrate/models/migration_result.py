from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .column_mapping import ColumnMapping
from .insertion_report import InsertionReport

"""Migration run models: stage/status enums and the run result.

State transitions are linear, no back-edges:
SELECT_SOURCE -> SELECT_TARGET -> SELECT_TABLE -> INSPECT_SCHEMA -> READ_SOURCE
-> RECONCILE -> PROJECT -> INSERT -> REPORT
"""

__all__ = [
    "MigrationStage",
    "MigrationStatus",
    "MigrationResult",
]


class MigrationStage(Enum):
    SELECT_SOURCE = "select_source"
    SELECT_TARGET = "select_target"
    SELECT_TABLE = "select_table"
    INSPECT_SCHEMA = "inspect_schema"
    READ_SOURCE = "read_source"
    RECONCILE = "reconcile"
    PROJECT = "project"
    INSERT = "insert"
    REPORT = "report"


class MigrationStatus(Enum):
    """Outcome of a run.

    - SUCCESS: every row inserted
    - PARTIAL: run completed, one or more rows failed
    - FAILED: terminal failure before or during insertion setup
    """
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationResult:
    """Result of one migration run (what the CLI reports and maps to an exit code)."""
    status: MigrationStatus
    stage: MigrationStage  # last stage reached (the failing one when status is FAILED)
    start_time: datetime
    end_time: datetime
    source: str | None = None
    target: str | None = None
    table: str | None = None
    mapping: ColumnMapping | None = None
    report: InsertionReport | None = None
    error: str | None = None  # human-readable cause chain for FAILED
    error_type: str | None = None

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def attempted(self) -> int:
        return self.report.attempted if self.report else 0

    @property
    def succeeded(self) -> int:
        return self.report.succeeded if self.report else 0

    @property
    def failed(self) -> int:
        return self.report.failed if self.report else 0
