"""Domain models for the spreadsheet -> table migration tool."""

from .column_mapping import ColumnMapping
from .config_models import DatabaseConfig, MatchPolicy, MigrateConfig
from .error_record import ErrorRecord
from .insertion_report import InsertionReport, RowFailure
from .migration_result import MigrationResult, MigrationStage, MigrationStatus
from .table_schema import TableSchema

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "MatchPolicy",
    "MigrateConfig",
    # Schema / mapping models
    "TableSchema",
    "ColumnMapping",
    # Result models
    "ErrorRecord",
    "InsertionReport",
    "RowFailure",
    "MigrationResult",
    "MigrationStage",
    "MigrationStatus",
]
