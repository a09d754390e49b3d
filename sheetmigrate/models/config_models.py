from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config dataclasses for the spreadsheet -> table migration tool.

These are the typed results of config loading (sheetmigrate.config.loader).
The loader validates raw YAML against the bundled JSON schema and then fills
these objects, applying defaults for every optional key.
"""

__all__ = [
    "MatchPolicy",
    "DatabaseConfig",
    "MigrateConfig",
    "DEFAULT_SOURCE_EXTENSIONS",
    "DEFAULT_TARGET_EXTENSIONS",
]

DEFAULT_SOURCE_EXTENSIONS = (".xlsx", ".xls")
DEFAULT_TARGET_EXTENSIONS = (".db", ".sqlite", ".sqlite3")


class MatchPolicy(Enum):
    """Column name matching policy used by the reconciler.

    - CASE_INSENSITIVE: lowercase forms must be equal (default)
    - EXACT: names must be identical
    """
    CASE_INSENSITIVE = "case_insensitive"
    EXACT = "exact"


@dataclass(frozen=True)
class DatabaseConfig:
    """Target store connection settings.

    For ``sqlite`` the database file is chosen at run time (SELECT_TARGET).
    For ``postgres`` the DSN is resolved from environment variables first and
    these values are the fallback.
    """
    driver: str = "sqlite"  # sqlite | postgres
    dsn: str | None = None
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    verbose: bool = False  # log every SQL statement at DEBUG

    @property
    def is_file_backed(self) -> bool:
        return self.driver == "sqlite"


@dataclass(frozen=True)
class MigrateConfig:
    """Root configuration object for one migration run."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    matching: MatchPolicy = MatchPolicy.CASE_INSENSITIVE
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    target_extensions: tuple[str, ...] = DEFAULT_TARGET_EXTENSIONS
    preferences_file: str | None = ".sheetmigrate-paths.json"  # None: remember nothing on disk
    logs_directory: str = "logs"
    max_prompt_attempts: int = 3
