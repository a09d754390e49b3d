from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import enable_debug, log_summary, setup_logging
from ..models.config_models import MatchPolicy, MigrateConfig
from ..models.migration_result import MigrationResult, MigrationStatus
from ..services.orchestrator import run_migration
from ..services.preferences import PathPreferences
from ..services.selection import PathSelector, TableChooser
from ..services.summary import render_failure_lines, render_summary_line

"""CLI entrypoint.

Flow:
- load .env (python-dotenv, overriding) and the YAML config
- select spreadsheet, database and table (prompting for anything not given
  on the command line; last used paths are offered as defaults)
- run the migration and print the SUMMARY line

Exit codes: 0 all rows inserted, 2 completed with failed rows, 1 terminal failure.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so DATABASE_URL / PG* values take precedence over the config file."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheetmigrate",
        description="Migrate the first sheet of a spreadsheet into a database table",
    )
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH} if present)")
    p.add_argument("--source", help="Spreadsheet file (.xlsx / .xls)")
    p.add_argument("--target", help="SQLite database file, or a DSN for the postgres driver")
    p.add_argument("--table", help="Target table name")
    p.add_argument("--exact", action="store_true", help="Match column names exactly (default: case-insensitive)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_config(config_path: Path | None) -> MigrateConfig:
    # an explicitly given config must exist; the default one is optional
    if config_path is not None:
        return load_config(config_path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def exit_code_for(result: MigrationResult) -> int:
    if result.status is MigrationStatus.FAILED:
        return EXIT_FATAL
    if result.status is MigrationStatus.PARTIAL:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up the test runner's argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        enable_debug()

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    if args.exact:
        cfg = replace(cfg, matching=MatchPolicy.EXACT)

    preferences = PathPreferences(Path(cfg.preferences_file) if cfg.preferences_file else None).load()
    selector = PathSelector(preferences, max_attempts=cfg.max_prompt_attempts)
    chooser = TableChooser(max_attempts=cfg.max_prompt_attempts)

    try:
        result = run_migration(
            cfg,
            selector,
            chooser,
            source=args.source,
            target=args.target,
            table=args.table,
            error_log=ErrorLogBuffer(Path(cfg.logs_directory)),
        )
    finally:
        preferences.save()

    for line in render_failure_lines(result):
        logger.error(line)
    if result.status is MigrationStatus.FAILED:
        logger.error(f"migration failed at {result.stage.value}: {result.error}")

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return exit_code_for(result)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
