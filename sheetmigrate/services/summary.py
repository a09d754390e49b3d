from __future__ import annotations

from ..models.migration_result import MigrationResult, MigrationStatus

"""SUMMARY line and per-row failure lines for a finished run."""

__all__ = [
    "format_seconds",
    "render_summary_line",
    "render_failure_lines",
]


def format_seconds(value: float) -> str:
    """Format a duration without scientific notation or trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def render_summary_line(result: MigrationResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY status={status} table={table} attempted={n} succeeded={n} failed={n} elapsed_sec={s}
    plus `` stage={stage}`` when the run failed.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from sheetmigrate.models.migration_result import MigrationStage
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = MigrationResult(MigrationStatus.SUCCESS, MigrationStage.REPORT, t, t, table="people")
        >>> render_summary_line(r)
        'SUMMARY status=success table=people attempted=0 succeeded=0 failed=0 elapsed_sec=0'
    """
    line = (
        f"SUMMARY status={result.status.value} "
        f"table={result.table or '-'} "
        f"attempted={result.attempted} "
        f"succeeded={result.succeeded} "
        f"failed={result.failed} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
    if result.status is MigrationStatus.FAILED:
        line += f" stage={result.stage.value}"
    return line


def render_failure_lines(result: MigrationResult) -> list[str]:
    """One line per failed row: index and cause."""
    if result.report is None:
        return []
    return [f"row {f.index}: {f.message}" for f in result.report.failures]
