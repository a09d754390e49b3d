from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

One record per failed row, plus one record with row=-1 when the run halts
before insertion (the failing stage is carried in error_type).
Serialized as JSON Lines with a fixed key set.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Spreadsheet file name being migrated
        table: Target table name ("" when not selected yet)
        row: 1-based position among the non-empty data rows (header and blank
             rows not counted). -1 for run-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        db_message: Database error message or description
    """
    timestamp: str
    source: str
    table: str
    row: int
    error_type: str
    db_message: str

    @staticmethod
    def create(source: str, table: str, row: int, error_type: str, db_message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            table=table,
            row=row,
            error_type=error_type,
            db_message=db_message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
