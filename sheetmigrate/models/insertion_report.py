from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import RowInsertError

"""InsertionReport model: outcome of one insert_rows() call.

Row indexes are 0-based positions in the projected row sequence. Failures are
kept in input order.
"""

__all__ = [
    "RowFailure",
    "InsertionReport",
]


@dataclass(frozen=True)
class RowFailure:
    index: int  # 0-based row index in the input sequence
    error: RowInsertError

    @property
    def message(self) -> str:
        return self.error.message


@dataclass
class InsertionReport:
    """Counts and per-row failures for one table insert.

    Attributes:
        table: Target table name
        attempted: Rows handed to the prepared statement
        succeeded: Rows that were executed without error
        failures: (index, error) for every failed row, in input order
        finalize_error: Message from a failed statement finalization, if any
    """
    table: str
    attempted: int = 0
    succeeded: int = 0
    failures: list[RowFailure] = field(default_factory=list)
    finalize_error: str | None = None

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0

    def record_success(self) -> None:
        self.attempted += 1
        self.succeeded += 1

    def record_failure(self, error: RowInsertError) -> None:
        self.attempted += 1
        self.failures.append(RowFailure(index=error.index, error=error))
