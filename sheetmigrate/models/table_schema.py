from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "TableSchema",
]


@dataclass(frozen=True)
class TableSchema:
    """Column names of one table in the store's declaration order.

    Retrieved fresh for every run and never mutated afterwards.
    """
    table: str
    columns: tuple[str, ...]

    def __contains__(self, column: object) -> bool:
        return column in self.columns

    def __len__(self) -> int:
        return len(self.columns)
