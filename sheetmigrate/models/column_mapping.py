from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

"""ColumnMapping model: spreadsheet column name -> table column name.

Built once per run by the reconciler. Both sides are unique, and the mapping
is total over the spreadsheet column set it was built from.
"""

__all__ = [
    "ColumnMapping",
]


@dataclass(frozen=True)
class ColumnMapping:
    pairs: tuple[tuple[str, str], ...]  # (spreadsheet, table) in spreadsheet column order
    target_order: tuple[str, ...] = ()  # mapped table columns in declaration order

    @property
    def source_columns(self) -> list[str]:
        return [src for src, _ in self.pairs]

    @property
    def target_columns(self) -> list[str]:
        """Mapped table columns, ordered by the table's declaration order."""
        if self.target_order:
            return list(self.target_order)
        return [dst for _, dst in self.pairs]

    def as_dict(self) -> dict[str, str]:
        return dict(self.pairs)

    def get(self, source_column: str) -> str | None:
        for src, dst in self.pairs:
            if src == source_column:
                return dst
        return None

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def describe(self) -> str:
        return ", ".join(f"{src}->{dst}" for src, dst in self.pairs)
