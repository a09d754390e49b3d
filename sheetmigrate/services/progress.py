from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..db.insert import RowMetrics

"""Row progress display with tqdm (TTY only).

A single tqdm bar per insert; disabled when stdout is not a TTY so CI logs
do not fill up with control sequences.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Progress bar over the rows handed to insert_rows().

    Usable directly as the ``row_callback`` of insert_rows().
    """

    def __init__(self, total_rows: int, *, description: str = "Inserting rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.succeeded = 0
        self.failed = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def __call__(self, metrics: RowMetrics) -> None:
        if metrics.ok:
            self.succeeded += 1
        else:
            self.failed += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(ok=self.succeeded, failed=self.failed)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
