from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..errors import ColumnConflictError, UnmappableColumnError
from ..models.column_mapping import ColumnMapping
from ..models.config_models import MatchPolicy

"""Column reconciliation: spreadsheet column names -> table column names.

Policies:
- CASE_INSENSITIVE (default): names match when their lowercase forms are equal.
  When several table columns share a lowercase form, the first one in the
  table's declared order is picked, always.
- EXACT: names must be identical.

Reconciliation is all-or-nothing: one unmatched spreadsheet column fails the
whole mapping with UnmappableColumnError, and two spreadsheet columns landing
on the same table column fail with ColumnConflictError.
"""

__all__ = [
    "MatchPolicy",
    "reconcile",
    "match_key",
]

logger = logging.getLogger(__name__)

_MATCH_KEYS: dict[MatchPolicy, Callable[[str], str]] = {
    MatchPolicy.CASE_INSENSITIVE: str.lower,
    MatchPolicy.EXACT: str,
}


def match_key(policy: MatchPolicy) -> Callable[[str], str]:
    return _MATCH_KEYS[policy]


def _build_index(table_columns: Sequence[str], key: Callable[[str], str]) -> dict[str, str]:
    index: dict[str, str] = {}
    for col in table_columns:
        k = key(col)
        if k in index:
            logger.debug(f"table column '{col}' shadowed by '{index[k]}' (same match key '{k}')")
            continue
        index[k] = col
    return index


def reconcile(
    spreadsheet_columns: Sequence[str],
    table_columns: Sequence[str],
    policy: MatchPolicy = MatchPolicy.CASE_INSENSITIVE,
) -> ColumnMapping:
    """Map every spreadsheet column onto a table column.

    Raises:
        UnmappableColumnError: a spreadsheet column matches no table column
        ColumnConflictError: two spreadsheet columns match the same table column
    """
    key = match_key(policy)
    index = _build_index(table_columns, key)

    pairs: list[tuple[str, str]] = []
    claimed: dict[str, str] = {}  # table column -> spreadsheet column
    for src in spreadsheet_columns:
        target = index.get(key(src))
        if target is None:
            raise UnmappableColumnError(src, table_columns)
        if target in claimed:
            raise ColumnConflictError(src, claimed[target], target)
        claimed[target] = src
        pairs.append((src, target))

    target_order = tuple(col for col in table_columns if col in claimed)
    mapping = ColumnMapping(pairs=tuple(pairs), target_order=target_order)
    logger.debug(f"reconciled ({policy.value}): {mapping.describe()}")
    return mapping
