"""
Repository package: one module per table pair, plus row mapping and the
client-side grouping helpers shared by the join and batch strategies.
"""

from nplusone.repository.assembly import (
    distinct_keys,
    group_by_key,
    group_join_rows,
    membership_clause,
)

__all__ = [
    "distinct_keys",
    "group_by_key",
    "group_join_rows",
    "membership_clause",
]
