"""
Row counts per benchmark table, shown by the `stats` CLI command.
"""

from __future__ import annotations

from typing import Dict, Optional

from nplusone.errors import RepositoryError
from nplusone.infrastructure.executor import QueryExecutor
from nplusone.repository.mapping import first_column
from nplusone.utils.logging import get_logger

log = get_logger(__name__)

# Fixed allowlist; table names are interpolated into SQL.
TABLES = ("orders", "order_details", "employees", "departments")


def count_rows(executor: QueryExecutor) -> Dict[str, Optional[int]]:
    """
    Count rows in each benchmark table.

    A failing table is reported as None and does not stop the remaining counts.
    """
    counts: Dict[str, Optional[int]] = {}
    for table in TABLES:
        label = f"count {table}"
        try:
            row = executor.query_one(f"SELECT COUNT(*) FROM {table}", label=label)
            counts[table] = int(first_column(row, label)) if row is not None else 0
        except RepositoryError as exc:
            log.warning("Table count failed", extra={"table": table, "error": str(exc)})
            counts[table] = None
    return counts


__all__ = ["TABLES", "count_rows"]
