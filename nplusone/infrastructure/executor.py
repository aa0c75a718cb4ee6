"""
Query execution boundary used by every repository and strategy.

Strategies receive a `QueryExecutor` through their constructor instead of
reaching for a global connection, so tests can swap in an in-memory fake.
`PsycopgExecutor` is the production implementation over a psycopg connection.

Usage:
    with executor.query(SQL, (days,), label="orders by days") as rows:
        for row in rows:
            ...
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Optional, Protocol, Sequence, runtime_checkable

import psycopg

from nplusone.errors import ConnectivityError
from nplusone.utils.logging import get_logger

log = get_logger(__name__)

Row = Sequence[Any]


@runtime_checkable
class QueryExecutor(Protocol):
    """
    Minimal query capability required by the fetch strategies.

    Attributes
    ----------
    round_trips : int
        Number of queries issued so far through this executor.
    """

    round_trips: int

    def query(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> ContextManager[Iterator[Row]]:
        """Execute `sql` and yield an iterator over its rows; release the cursor on exit."""
        ...

    def query_one(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> Optional[Row]:
        """Execute `sql` and return its first row, or None when there is none."""
        ...


class PsycopgExecutor:
    """
    QueryExecutor over a single psycopg connection.

    The connection is borrowed, not owned: closing it is the caller's job
    (usually the pool's `connection()` context manager).
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn
        self.round_trips = 0

    @contextmanager
    def query(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> Iterator[Iterator[Row]]:
        self.round_trips += 1
        log.debug("Executing query", extra={"query": label, "params": len(params)})
        try:
            cur = self._conn.cursor()
        except psycopg.Error as exc:
            raise ConnectivityError(f"failed to open cursor for {label}: {exc}", query=label) from exc

        try:
            try:
                cur.execute(sql, tuple(params))
            except psycopg.Error as exc:
                raise ConnectivityError(f"failed to execute {label}: {exc}", query=label) from exc
            yield _iter_rows(cur, label)
        finally:
            _close_cursor(cur, label)

    def query_one(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> Optional[Row]:
        with self.query(sql, params, label=label) as rows:
            return next(rows, None)


def _iter_rows(cur: psycopg.Cursor, label: str) -> Iterator[Row]:
    """Yield rows one at a time, wrapping driver errors raised mid-stream."""
    while True:
        try:
            row = cur.fetchone()
        except psycopg.Error as exc:
            raise ConnectivityError(f"failed to read rows of {label}: {exc}", query=label) from exc
        if row is None:
            return
        yield row


def _close_cursor(cur: psycopg.Cursor, label: str) -> None:
    """Close a cursor; a failure here is logged because the result is already decided."""
    try:
        cur.close()
    except Exception as exc:  # noqa: BLE001 - release failures must not mask the result
        log.warning(
            "cursor.close() failed",
            extra={"query": label, "error": str(exc)},
        )


__all__ = ["QueryExecutor", "PsycopgExecutor", "Row"]
