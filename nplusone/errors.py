"""
Exception hierarchy for query execution and row mapping failures.

A lookup that finds nothing is not an error: repositories return ``None`` for
a missing associated entity and an empty tuple for a missing child collection.
"""

from __future__ import annotations

from typing import Optional


class RepositoryError(Exception):
    """Base exception for failures while fetching aggregates."""

    def __init__(self, message: str, query: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.query = query


class ConnectivityError(RepositoryError):
    """The database rejected a query or the connection failed mid-query."""


class ScanError(RepositoryError):
    """A result row did not match the column list expected by its mapper."""


__all__ = ["RepositoryError", "ConnectivityError", "ScanError"]
