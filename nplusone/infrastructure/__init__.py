"""
Infrastructure package for the N+1 query benchmark.

Centralizes database connectivity concerns (connection factory, pooling, and
the query executor boundary). Keep this layer focused on I/O and resource
management, decoupled from strategy/orchestrator logic.
"""

from nplusone.infrastructure.db_factory import (
    build_dsn,
    get_sync_connection,
    get_sync_pool,
    open_executor,
)
from nplusone.infrastructure.executor import PsycopgExecutor, QueryExecutor

__all__ = [
    "PsycopgExecutor",
    "QueryExecutor",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
    "open_executor",
]
