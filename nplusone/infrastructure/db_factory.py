"""
Database connection factory utilities for the N+1 query benchmark.

Provides centralized management of PostgreSQL connections and the shared
connection pool. The PoolManager singleton ensures the pool is closed on
application exit.

Every connection handed out runs in autocommit mode: the benchmark issues
read-only queries and must not hold a transaction open between them.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from nplusone.config import get_settings
from nplusone.infrastructure.executor import PsycopgExecutor
from nplusone.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn() -> str:
    """Compose a DSN string from settings."""
    settings = get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def apply_statement_timeout(conn: Connection, timeout_ms: int) -> None:
    """Set a per-session statement timeout; 0 leaves the server default in place."""
    if timeout_ms <= 0:
        return
    conn.execute(f"SET statement_timeout = {int(timeout_ms)}")


def _configure_connection(conn: Connection) -> None:
    """Pool hook: prepare each new connection before it is handed out."""
    conn.autocommit = True
    apply_statement_timeout(conn, get_settings().db_statement_timeout_ms)


class PoolManager:
    """
    Thread-safe singleton for managing the database connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._sync_pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(self, min_size: int = 1, max_size: int = 10) -> ConnectionPool:
        """
        Get or create the synchronous connection pool.

        Parameters
        ----------
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.
        """
        with self._lock:
            if self._sync_pool is None:
                self._sync_pool = ConnectionPool(
                    conninfo=build_dsn(),
                    min_size=min_size,
                    max_size=max_size,
                    configure=_configure_connection,
                    open=True,
                )
                log.debug("Connection pool opened", extra={"min_size": min_size, "max_size": max_size})
            return self._sync_pool

    def close_all(self) -> None:
        """
        Close the managed pool and release its connections.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._sync_pool is not None:
                try:
                    self._sync_pool.close()
                except Exception as exc:  # noqa: BLE001 - best-effort cleanup at exit
                    log.warning("Pool close failed", extra={"error": str(exc)})
                finally:
                    self._sync_pool = None


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated autocommit connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off work such as data loading. Prefer the pool for benchmarks.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn(), autocommit=True)


def get_sync_pool(min_size: Optional[int] = None, max_size: Optional[int] = None) -> ConnectionPool:
    """
    Get or create the synchronous connection pool via PoolManager.

    Sizes default to `DB_POOL_MIN_SIZE` / `DB_POOL_MAX_SIZE`.
    """
    settings = get_settings()
    manager = PoolManager()
    return manager.get_sync_pool(
        min_size=min_size or settings.db_pool_min_size,
        max_size=max_size or settings.db_pool_max_size,
    )


@contextmanager
def open_executor() -> Generator[PsycopgExecutor, None, None]:
    """
    Borrow a pooled connection and wrap it in a PsycopgExecutor.

    Example
    -------
        with open_executor() as executor:
            orders = BatchOrderStrategy(executor).fetch(30)
    """
    pool = get_sync_pool()
    with pool.connection() as conn:
        yield PsycopgExecutor(conn)


__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
    "get_sync_connection",
    "get_sync_pool",
    "open_executor",
]
