"""
Pytest configuration for the N+1 query benchmark.

Provides fixtures for:
- An in-memory executor that answers the repository queries by label
- Database connection management
- Test data seeding
- Settings override for integration tests
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Iterator, List, Optional, Sequence, Tuple

import psycopg
import pytest

from nplusone.config import Settings
from nplusone.errors import ConnectivityError
from nplusone.repository import employees as employee_queries
from nplusone.repository import orders as order_queries
from nplusone.repository.stats import TABLES

TODAY = date(2024, 6, 30)

Handler = Callable[[Tuple[Any, ...]], List[Tuple[Any, ...]]]


class FakeExecutor:
    """
    QueryExecutor fake keyed by query label.

    Records every call in `query_log` as (label, params) and counts round
    trips like the real executor. `failures` maps a label to the 1-based call
    number at which that label raises ConnectivityError.
    """

    def __init__(
        self,
        handlers: Dict[str, Handler],
        failures: Optional[Dict[str, int]] = None,
    ) -> None:
        self.handlers = handlers
        self.failures = failures or {}
        self.round_trips = 0
        self.query_log: List[Tuple[str, Tuple[Any, ...]]] = []

    def calls(self, label: str) -> int:
        return sum(1 for logged, _ in self.query_log if logged == label)

    @contextmanager
    def query(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> Iterator[Iterator[Tuple[Any, ...]]]:
        self.round_trips += 1
        self.query_log.append((label, tuple(params)))
        if self.failures.get(label) == self.calls(label):
            raise ConnectivityError(f"failed to execute {label}: connection reset", query=label)
        yield iter(self.handlers[label](tuple(params)))

    def query_one(
        self, sql: str, params: Sequence[Any] = (), label: str = "query"
    ) -> Optional[Tuple[Any, ...]]:
        with self.query(sql, params, label=label) as rows:
            return next(rows, None)


@dataclass
class InMemoryShop:
    """
    Table rows in the exact column order the repository queries select.

    departments: (department_id, department_name, location)
    employees:   (employee_id, first_name, last_name, email, department_id, hire_date, salary)
    orders:      (order_id, customer_id, customer_name, order_date, total_amount, status)
    details:     (detail_id, order_id, product_id, product_name, quantity, unit_price)
    """

    departments: List[Tuple[Any, ...]] = field(default_factory=list)
    employees: List[Tuple[Any, ...]] = field(default_factory=list)
    orders: List[Tuple[Any, ...]] = field(default_factory=list)
    details: List[Tuple[Any, ...]] = field(default_factory=list)
    today: date = TODAY

    def _recent_orders(self, days: int) -> List[Tuple[Any, ...]]:
        cutoff = self.today - timedelta(days=days)
        return sorted((o for o in self.orders if o[3] >= cutoff), key=lambda o: o[0])

    def _details_for(self, order_ids: Sequence[Any]) -> List[Tuple[Any, ...]]:
        wanted = set(order_ids)
        return sorted((d for d in self.details if d[1] in wanted), key=lambda d: (d[1], d[0]))

    def _departments_for(self, ids: Sequence[Any]) -> List[Tuple[Any, ...]]:
        wanted = set(ids)
        return sorted((d for d in self.departments if d[0] in wanted), key=lambda d: d[0])

    def _order_join(self, days: int) -> List[Tuple[Any, ...]]:
        rows: List[Tuple[Any, ...]] = []
        for order in self._recent_orders(days):
            details = self._details_for([order[0]])
            if not details:
                rows.append(order + (None,) * 5)
            for d in details:
                rows.append(order + (d[0], d[2], d[3], d[4], d[5]))
        return rows

    def _employee_join(self) -> List[Tuple[Any, ...]]:
        by_id = {d[0]: d for d in self.departments}
        return [
            e + by_id.get(e[4], (None, None, None))
            for e in sorted(self.employees, key=lambda e: e[0])
        ]

    def handlers(self) -> Dict[str, Handler]:
        handlers: Dict[str, Handler] = {
            order_queries.ORDERS_BY_DAYS: lambda p: self._recent_orders(p[0]),
            order_queries.DETAILS_BY_ORDER_ID: lambda p: self._details_for(p),
            order_queries.DETAILS_BY_ORDER_IDS: lambda p: self._details_for(p),
            order_queries.ORDERS_JOIN_DETAILS: lambda p: self._order_join(p[0]),
            employee_queries.ALL_EMPLOYEES: lambda p: sorted(self.employees, key=lambda e: e[0]),
            # NULL = NULL matches nothing
            employee_queries.DEPARTMENT_BY_ID: lambda p: self._departments_for(
                [k for k in p if k is not None]
            ),
            employee_queries.DEPARTMENTS_BY_IDS: lambda p: self._departments_for(p),
            employee_queries.EMPLOYEES_JOIN_DEPARTMENTS: lambda p: self._employee_join(),
        }
        sizes = {
            "orders": len(self.orders),
            "order_details": len(self.details),
            "employees": len(self.employees),
            "departments": len(self.departments),
        }
        for table in TABLES:
            handlers[f"count {table}"] = lambda p, n=sizes[table]: [(n,)]
        return handlers


def _order(order_id: int, days_ago: int, total: str = "100.00") -> Tuple[Any, ...]:
    return (
        order_id,
        order_id * 10,
        f"Customer {order_id}",
        TODAY - timedelta(days=days_ago),
        Decimal(total),
        "PENDING",
    )


def _detail(detail_id: int, order_id: int, quantity: int = 1) -> Tuple[Any, ...]:
    return (detail_id, order_id, 100 + detail_id, f"Product {detail_id}", quantity, Decimal("9.99"))


def _employee(employee_id: int, department_id: Optional[int]) -> Tuple[Any, ...]:
    return (
        employee_id,
        f"First{employee_id}",
        f"Last{employee_id}",
        f"emp{employee_id}@example.com",
        department_id,
        date(2020, 4, 1),
        Decimal("5000000.00"),
    )


@pytest.fixture
def shop() -> InMemoryShop:
    """
    Small dataset with every absence case:

    - orders 1 and 3 have details, order 2 has none, order 4 is outside a 30-day window;
    - employees 1 and 2 share department 10, employee 3 points at missing
      department 99, employee 4 has no department id.
    """
    return InMemoryShop(
        departments=[(10, "Sales", "Tokyo"), (20, "Engineering", None)],
        employees=[_employee(1, 10), _employee(2, 10), _employee(3, 99), _employee(4, None)],
        orders=[_order(1, 1), _order(2, 5), _order(3, 29), _order(4, 45)],
        details=[_detail(101, 1), _detail(102, 1, quantity=3), _detail(103, 3)],
    )


@pytest.fixture
def make_shop() -> Callable[..., InMemoryShop]:
    return InMemoryShop


@pytest.fixture
def employee_row() -> Callable[[int, Optional[int]], Tuple[Any, ...]]:
    return _employee


@pytest.fixture
def make_executor(shop: InMemoryShop) -> Callable[..., FakeExecutor]:
    """Factory for FakeExecutors over `shop`, with optional failures and handler overrides."""

    def _make(
        data: Optional[InMemoryShop] = None,
        failures: Optional[Dict[str, int]] = None,
        overrides: Optional[Dict[str, Handler]] = None,
    ) -> FakeExecutor:
        handlers = (data or shop).handlers()
        handlers.update(overrides or {})
        return FakeExecutor(handlers, failures=failures)

    return _make


@pytest.fixture
def executor(make_executor: Callable[..., FakeExecutor]) -> FakeExecutor:
    return make_executor()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "nplusone_demo"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the benchmark tables exist by applying db/init.sql (idempotent DDL).
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    db_connection.execute(init_sql_path.read_text(encoding="utf-8"))
    return True


@pytest.fixture(scope="function")
def clean_tables(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty every benchmark table before and after each test function.
    """
    truncate = "TRUNCATE order_details, orders, employees, departments"
    db_connection.execute(truncate)
    yield
    db_connection.execute(truncate)


@pytest.fixture(scope="function")
def seeded_db_small(db_connection: psycopg.Connection, clean_tables) -> Dict[str, int]:
    """
    Seed a small dataset through the data generator.

    Returns the number of rows seeded per table.
    """
    from scripts.generate_data import _copy_into_db, generate_tables

    with tempfile.TemporaryDirectory() as tmpdir:
        counts = generate_tables(
            Path(tmpdir),
            departments=5,
            employees=60,
            orders=80,
            max_details=4,
            history_days=60,
            orphan_ratio=0.1,
            unassigned_ratio=0.1,
            empty_order_ratio=0.1,
            seed=42,
        )
        _copy_into_db(db_connection, Path(tmpdir), truncate=False)

    return counts
