"""
Queries against `orders` and `order_details`.

Each function issues exactly one query (or none, for an empty key set) and
returns fully mapped models; the cursor is released before returning.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from nplusone.domain.models import Order, OrderDetail
from nplusone.infrastructure.executor import QueryExecutor
from nplusone.repository.assembly import membership_clause
from nplusone.repository.mapping import (
    DETAIL_COLUMNS,
    ORDER_COLUMNS,
    detail_from_row,
    order_from_row,
    split_order_join_row,
)

ORDERS_BY_DAYS = "orders by days"
DETAILS_BY_ORDER_ID = "details by order id"
DETAILS_BY_ORDER_IDS = "details by order ids"
ORDERS_JOIN_DETAILS = "orders join details"

_ORDERS_BY_DAYS_SQL = f"""
    SELECT {ORDER_COLUMNS}
    FROM orders
    WHERE order_date >= CURRENT_DATE - %s::integer
    ORDER BY order_id
"""

_DETAILS_BY_ORDER_ID_SQL = f"""
    SELECT {DETAIL_COLUMNS}
    FROM order_details
    WHERE order_id = %s
    ORDER BY detail_id
"""

_DETAILS_BY_ORDER_IDS_SQL = """
    SELECT {columns}
    FROM order_details
    WHERE {predicate}
    ORDER BY order_id, detail_id
"""

_ORDERS_JOIN_DETAILS_SQL = """
    SELECT
        o.order_id,
        o.customer_id,
        o.customer_name,
        o.order_date,
        o.total_amount,
        o.status,
        od.detail_id,
        od.product_id,
        od.product_name,
        od.quantity,
        od.unit_price
    FROM orders o
    LEFT JOIN order_details od ON o.order_id = od.order_id
    WHERE o.order_date >= CURRENT_DATE - %s::integer
    ORDER BY o.order_id, od.detail_id
"""


def fetch_orders_by_days(executor: QueryExecutor, days: int) -> List[Order]:
    """Orders placed within the last `days` days, ordered by `order_id`."""
    with executor.query(_ORDERS_BY_DAYS_SQL, (days,), label=ORDERS_BY_DAYS) as rows:
        return [order_from_row(row, ORDERS_BY_DAYS) for row in rows]


def fetch_details_by_order_id(executor: QueryExecutor, order_id: int) -> List[OrderDetail]:
    with executor.query(_DETAILS_BY_ORDER_ID_SQL, (order_id,), label=DETAILS_BY_ORDER_ID) as rows:
        return [detail_from_row(row, DETAILS_BY_ORDER_ID) for row in rows]


def fetch_details_by_order_ids(
    executor: QueryExecutor, order_ids: Sequence[int]
) -> List[OrderDetail]:
    """
    Details for every order in `order_ids`, ordered by (order_id, detail_id).

    An empty id list returns [] without touching the database.
    """
    if not order_ids:
        return []
    predicate, params = membership_clause("order_id", order_ids)
    sql = _DETAILS_BY_ORDER_IDS_SQL.format(columns=DETAIL_COLUMNS, predicate=predicate)
    with executor.query(sql, params, label=DETAILS_BY_ORDER_IDS) as rows:
        return [detail_from_row(row, DETAILS_BY_ORDER_IDS) for row in rows]


def fetch_order_join_rows(
    executor: QueryExecutor, days: int
) -> List[Tuple[Order, Optional[OrderDetail]]]:
    """Flattened LEFT JOIN rows, split into (order, detail-or-None) pairs."""
    with executor.query(_ORDERS_JOIN_DETAILS_SQL, (days,), label=ORDERS_JOIN_DETAILS) as rows:
        return [split_order_join_row(row, ORDERS_JOIN_DETAILS) for row in rows]


__all__ = [
    "ORDERS_BY_DAYS",
    "DETAILS_BY_ORDER_ID",
    "DETAILS_BY_ORDER_IDS",
    "ORDERS_JOIN_DETAILS",
    "fetch_orders_by_days",
    "fetch_details_by_order_id",
    "fetch_details_by_order_ids",
    "fetch_order_join_rows",
]
