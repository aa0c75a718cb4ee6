"""
Join strategies: a single LEFT OUTER JOIN query, regrouped client-side.

The query orders by (parent key, child key); grouping keeps first-seen order,
so the aggregates come out in that same order.
"""

from __future__ import annotations

from typing import Any, List

from nplusone.domain.models import EmployeeWithDepartment, OrderWithDetails
from nplusone.repository.assembly import group_join_rows
from nplusone.repository.employees import fetch_employee_join_rows
from nplusone.repository.orders import fetch_order_join_rows
from nplusone.strategies.abstract import AbstractFetchStrategy


class JoinOrderStrategy(AbstractFetchStrategy[OrderWithDetails]):
    """
    orders LEFT JOIN order_details in one round trip.

    An order without detail lines comes back as one row with NULL detail
    columns and ends up with `details=()`.
    """

    name: str = "join"
    description: str = "Single LEFT JOIN, grouped by order_id in memory."

    def fetch(self, fetch_filter: Any = None) -> List[OrderWithDetails]:
        days = int(fetch_filter)
        pairs = fetch_order_join_rows(self.executor, days)
        groups = group_join_rows(pairs, lambda order: order.order_id)
        return [
            OrderWithDetails(order=order, details=tuple(details)) for order, details in groups
        ]


class JoinEmployeeStrategy(AbstractFetchStrategy[EmployeeWithDepartment]):
    """
    employees LEFT JOIN departments in one round trip.
    """

    name: str = "join"
    description: str = "Single LEFT JOIN on department_id."

    def fetch(self, fetch_filter: Any = None) -> List[EmployeeWithDepartment]:
        del fetch_filter
        pairs = fetch_employee_join_rows(self.executor)
        groups = group_join_rows(pairs, lambda employee: employee.employee_id)
        # many-to-one: at most one department per employee
        return [
            EmployeeWithDepartment(
                employee=employee, department=departments[0] if departments else None
            )
            for employee, departments in groups
        ]


__all__ = ["JoinOrderStrategy", "JoinEmployeeStrategy"]
