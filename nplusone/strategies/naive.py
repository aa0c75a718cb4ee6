"""
Naive (baseline) strategies: one query for the parents, then one query per parent.

This is the N+1 pattern the benchmark exists to demonstrate. Round trips grow
linearly with the number of parents (1 + N), which is what the join and batch
strategies are compared against.
"""

from __future__ import annotations

from typing import Any, List

from nplusone.domain.models import EmployeeWithDepartment, OrderWithDetails
from nplusone.repository.employees import fetch_all_employees, fetch_department_by_id
from nplusone.repository.orders import fetch_details_by_order_id, fetch_orders_by_days
from nplusone.strategies.abstract import AbstractFetchStrategy


class NaiveOrderStrategy(AbstractFetchStrategy[OrderWithDetails]):
    """
    Fetch recent orders, then query the detail lines of each order separately.

    Any failing query aborts the whole fetch; nothing partial is returned.
    """

    name: str = "naive"
    description: str = "N+1: one details query per order (loop over DB)."

    def fetch(self, fetch_filter: Any = None) -> List[OrderWithDetails]:
        days = int(fetch_filter)
        orders = fetch_orders_by_days(self.executor, days)

        result: List[OrderWithDetails] = []
        for order in orders:
            details = fetch_details_by_order_id(self.executor, order.order_id)
            result.append(OrderWithDetails(order=order, details=tuple(details)))
        return result


class NaiveEmployeeStrategy(AbstractFetchStrategy[EmployeeWithDepartment]):
    """
    Fetch all employees, then look up each employee's department separately.

    A department id that matches nothing gives `department=None`. The lookup is
    still issued for a NULL id so the round-trip count stays 1 + N.
    """

    name: str = "naive"
    description: str = "N+1: one department lookup per employee."

    def fetch(self, fetch_filter: Any = None) -> List[EmployeeWithDepartment]:
        del fetch_filter
        employees = fetch_all_employees(self.executor)

        result: List[EmployeeWithDepartment] = []
        for employee in employees:
            department = fetch_department_by_id(self.executor, employee.department_id)
            result.append(EmployeeWithDepartment(employee=employee, department=department))
        return result


__all__ = ["NaiveOrderStrategy", "NaiveEmployeeStrategy"]
