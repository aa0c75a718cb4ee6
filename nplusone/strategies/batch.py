"""
Batch strategies: parents first, then every child in one IN-clause query.

Steps:
1. fetch parents ordered by key (1 query);
2. return early when there are none;
3. collect the distinct keys the second query needs;
4. fetch all matching children with `key IN (...)` (1 query);
5. group children by owning key in one pass;
6. attach each group to its parent in the original parent order.

Two round trips regardless of the parent count (one when nothing matches).
"""

from __future__ import annotations

from typing import Any, List

from nplusone.domain.models import EmployeeWithDepartment, OrderWithDetails
from nplusone.repository.assembly import distinct_keys, group_by_key
from nplusone.repository.employees import fetch_all_employees, fetch_departments_by_ids
from nplusone.repository.orders import fetch_details_by_order_ids, fetch_orders_by_days
from nplusone.strategies.abstract import AbstractFetchStrategy
from nplusone.utils.logging import get_logger

log = get_logger(__name__)


class BatchOrderStrategy(AbstractFetchStrategy[OrderWithDetails]):
    """
    Recent orders plus one `order_id IN (...)` query for all their details.
    """

    name: str = "batch"
    description: str = "Two queries: orders, then details via IN clause."

    def fetch(self, fetch_filter: Any = None) -> List[OrderWithDetails]:
        days = int(fetch_filter)
        orders = fetch_orders_by_days(self.executor, days)
        if not orders:
            return []

        order_ids = distinct_keys(order.order_id for order in orders)
        log.debug("Batch membership set", extra={"domain": "orders", "keys": len(order_ids)})
        details = fetch_details_by_order_ids(self.executor, order_ids)
        details_by_order = group_by_key(details, lambda detail: detail.order_id)

        return [
            OrderWithDetails(order=order, details=tuple(details_by_order.get(order.order_id, ())))
            for order in orders
        ]


class BatchEmployeeStrategy(AbstractFetchStrategy[EmployeeWithDepartment]):
    """
    All employees plus one `department_id IN (...)` query over the distinct
    department ids they reference.

    Many employees share a department, so the IN list is bounded by the
    number of distinct departments rather than the number of employees.
    """

    name: str = "batch"
    description: str = "Two queries: employees, then distinct departments via IN clause."

    def fetch(self, fetch_filter: Any = None) -> List[EmployeeWithDepartment]:
        del fetch_filter
        employees = fetch_all_employees(self.executor)
        if not employees:
            return []

        department_ids = distinct_keys(employee.department_id for employee in employees)
        log.debug(
            "Batch membership set",
            extra={"domain": "employees", "keys": len(department_ids), "parents": len(employees)},
        )
        departments = fetch_departments_by_ids(self.executor, department_ids)
        department_by_id = {department.department_id: department for department in departments}

        return [
            EmployeeWithDepartment(
                employee=employee,
                department=department_by_id.get(employee.department_id),
            )
            for employee in employees
        ]


__all__ = ["BatchOrderStrategy", "BatchEmployeeStrategy"]
