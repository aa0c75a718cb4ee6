"""
Row-to-model mapping, one function per query shape.

Each mapper unpacks the exact column list its query selects, so a query and
its mapper must be edited together. Any mismatch (wrong arity, a value the
model rejects) is raised as ScanError.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from nplusone.domain.models import Department, Employee, Order, OrderDetail
from nplusone.errors import ScanError
from nplusone.infrastructure.executor import Row

T = TypeVar("T")

ORDER_COLUMNS = "order_id, customer_id, customer_name, order_date, total_amount, status"
DETAIL_COLUMNS = "detail_id, order_id, product_id, product_name, quantity, unit_price"
EMPLOYEE_COLUMNS = "employee_id, first_name, last_name, email, department_id, hire_date, salary"
DEPARTMENT_COLUMNS = "department_id, department_name, location"


def _scan(label: str, row: Row, build: Callable[[Row], T]) -> T:
    try:
        return build(row)
    except (ValueError, TypeError, IndexError) as exc:
        raise ScanError(f"failed to scan {label} row: {exc}", query=label) from exc


def _order(row: Row) -> Order:
    order_id, customer_id, customer_name, order_date, total_amount, status = row
    return Order(
        order_id=order_id,
        customer_id=customer_id,
        customer_name=customer_name,
        order_date=order_date,
        total_amount=total_amount,
        status=status,
    )


def _detail(row: Row) -> OrderDetail:
    detail_id, order_id, product_id, product_name, quantity, unit_price = row
    return OrderDetail(
        detail_id=detail_id,
        order_id=order_id,
        product_id=product_id,
        product_name=product_name,
        quantity=quantity,
        unit_price=unit_price,
    )


def _employee(row: Row) -> Employee:
    employee_id, first_name, last_name, email, department_id, hire_date, salary = row
    return Employee(
        employee_id=employee_id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        department_id=department_id,
        hire_date=hire_date,
        salary=salary,
    )


def _department(row: Row) -> Department:
    department_id, department_name, location = row
    return Department(
        department_id=department_id,
        department_name=department_name,
        location=location,
    )


def order_from_row(row: Row, label: str = "order") -> Order:
    return _scan(label, row, _order)


def detail_from_row(row: Row, label: str = "order detail") -> OrderDetail:
    return _scan(label, row, _detail)


def employee_from_row(row: Row, label: str = "employee") -> Employee:
    return _scan(label, row, _employee)


def department_from_row(row: Row, label: str = "department") -> Department:
    return _scan(label, row, _department)


def split_order_join_row(row: Row, label: str = "order join") -> tuple[Order, Optional[OrderDetail]]:
    """
    Split a row of the orders LEFT JOIN order_details query.

    Columns: the six order columns, then detail_id, product_id, product_name,
    quantity, unit_price. The detail is None when detail_id is NULL (no match).
    """

    def build(values: Row) -> tuple[Order, Optional[OrderDetail]]:
        order_values, detail_values = values[:6], values[6:]
        if len(detail_values) != 5:
            raise ValueError(f"expected 11 columns, got {len(values)}")
        order = _order(order_values)
        detail_id, product_id, product_name, quantity, unit_price = detail_values
        if detail_id is None:
            return order, None
        detail = _detail((detail_id, order.order_id, product_id, product_name, quantity, unit_price))
        return order, detail

    return _scan(label, row, build)


def split_employee_join_row(
    row: Row, label: str = "employee join"
) -> tuple[Employee, Optional[Department]]:
    """
    Split a row of the employees LEFT JOIN departments query.

    Columns: the seven employee columns, then d.department_id, department_name,
    location. The department is None when the joined d.department_id is NULL.
    """

    def build(values: Row) -> tuple[Employee, Optional[Department]]:
        employee_values, department_values = values[:7], values[7:]
        if len(department_values) != 3:
            raise ValueError(f"expected 10 columns, got {len(values)}")
        employee = _employee(employee_values)
        if department_values[0] is None:
            return employee, None
        return employee, _department(department_values)

    return _scan(label, row, build)


def first_column(row: Row, label: str = "scalar") -> Any:
    return _scan(label, row, lambda values: values[0])


__all__ = [
    "ORDER_COLUMNS",
    "DETAIL_COLUMNS",
    "EMPLOYEE_COLUMNS",
    "DEPARTMENT_COLUMNS",
    "order_from_row",
    "detail_from_row",
    "employee_from_row",
    "department_from_row",
    "split_order_join_row",
    "split_employee_join_row",
    "first_column",
]
