"""
Domain models for the N+1 query benchmark.

Defines the row schemas aligned with `db/init.sql` and the aggregate views the
strategies return. Every model is frozen: aggregates are assembled once per
fetch and never modified afterwards.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class Order(BaseModel):
    """
    Representation of a single row in the `orders` table.
    """

    order_id: int = Field(..., description="Primary key.")
    customer_id: int = Field(..., description="Customer identifier.")
    customer_name: str = Field(..., description="Customer display name.")
    order_date: date = Field(..., description="Date the order was placed.")
    total_amount: Decimal = Field(..., description="Order total.")
    status: str = Field("PENDING", description="Order workflow status.")

    model_config = _FROZEN


class OrderDetail(BaseModel):
    """
    Representation of a single row in the `order_details` table.
    """

    detail_id: int = Field(..., description="Primary key.")
    order_id: int = Field(..., description="Owning order (foreign key).")
    product_id: int = Field(..., description="Product identifier.")
    product_name: str = Field(..., description="Product display name.")
    quantity: int = Field(..., description="Ordered quantity.")
    unit_price: Decimal = Field(..., description="Price per unit.")

    model_config = _FROZEN


class OrderWithDetails(BaseModel):
    """An order paired with its detail lines, ordered by `detail_id`."""

    order: Order
    details: Tuple[OrderDetail, ...] = Field(default_factory=tuple)

    model_config = _FROZEN


class Department(BaseModel):
    """
    Representation of a single row in the `departments` table.
    """

    department_id: int = Field(..., description="Primary key.")
    department_name: str = Field(..., description="Department name.")
    location: Optional[str] = Field(None, description="Office location.")

    model_config = _FROZEN


class Employee(BaseModel):
    """
    Representation of a single row in the `employees` table.
    """

    employee_id: int = Field(..., description="Primary key.")
    first_name: str
    last_name: str
    email: str
    department_id: Optional[int] = Field(None, description="Department reference (may dangle).")
    hire_date: Optional[date] = None
    salary: Optional[Decimal] = None

    model_config = _FROZEN


class EmployeeWithDepartment(BaseModel):
    """An employee paired with its department, or ``None`` when no row matches."""

    employee: Employee
    department: Optional[Department] = None

    model_config = _FROZEN


__all__ = [
    "Order",
    "OrderDetail",
    "OrderWithDetails",
    "Department",
    "Employee",
    "EmployeeWithDepartment",
]
