"""
Domain package for the N+1 query benchmark.

Exports the row models and aggregate views shared by repositories, strategies,
and reporting. Keep this package focused on data definitions.
"""

from nplusone.domain.models import (
    Department,
    Employee,
    EmployeeWithDepartment,
    Order,
    OrderDetail,
    OrderWithDetails,
)

__all__ = [
    "Department",
    "Employee",
    "EmployeeWithDepartment",
    "Order",
    "OrderDetail",
    "OrderWithDetails",
]
