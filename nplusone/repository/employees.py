"""
Queries against `employees` and `departments`.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from nplusone.domain.models import Department, Employee
from nplusone.infrastructure.executor import QueryExecutor
from nplusone.repository.assembly import membership_clause
from nplusone.repository.mapping import (
    DEPARTMENT_COLUMNS,
    EMPLOYEE_COLUMNS,
    department_from_row,
    employee_from_row,
    split_employee_join_row,
)

ALL_EMPLOYEES = "all employees"
DEPARTMENT_BY_ID = "department by id"
DEPARTMENTS_BY_IDS = "departments by ids"
EMPLOYEES_JOIN_DEPARTMENTS = "employees join departments"

_ALL_EMPLOYEES_SQL = f"""
    SELECT {EMPLOYEE_COLUMNS}
    FROM employees
    ORDER BY employee_id
"""

_DEPARTMENT_BY_ID_SQL = f"""
    SELECT {DEPARTMENT_COLUMNS}
    FROM departments
    WHERE department_id = %s
"""

_DEPARTMENTS_BY_IDS_SQL = """
    SELECT {columns}
    FROM departments
    WHERE {predicate}
    ORDER BY department_id
"""

_EMPLOYEES_JOIN_DEPARTMENTS_SQL = """
    SELECT
        e.employee_id,
        e.first_name,
        e.last_name,
        e.email,
        e.department_id,
        e.hire_date,
        e.salary,
        d.department_id,
        d.department_name,
        d.location
    FROM employees e
    LEFT JOIN departments d ON e.department_id = d.department_id
    ORDER BY e.employee_id
"""


def fetch_all_employees(executor: QueryExecutor) -> List[Employee]:
    with executor.query(_ALL_EMPLOYEES_SQL, label=ALL_EMPLOYEES) as rows:
        return [employee_from_row(row, ALL_EMPLOYEES) for row in rows]


def fetch_department_by_id(
    executor: QueryExecutor, department_id: Optional[int]
) -> Optional[Department]:
    """
    Look up one department. A missing row (or a NULL id) yields None, not an error.
    """
    row = executor.query_one(_DEPARTMENT_BY_ID_SQL, (department_id,), label=DEPARTMENT_BY_ID)
    if row is None:
        return None
    return department_from_row(row, DEPARTMENT_BY_ID)


def fetch_departments_by_ids(
    executor: QueryExecutor, department_ids: Sequence[int]
) -> List[Department]:
    """
    Departments whose id is in `department_ids`, ordered by id.

    An empty id list returns [] without touching the database.
    """
    if not department_ids:
        return []
    predicate, params = membership_clause("department_id", department_ids)
    sql = _DEPARTMENTS_BY_IDS_SQL.format(columns=DEPARTMENT_COLUMNS, predicate=predicate)
    with executor.query(sql, params, label=DEPARTMENTS_BY_IDS) as rows:
        return [department_from_row(row, DEPARTMENTS_BY_IDS) for row in rows]


def fetch_employee_join_rows(
    executor: QueryExecutor,
) -> List[Tuple[Employee, Optional[Department]]]:
    with executor.query(_EMPLOYEES_JOIN_DEPARTMENTS_SQL, label=EMPLOYEES_JOIN_DEPARTMENTS) as rows:
        return [split_employee_join_row(row, EMPLOYEES_JOIN_DEPARTMENTS) for row in rows]


__all__ = [
    "ALL_EMPLOYEES",
    "DEPARTMENT_BY_ID",
    "DEPARTMENTS_BY_IDS",
    "EMPLOYEES_JOIN_DEPARTMENTS",
    "fetch_all_employees",
    "fetch_department_by_id",
    "fetch_departments_by_ids",
    "fetch_employee_join_rows",
]
