from __future__ import annotations

import pytest

from nplusone.errors import ConnectivityError
from nplusone.repository.employees import (
    ALL_EMPLOYEES,
    DEPARTMENT_BY_ID,
    DEPARTMENTS_BY_IDS,
    EMPLOYEES_JOIN_DEPARTMENTS,
)
from nplusone.strategies.batch import BatchEmployeeStrategy
from nplusone.strategies.join import JoinEmployeeStrategy
from nplusone.strategies.naive import NaiveEmployeeStrategy

STRATEGIES = [NaiveEmployeeStrategy, JoinEmployeeStrategy, BatchEmployeeStrategy]


def _departments(aggregates):
    return {
        a.employee.employee_id: a.department.department_id if a.department else None
        for a in aggregates
    }


@pytest.mark.parametrize("strategy_cls", STRATEGIES)
def test_departments_resolved_or_absent(strategy_cls, executor) -> None:
    aggregates = strategy_cls(executor).fetch()

    assert [a.employee.employee_id for a in aggregates] == [1, 2, 3, 4]
    # 3 points at a missing department, 4 has none
    assert _departments(aggregates) == {1: 10, 2: 10, 3: None, 4: None}


def test_all_strategies_return_equal_aggregates(make_executor) -> None:
    results = [cls(make_executor()).fetch() for cls in STRATEGIES]

    assert results[0] == results[1] == results[2]


def test_round_trips_per_strategy(make_executor) -> None:
    naive, join, batch = make_executor(), make_executor(), make_executor()

    NaiveEmployeeStrategy(naive).fetch()
    JoinEmployeeStrategy(join).fetch()
    BatchEmployeeStrategy(batch).fetch()

    assert naive.round_trips == 1 + 4
    assert naive.calls(DEPARTMENT_BY_ID) == 4
    assert join.round_trips == 1
    assert join.query_log[0][0] == EMPLOYEES_JOIN_DEPARTMENTS
    assert batch.round_trips == 2
    assert [label for label, _ in batch.query_log] == [ALL_EMPLOYEES, DEPARTMENTS_BY_IDS]


def test_batch_queries_distinct_department_ids_only(executor) -> None:
    BatchEmployeeStrategy(executor).fetch()

    _, params = executor.query_log[1]
    assert params == (10, 99)
    assert len(params) <= 4


def test_batch_skips_lookup_when_no_employee_has_a_department(
    make_executor, make_shop, employee_row
) -> None:
    data = make_shop(
        departments=[(10, "Sales", "Tokyo")],
        employees=[employee_row(1, None), employee_row(2, None)],
    )
    ex = make_executor(data=data)

    aggregates = BatchEmployeeStrategy(ex).fetch()

    assert ex.round_trips == 1
    assert [a.department for a in aggregates] == [None, None]


@pytest.mark.parametrize("strategy_cls", STRATEGIES)
def test_no_employees_returns_empty_list(strategy_cls, make_executor, make_shop) -> None:
    ex = make_executor(data=make_shop(departments=[(10, "Sales", "Tokyo")]))

    assert strategy_cls(ex).fetch() == []
    assert ex.round_trips == 1


def test_department_location_may_be_null(make_executor, make_shop, employee_row) -> None:
    data = make_shop(departments=[(20, "Engineering", None)], employees=[employee_row(1, 20)])

    for strategy_cls in STRATEGIES:
        aggregates = strategy_cls(make_executor(data=data)).fetch()
        assert aggregates[0].department is not None
        assert aggregates[0].department.location is None


def test_naive_failure_mid_loop_aborts_fetch(make_executor) -> None:
    ex = make_executor(failures={DEPARTMENT_BY_ID: 3})

    with pytest.raises(ConnectivityError):
        NaiveEmployeeStrategy(ex).fetch()

    assert ex.round_trips == 4


def test_parent_query_failure_propagates(make_executor) -> None:
    for strategy_cls in (NaiveEmployeeStrategy, BatchEmployeeStrategy):
        ex = make_executor(failures={ALL_EMPLOYEES: 1})
        with pytest.raises(ConnectivityError):
            strategy_cls(ex).fetch()
