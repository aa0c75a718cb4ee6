from __future__ import annotations

import pytest

from nplusone.repository.assembly import (
    distinct_keys,
    group_by_key,
    group_join_rows,
    membership_clause,
)


def test_group_join_rows_keeps_first_seen_order_and_empty_groups() -> None:
    pairs = [(1, "a"), (1, "b"), (2, None), (3, "c")]

    groups = group_join_rows(pairs, lambda parent: parent)

    assert groups == [(1, ["a", "b"]), (2, []), (3, ["c"])]


def test_group_join_rows_does_not_resort_parents() -> None:
    pairs = [(5, "x"), (2, "y"), (5, "z")]

    groups = group_join_rows(pairs, lambda parent: parent)

    assert [parent for parent, _ in groups] == [5, 2]
    assert groups[0][1] == ["x", "z"]


def test_group_join_rows_empty_input() -> None:
    assert group_join_rows([], lambda parent: parent) == []


def test_group_by_key_preserves_order_within_group() -> None:
    items = [("o1", 1), ("o2", 2), ("o1", 3)]

    grouped = group_by_key(items, lambda item: item[0])

    assert list(grouped) == ["o1", "o2"]
    assert grouped["o1"] == [("o1", 1), ("o1", 3)]


def test_distinct_keys_dedupes_and_drops_none() -> None:
    assert distinct_keys([10, 10, None, 20, 10, None]) == [10, 20]


def test_distinct_keys_all_none_is_empty() -> None:
    assert distinct_keys([None, None]) == []


def test_membership_clause_has_one_placeholder_per_key() -> None:
    predicate, params = membership_clause("order_id", [3, 1, 2])

    assert predicate == "order_id IN (%s, %s, %s)"
    assert params == (3, 1, 2)


def test_membership_clause_single_key() -> None:
    predicate, params = membership_clause("department_id", [7])

    assert predicate == "department_id IN (%s)"
    assert params == (7,)


def test_membership_clause_rejects_empty_key_set() -> None:
    with pytest.raises(ValueError, match="at least one key"):
        membership_clause("order_id", [])
