"""
Client-side assembly of parent/child aggregates.

Two shapes of input are handled here:

- flattened LEFT JOIN rows, where parent columns repeat once per child and a
  parent with no children appears once with NULL child columns;
- a separate child result set that must be grouped by its owning key and then
  attached to an already-fetched parent list.

Grouping always goes through insertion-ordered dicts, so the output follows
the query's ORDER BY (parent key, child key) instead of hash order.
"""

from __future__ import annotations

from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

P = TypeVar("P")
C = TypeVar("C")
K = TypeVar("K", bound=Hashable)


def group_join_rows(
    pairs: Iterable[Tuple[P, Optional[C]]],
    parent_key: Callable[[P], K],
) -> List[Tuple[P, List[C]]]:
    """
    Fold (parent, child-or-None) pairs from an outer join into parent groups.

    The first row seen for a parent key creates its entry; later rows for the
    same key only contribute their child. A None child (outer-join non-match)
    leaves the entry with an empty list. Output order is first-seen order.

    Example
    -------
        >>> group_join_rows([(1, "a"), (1, "b"), (2, None), (3, "c")], lambda p: p)
        [(1, ['a', 'b']), (2, []), (3, ['c'])]
    """
    groups: Dict[K, Tuple[P, List[C]]] = {}
    for parent, child in pairs:
        key = parent_key(parent)
        entry = groups.get(key)
        if entry is None:
            entry = (parent, [])
            groups[key] = entry
        if child is not None:
            entry[1].append(child)
    return list(groups.values())


def group_by_key(items: Iterable[C], key: Callable[[C], K]) -> Dict[K, List[C]]:
    """Group items under their key in one pass, preserving input order within each group."""
    grouped: Dict[K, List[C]] = {}
    for item in items:
        grouped.setdefault(key(item), []).append(item)
    return grouped


def distinct_keys(values: Iterable[Optional[K]]) -> List[K]:
    """
    Deduplicate keys in first-seen order, dropping None.

    NULL never matches an IN-list member, so it is left out of the set.
    """
    return list(dict.fromkeys(value for value in values if value is not None))


def membership_clause(column: str, keys: Sequence[object]) -> Tuple[str, Tuple[object, ...]]:
    """
    Build a `column IN (%s, %s, ...)` predicate and its positional parameters.

    Raises
    ------
    ValueError
        If `keys` is empty. `IN ()` is a syntax error in PostgreSQL, so callers
        must short-circuit before reaching this point.
    """
    if not keys:
        raise ValueError(f"membership filter on {column} needs at least one key")
    placeholders = ", ".join(["%s"] * len(keys))
    return f"{column} IN ({placeholders})", tuple(keys)


__all__ = ["group_join_rows", "group_by_key", "distinct_keys", "membership_clause"]
