"""
Abstract strategy interfaces and result contracts for the N+1 query benchmark.

Concrete strategies (naive, join, batch) implement FetchStrategy for one data
domain and return a list of aggregates. The orchestrator times them and
reports a StrategyResult TypedDict per strategy.
"""

from __future__ import annotations

import abc
from typing import Any, Dict, Generic, List, Optional, Protocol, TypedDict, TypeVar, runtime_checkable

from nplusone.infrastructure.executor import QueryExecutor

A = TypeVar("A")
A_co = TypeVar("A_co", covariant=True)


class StrategyResult(TypedDict, total=False):
    """
    Metrics record produced by the orchestrator for one strategy run.

    Fields are optional so a failed run can be recorded with just the error;
    reporters should tolerate missing values.
    """

    strategy: str
    description: str
    domain: str
    rows: int
    duration_seconds: float
    round_trips: Optional[int]
    speedup: Optional[float]
    baseline: bool
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    error: Optional[str]
    error_type: Optional[str]
    extra: Dict[str, Any]


@runtime_checkable
class FetchStrategy(Protocol[A_co]):
    """
    Common interface all fetch strategies must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier (naive, join, batch).
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    description: str

    def fetch(self, fetch_filter: Any = None) -> List[A_co]:
        """
        Retrieve every aggregate matching `fetch_filter`.

        Parameters
        ----------
        fetch_filter : Any
            Domain-specific filter (days back for orders, unused for employees).

        Returns
        -------
        list
            Aggregates ordered by parent key.
        """
        ...


class AbstractFetchStrategy(abc.ABC, Generic[A]):
    """
    ABC helper for class-based implementations.

    Subclasses set `name` and `description` and implement `fetch`. The query
    executor is injected so the round-trip counter can be read by the harness.
    """

    name: str
    description: str

    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor

    @abc.abstractmethod
    def fetch(self, fetch_filter: Any = None) -> List[A]:  # pragma: no cover - interface only
        """Run the strategy and return aggregates."""
        raise NotImplementedError


__all__ = [
    "StrategyResult",
    "FetchStrategy",
    "AbstractFetchStrategy",
]
