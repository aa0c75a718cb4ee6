"""
Fetch strategies for the N+1 query benchmark.

Re-exports the abstract interfaces and the concrete strategy classes so
downstream code can import from `nplusone.strategies` directly.
"""

from nplusone.strategies.abstract import (
    AbstractFetchStrategy,
    FetchStrategy,
    StrategyResult,
)
from nplusone.strategies.batch import BatchEmployeeStrategy, BatchOrderStrategy
from nplusone.strategies.join import JoinEmployeeStrategy, JoinOrderStrategy
from nplusone.strategies.naive import NaiveEmployeeStrategy, NaiveOrderStrategy

__all__ = [
    # Abstracts
    "AbstractFetchStrategy",
    "FetchStrategy",
    "StrategyResult",
    # Orders
    "NaiveOrderStrategy",
    "JoinOrderStrategy",
    "BatchOrderStrategy",
    # Employees
    "NaiveEmployeeStrategy",
    "JoinEmployeeStrategy",
    "BatchEmployeeStrategy",
]
