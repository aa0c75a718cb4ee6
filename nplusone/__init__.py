"""
N+1 query benchmark - compares ways of loading parent/child data from PostgreSQL.

For two domains (orders with their detail lines, employees with their
department) the package fetches the same aggregates three ways:

- Naive: one parent query, then one child query per parent (1 + N round trips)
- Join: a single LEFT JOIN, grouped client-side (1 round trip)
- Batch: one parent query plus one IN-list query for all children (2 round trips)

and reports duration, round trips and speedup relative to the naive baseline.
"""

from __future__ import annotations

__version__ = "0.1.0"

# Public API exports
from nplusone.config import Settings, get_settings
from nplusone.errors import ConnectivityError, RepositoryError, ScanError
from nplusone.orchestrator import RunConfig, available_strategies, compare, run_comparison
from nplusone.strategies.abstract import (
    AbstractFetchStrategy,
    FetchStrategy,
    StrategyResult,
)
from nplusone.utils.logging import configure_logging, get_logger
from nplusone.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "RepositoryError",
    "ConnectivityError",
    "ScanError",
    # Orchestration
    "RunConfig",
    "available_strategies",
    "compare",
    "run_comparison",
    # Strategy abstractions
    "FetchStrategy",
    "AbstractFetchStrategy",
    "StrategyResult",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
