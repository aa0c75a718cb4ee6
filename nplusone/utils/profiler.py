"""
Profiling utilities for the N+1 query benchmark.

`profile_block` measures one strategy run:
- wall-clock duration (perf_counter)
- database round trips, read from any object exposing a `round_trips` counter
- peak RSS sampled on a background thread, and CPU percent (psutil)
- optionally, peak Python allocations (tracemalloc)

Usage:
    from nplusone.utils.profiler import profile_block

    with profile_block("batch", counter=executor) as stats:
        BatchOrderStrategy(executor).fetch(30)

    print(stats.duration_seconds, stats.round_trips)
"""

from __future__ import annotations

import contextlib
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    round_trips: Optional[int] = field(default=None)
    peak_rss_bytes: Optional[int] = field(default=None)
    peak_traced_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)


class _RssSampler(threading.Thread):
    """Daemon thread that keeps the highest RSS seen until stopped."""

    def __init__(self, process: psutil.Process, interval_ms: int) -> None:
        super().__init__(daemon=True)
        self._process = process
        self._interval = interval_ms / 1000.0
        self._stop_event = threading.Event()
        self.peak = process.memory_info().rss

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.peak = max(self.peak, self._process.memory_info().rss)
            except psutil.Error:
                return
            self._stop_event.wait(self._interval)

    def stop(self) -> int:
        self._stop_event.set()
        self.join(timeout=1.0)
        return self.peak


def _read_counter(counter: Any) -> Optional[int]:
    return getattr(counter, "round_trips", None) if counter is not None else None


@contextlib.contextmanager
def profile_block(
    label: str,
    counter: Any = None,
    sample_interval_ms: int = 50,
    enable_tracemalloc: bool = False,
) -> Generator[ProfileStats, None, None]:
    """
    Profile the enclosed block.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    counter : object, optional
        Anything with an integer `round_trips` attribute (a QueryExecutor).
        The difference across the block is stored in `stats.round_trips`.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling.
    enable_tracemalloc : bool
        Trace Python allocations. Off by default: tracing slows
        allocation-heavy strategies more than others and skews comparisons.

    Stats are finalized even when the block raises.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    trips_before = _read_counter(counter)

    started_tracing = enable_tracemalloc and not tracemalloc.is_tracing()
    if started_tracing:
        tracemalloc.start()

    # first cpu_percent call only primes the counter
    process.cpu_percent(interval=None)
    sampler = _RssSampler(process, sample_interval_ms)
    sampler.start()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        peak_rss = sampler.stop()
        stats.peak_rss_bytes = peak_rss or None
        stats.cpu_percent = process.cpu_percent(interval=None)

        trips_after = _read_counter(counter)
        if trips_before is not None and trips_after is not None:
            stats.round_trips = trips_after - trips_before

        if enable_tracemalloc and tracemalloc.is_tracing():
            stats.peak_traced_bytes = tracemalloc.get_traced_memory()[1]
            if started_tracing:
                tracemalloc.stop()


__all__ = ["ProfileStats", "profile_block"]
