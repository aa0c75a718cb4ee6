"""
Orchestrator for comparing fetch strategies, profiling execution, and persisting results.

Usage (example from CLI):
    from nplusone.orchestrator import RunConfig, run_comparison

    results = run_comparison(RunConfig(domains=["orders"], days=7))
    print(results)

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence

from nplusone.config import get_settings
from nplusone.infrastructure import db_factory
from nplusone.infrastructure.executor import QueryExecutor
from nplusone.strategies.abstract import FetchStrategy, StrategyResult
from nplusone.strategies.batch import BatchEmployeeStrategy, BatchOrderStrategy
from nplusone.strategies.join import JoinEmployeeStrategy, JoinOrderStrategy
from nplusone.strategies.naive import NaiveEmployeeStrategy, NaiveOrderStrategy
from nplusone.utils.logging import get_logger
from nplusone.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

FailurePolicy = Literal["tolerant", "strict"]
StrategyFactory = Callable[[QueryExecutor], FetchStrategy]

DOMAINS = ("orders", "employees")


@dataclass(frozen=True)
class RunConfig:
    """
    Parameters for a full comparison run.

    Attributes
    ----------
    domains : sequence of str
        Data domains to compare ("orders", "employees"). Defaults to both.
    strategy_names : iterable of str | None
        Strategies to run, always executed in declared order. None or ["all"] runs all.
    days : int | None
        Look-back window for orders. Defaults to settings.order_days.
    results_dir : Path | str | None
        Directory for JSON artifacts. Defaults to settings.results_dir.
    persist : bool
        Whether to write results to disk.
    failure_policy : "tolerant" | "strict"
        tolerant records a failing strategy and moves on; strict re-raises it.
    """

    domains: Sequence[str] = DOMAINS
    strategy_names: Optional[Iterable[str]] = None
    days: Optional[int] = None
    results_dir: Optional[Path | str] = None
    persist: bool = True
    failure_policy: FailurePolicy = "tolerant"


def _round_float(value: float, decimals: int = 2) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _strategy_factories(domain: str) -> Dict[str, StrategyFactory]:
    """Registry of strategies per domain, in declared order (baseline first)."""
    registry: Dict[str, Dict[str, StrategyFactory]] = {
        "orders": {
            "naive": NaiveOrderStrategy,
            "join": JoinOrderStrategy,
            "batch": BatchOrderStrategy,
        },
        "employees": {
            "naive": NaiveEmployeeStrategy,
            "join": JoinEmployeeStrategy,
            "batch": BatchEmployeeStrategy,
        },
    }
    if domain not in registry:
        raise ValueError(f"Unknown domain '{domain}'. Available: {', '.join(registry)}")
    return registry[domain]


def available_strategies() -> List[str]:
    """List strategy names in declared order."""
    return list(_strategy_factories(DOMAINS[0]).keys())


def _resolve_names(strategy_names: Optional[Iterable[str]]) -> List[str]:
    declared = available_strategies()
    names = list(strategy_names) if strategy_names is not None else ["all"]
    if len(names) == 1 and names[0] == "all":
        return declared
    unknown = [name for name in names if name not in declared]
    if unknown:
        raise ValueError(f"Unknown strategy '{unknown[0]}'. Available: {', '.join(declared)}")
    # Declared order keeps naive first as the baseline, whatever order was requested.
    return [name for name in declared if name in names]


def _domain_filter(domain: str, days: int) -> Any:
    return days if domain == "orders" else None


def _profiled_fetch(
    strategy: FetchStrategy, fetch_filter: Any, failure_policy: FailurePolicy
) -> StrategyResult:
    log.info(f"[STRATEGY START] {strategy.name}", extra={"strategy": strategy.name})
    result = StrategyResult(strategy=strategy.name, description=strategy.description)

    with profile_block(strategy.name, counter=getattr(strategy, "executor", None)) as stats:
        try:
            aggregates = strategy.fetch(fetch_filter)
            result["rows"] = len(aggregates)
            result["error"] = None
            result["error_type"] = None
        except Exception as exc:  # noqa: BLE001 - intentional broad catch to record failures
            if failure_policy == "strict":
                log.error(f"[STRATEGY FAILED] {strategy.name}", extra={"strategy": strategy.name})
                raise
            log.exception(f"[STRATEGY FAILED] {strategy.name}", extra={"strategy": strategy.name})
            result["rows"] = 0
            result["error"] = str(exc)
            result["error_type"] = type(exc).__name__

    merged = _merge_stats(result, stats)
    if merged["error"] is None:
        log.info(
            f"[STRATEGY SUCCESS] {strategy.name}",
            extra={
                "strategy": strategy.name,
                "rows": merged["rows"],
                "round_trips": merged["round_trips"],
                "duration": merged["duration_seconds"],
            },
        )
    return merged


def _merge_stats(result: StrategyResult, stats: ProfileStats) -> StrategyResult:
    """Attach profiler measurements to a strategy result."""
    merged = StrategyResult(**result)
    merged["duration_seconds"] = stats.duration_seconds
    merged["round_trips"] = stats.round_trips
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = _round_float(stats.cpu_percent, 1) if stats.cpu_percent else None
    return merged


def apply_speedups(results: List[StrategyResult]) -> List[StrategyResult]:
    """
    Set `speedup = baseline_duration / duration` on every record.

    The first record is the baseline (speedup 1.0). Speedup is None when the
    baseline or the strategy failed, or when a duration is zero.
    """
    if not results:
        return results

    baseline = results[0]
    base_duration = baseline.get("duration_seconds") or 0.0
    base_ok = baseline.get("error") is None and base_duration > 0

    for index, result in enumerate(results):
        result["baseline"] = index == 0
        duration = result.get("duration_seconds") or 0.0
        if not base_ok or result.get("error") is not None or duration <= 0:
            result["speedup"] = None
        elif index == 0:
            result["speedup"] = 1.0
        else:
            result["speedup"] = _round_float(base_duration / duration)
    return results


def compare(
    strategies: Sequence[FetchStrategy],
    fetch_filter: Any = None,
    failure_policy: FailurePolicy = "tolerant",
) -> List[StrategyResult]:
    """
    Run each strategy once, in the given order, against the same filter.

    Parameters
    ----------
    strategies : sequence of FetchStrategy
        Strategies to time; the first one is the baseline.
    fetch_filter : Any
        Filter passed unchanged to every strategy.
    failure_policy : "tolerant" | "strict"
        tolerant records failures and continues; strict re-raises the first one.

    Returns
    -------
    List[StrategyResult]
        One record per strategy with rows, duration, round trips and speedup.
    """
    results = [_profiled_fetch(strategy, fetch_filter, failure_policy) for strategy in strategies]
    return apply_speedups(results)


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def run_comparison(config: RunConfig | None = None) -> List[StrategyResult]:
    """
    Compare the requested strategies for each domain and optionally persist the results.

    Returns
    -------
    List[StrategyResult]
        Flat list of per-strategy records; each carries its `domain`.
    """
    config = config or RunConfig()
    settings = get_settings()
    days = config.days if config.days is not None else settings.order_days
    names = _resolve_names(config.strategy_names)
    domains = list(config.domains)

    results: List[StrategyResult] = []
    with db_factory.open_executor() as executor:
        for domain in domains:
            factories = _strategy_factories(domain)
            log.info(f"{'=' * 60}")
            log.info(f"[DOMAIN] {domain.upper()}", extra={"domain": domain, "strategies": names})
            log.info(f"{'=' * 60}")

            strategies = [factories[name](executor) for name in names]
            domain_results = compare(
                strategies, _domain_filter(domain, days), failure_policy=config.failure_policy
            )
            for result in domain_results:
                result["domain"] = domain
            results.extend(domain_results)

            log.info(f"[DOMAIN COMPLETE] {domain.upper()}", extra={"domain": domain})

    payload = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "days": days,
        "domains": domains,
        "strategies": names,
        "failure_policy": config.failure_policy,
        "results": results,
    }

    if config.persist:
        _persist_results(payload, Path(config.results_dir or settings.results_dir))

    failed = [r["strategy"] for r in results if r.get("error")]
    log.info(
        f"[ORCHESTRATOR COMPLETE] {len(results)} strategy run(s), {len(failed)} failed",
        extra={"domains": domains, "failed": failed},
    )
    return results


__all__ = [
    "DOMAINS",
    "RunConfig",
    "apply_speedups",
    "available_strategies",
    "compare",
    "run_comparison",
]
