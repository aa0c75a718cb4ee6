from __future__ import annotations

import json
import sys
from enum import Enum
from typing import List, Optional

import psycopg
import typer

from nplusone.config import get_settings
from nplusone.errors import RepositoryError
from nplusone.infrastructure.db_factory import open_executor
from nplusone.orchestrator import DOMAINS, RunConfig, available_strategies, run_comparison
from nplusone.reporter import (
    print_results,
    print_sample_employees,
    print_sample_orders,
    print_table_counts,
)
from nplusone.repository.stats import count_rows
from nplusone.strategies.join import JoinEmployeeStrategy, JoinOrderStrategy
from nplusone.utils.logging import configure_logging

app = typer.Typer(help="N+1 query benchmark CLI.")


class Domain(str, Enum):
    orders = "orders"
    employees = "employees"
    all = "all"


class Policy(str, Enum):
    tolerant = "tolerant"
    strict = "strict"


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: Exception) -> None:
    typer.echo(f"Database error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool={settings.db_pool_min_size}-{settings.db_pool_max_size} "
        f"timeout_ms={settings.db_statement_timeout_ms} | "
        f"days={settings.order_days} results={settings.results_dir}"
    )


@app.command()
def run(
    domain: Domain = typer.Option(
        Domain.all,
        "--domain",
        "-d",
        help="Domain to compare (orders, employees, all).",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        min=0,
        help="Order look-back window in days (default from settings).",
    ),
    strategy: str = typer.Option(
        "all",
        "--strategy",
        "--strategies",
        "-s",
        help="Strategy to run (naive, join, batch, all). Use 'list' to show them.",
    ),
    failure_policy: Policy = typer.Option(
        Policy.tolerant,
        "--failure-policy",
        help="tolerant records a failing strategy and continues; strict aborts.",
    ),
    no_persist: bool = typer.Option(False, "--no-persist", help="Do not write results/*.json."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of tables."),
) -> None:
    """
    Compare strategies for one or both domains and persist results.
    """
    _setup_logging()

    if strategy == "list":
        typer.echo("Available strategies: " + ", ".join(available_strategies()))
        return

    domains: List[str] = list(DOMAINS) if domain is Domain.all else [domain.value]
    strategy_names = [name.strip() for name in strategy.split(",") if name.strip()]
    config = RunConfig(
        domains=domains,
        strategy_names=strategy_names,
        days=days,
        persist=not no_persist,
        failure_policy=failure_policy.value,
    )

    try:
        results = run_comparison(config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--strategy") from exc
    except (RepositoryError, psycopg.Error) as exc:
        _fail(exc)

    if as_json:
        typer.echo(json.dumps(results, indent=2, default=str))
    else:
        print_results(results)


@app.command()
def sample(
    orders: Optional[int] = typer.Option(None, "--orders", min=0, help="Orders to show."),
    employees: Optional[int] = typer.Option(None, "--employees", min=0, help="Employees to show."),
    days: Optional[int] = typer.Option(None, "--days", min=0, help="Order look-back window."),
) -> None:
    """
    Print a few assembled aggregates from each domain.
    """
    _setup_logging()
    settings = get_settings()
    order_limit = settings.sample_orders if orders is None else orders
    employee_limit = settings.sample_employees if employees is None else employees

    try:
        with open_executor() as executor:
            if order_limit:
                aggregates = JoinOrderStrategy(executor).fetch(
                    settings.order_days if days is None else days
                )
                print_sample_orders(aggregates, order_limit)
            if employee_limit:
                print_sample_employees(JoinEmployeeStrategy(executor).fetch(), employee_limit)
    except (RepositoryError, psycopg.Error) as exc:
        _fail(exc)


@app.command()
def stats() -> None:
    """
    Show row counts for the benchmark tables.
    """
    _setup_logging()
    try:
        with open_executor() as executor:
            counts = count_rows(executor)
    except (RepositoryError, psycopg.Error) as exc:
        _fail(exc)
    print_table_counts(counts)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
