from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from nplusone.domain.models import EmployeeWithDepartment, OrderWithDetails

SAMPLE_DETAIL_LINES = 3


def best_improvement(results: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """
    Return the non-baseline result with the highest speedup, or None.

    Failed strategies and records without a speedup are ignored.
    """
    candidates = [
        r for r in results if not r.get("baseline") and r.get("speedup") is not None
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda r: r["speedup"])


def _format_ms(seconds: Optional[float]) -> str:
    if seconds is None:
        return "N/A"
    return f"{seconds * 1000:,.2f}"


def _format_speedup(result: Mapping[str, Any]) -> str:
    if result.get("baseline"):
        return "baseline"
    speedup = result.get("speedup")
    return f"{speedup:.1f}x" if speedup is not None else "N/A"


def _group_by_domain(results: Sequence[Mapping[str, Any]]) -> Dict[str, List[Mapping[str, Any]]]:
    grouped: Dict[str, List[Mapping[str, Any]]] = {}
    for res in results:
        grouped.setdefault(res.get("domain", "unknown"), []).append(res)
    return grouped


def print_results(results: Sequence[Mapping[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render comparison results as one rich table per domain.

    Rows keep the execution order (baseline first). The caption names the
    strategy with the best speedup over the baseline.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    for domain, domain_results in _group_by_domain(results).items():
        best = best_improvement(domain_results)
        caption = None
        if best is not None:
            baseline = domain_results[0]
            caption = (
                f"Best improvement: {best['strategy']} {best['speedup']:.1f}x "
                f"({_format_ms(baseline.get('duration_seconds'))} ms → "
                f"{_format_ms(best.get('duration_seconds'))} ms)"
            )

        table = Table(
            title=f"N+1 Comparison: {domain}",
            box=box.ROUNDED,
            caption=caption,
        )
        table.add_column("Strategy", style="cyan", no_wrap=True)
        table.add_column("Description", style="dim")
        table.add_column("Rows", justify="right", style="magenta")
        table.add_column("Round trips", justify="right", style="blue")
        table.add_column("Duration (ms)", justify="right", style="green")
        table.add_column("Speedup", justify="right", style="bold green")
        table.add_column("Peak Memory (MB)", justify="right", style="yellow")
        table.add_column("Error", style="red")

        for res in domain_results:
            round_trips = res.get("round_trips")
            mem_bytes = res.get("peak_rss_bytes") or 0
            table.add_row(
                res.get("strategy", "Unknown"),
                res.get("description", ""),
                f"{res.get('rows', 0):,}",
                f"{round_trips:,}" if round_trips is not None else "N/A",
                _format_ms(res.get("duration_seconds")),
                _format_speedup(res),
                f"{mem_bytes / (1024 * 1024):.2f}",
                res.get("error") or "",
            )

        console.print(table)


def print_sample_orders(
    orders: Sequence[OrderWithDetails], limit: int, console: Optional[Console] = None
) -> None:
    """Show up to `limit` orders with at most three detail lines each."""
    console = console or Console()
    table = Table(title=f"Sample orders (max {limit})", box=box.SIMPLE)
    table.add_column("Order", justify="right", style="cyan")
    table.add_column("Customer")
    table.add_column("Date")
    table.add_column("Total", justify="right", style="green")
    table.add_column("Details")

    for item in orders[:limit]:
        order = item.order
        lines = [
            f"#{d.detail_id} product {d.product_id} x{d.quantity} @ {d.unit_price:.2f}"
            for d in item.details[:SAMPLE_DETAIL_LINES]
        ]
        remaining = len(item.details) - SAMPLE_DETAIL_LINES
        if remaining > 0:
            lines.append(f"... {remaining} more")
        table.add_row(
            str(order.order_id),
            f"{order.customer_name} ({order.customer_id})",
            order.order_date.isoformat(),
            f"{order.total_amount:,.2f}",
            "\n".join(lines) or "[dim](no details)[/dim]",
        )

    console.print(table)


def print_sample_employees(
    employees: Sequence[EmployeeWithDepartment], limit: int, console: Optional[Console] = None
) -> None:
    console = console or Console()
    table = Table(title=f"Sample employees (max {limit})", box=box.SIMPLE)
    table.add_column("Employee", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Department")
    table.add_column("Salary", justify="right", style="green")

    for item in employees[:limit]:
        emp = item.employee
        dept = item.department
        department = f"{dept.department_name} ({dept.location or '-'})" if dept else "[dim]unknown[/dim]"
        table.add_row(
            str(emp.employee_id),
            f"{emp.first_name} {emp.last_name}",
            emp.email,
            department,
            f"{emp.salary:,.2f}" if emp.salary is not None else "N/A",
        )

    console.print(table)


def print_table_counts(
    counts: Mapping[str, Optional[int]], console: Optional[Console] = None
) -> None:
    console = console or Console()
    table = Table(title="Database statistics", box=box.SIMPLE)
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right", style="magenta")
    for name, count in counts.items():
        table.add_row(name, f"{count:,}" if count is not None else "[red]error[/red]")
    console.print(table)
