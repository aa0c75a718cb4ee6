"""
Data generation and loading script for the N+1 query benchmark.

Writes deterministic pseudo-random departments, employees, orders and order
details to one CSV per table, then loads them into Postgres with COPY.

The data deliberately contains the edge cases the strategies must agree on:
employees with no department, employees pointing at a department id that does
not exist, and orders without any detail lines.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import date, timedelta
from pathlib import Path

import psycopg
import typer

from nplusone.infrastructure.db_factory import build_dsn, get_sync_connection

app = typer.Typer(help="Generate synthetic benchmark data and load into Postgres (CSV + COPY).")

# Load order matters: order_details references orders.
TABLE_COLUMNS: dict[str, list[str]] = {
    "departments": ["department_id", "department_name", "location"],
    "employees": [
        "employee_id",
        "first_name",
        "last_name",
        "email",
        "department_id",
        "hire_date",
        "salary",
    ],
    "orders": ["order_id", "customer_id", "customer_name", "order_date", "total_amount", "status"],
    "order_details": ["detail_id", "order_id", "product_id", "product_name", "quantity", "unit_price"],
}

DEPARTMENT_NAMES = ["Sales", "Engineering", "HR", "Operations", "Marketing", "Finance", "Legal", "IT Planning"]
LOCATIONS = ["Tokyo", "Osaka", "Nagoya", "Fukuoka", "Sapporo", None]
FIRST_NAMES = ["Taro", "Hanako", "Ichiro", "Jiro", "Misaki", "Kenta", "Masako", "Yuki", "Sora", "Aiko"]
LAST_NAMES = ["Tanaka", "Sato", "Suzuki", "Takahashi", "Yamada", "Nakamura", "Ito", "Kobayashi"]
CUSTOMERS = ["Acme Corp", "Globex", "Initech", "Umbrella", "Hooli", "Stark Industries", "Wayne Ent."]
PRODUCTS = ["Laptop", "Monitor", "Keyboard", "Mouse", "Dock", "Headset", "Webcam", "Cable", "Chair"]
STATUSES = ["PENDING", "CONFIRMED", "SHIPPED", "DELIVERED", "CANCELLED"]


def _cents(value: int) -> str:
    return f"{value // 100}.{value % 100:02d}"


def _write_csv(path: Path, columns: list[str], rows: list[list[object]]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        # None becomes an empty unquoted field, which COPY reads as NULL.
        writer.writerows([["" if v is None else v for v in row] for row in rows])


def generate_tables(
    output_dir: Path,
    departments: int,
    employees: int,
    orders: int,
    max_details: int,
    history_days: int,
    orphan_ratio: float,
    unassigned_ratio: float,
    empty_order_ratio: float,
    seed: int,
    today: date | None = None,
) -> dict[str, int]:
    """
    Write one CSV per table into `output_dir` and return the row count per table.

    The same seed and `today` always produce identical files.
    """
    rng = random.Random(seed)
    today = today or date.today()
    output_dir.mkdir(parents=True, exist_ok=True)
    tables: dict[str, list[list[object]]] = {name: [] for name in TABLE_COLUMNS}

    for dept_id in range(1, departments + 1):
        name = DEPARTMENT_NAMES[(dept_id - 1) % len(DEPARTMENT_NAMES)]
        if dept_id > len(DEPARTMENT_NAMES):
            name = f"{name} {dept_id}"
        tables["departments"].append([dept_id, name, rng.choice(LOCATIONS)])

    for emp_id in range(1, employees + 1):
        roll = rng.random()
        if roll < unassigned_ratio or departments == 0:
            department_id = None
        elif roll < unassigned_ratio + orphan_ratio:
            # Points past the last department: no matching row exists.
            department_id = departments + rng.randint(1, 1000)
        else:
            department_id = rng.randint(1, departments)
        first, last = rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)
        hired = today - timedelta(days=rng.randint(30, 3650))
        tables["employees"].append(
            [
                emp_id,
                first,
                last,
                f"{first.lower()}.{last.lower()}.{emp_id}@example.com",
                department_id,
                hired.isoformat(),
                _cents(rng.randint(3_000_000, 9_000_000)),
            ]
        )

    detail_id = 0
    for order_id in range(1, orders + 1):
        customer_id = rng.randint(1, 500)
        order_date = today - timedelta(days=rng.randint(0, history_days))
        lines = 0 if rng.random() < empty_order_ratio else rng.randint(1, max_details)
        total = 0
        for _ in range(lines):
            detail_id += 1
            product_id = rng.randint(1, len(PRODUCTS) * 10)
            quantity = rng.randint(1, 10)
            unit_cents = rng.randint(100, 200_000)
            total += quantity * unit_cents
            tables["order_details"].append(
                [
                    detail_id,
                    order_id,
                    product_id,
                    PRODUCTS[product_id % len(PRODUCTS)],
                    quantity,
                    _cents(unit_cents),
                ]
            )
        tables["orders"].append(
            [
                order_id,
                customer_id,
                f"{rng.choice(CUSTOMERS)} #{customer_id}",
                order_date.isoformat(),
                _cents(total),
                rng.choice(STATUSES),
            ]
        )

    for name, rows in tables.items():
        _write_csv(output_dir / f"{name}.csv", TABLE_COLUMNS[name], rows)
    return {name: len(rows) for name, rows in tables.items()}


def _apply_schema(conn: psycopg.Connection, schema_path: Path) -> None:
    conn.execute(schema_path.read_text(encoding="utf-8"))


def _copy_into_db(conn: psycopg.Connection, output_dir: Path, truncate: bool) -> None:
    with conn.transaction():
        with conn.cursor() as cur:
            if truncate:
                cur.execute("TRUNCATE order_details, orders, employees, departments")
            for name, columns in TABLE_COLUMNS.items():
                with cur.copy(
                    f"COPY {name} ({', '.join(columns)}) FROM STDIN WITH (FORMAT csv, HEADER TRUE)"
                ) as copy:
                    with (output_dir / f"{name}.csv").open("r", encoding="utf-8") as f:
                        for line in f:
                            copy.write(line)
            for name in TABLE_COLUMNS:
                cur.execute(f"ANALYZE {name}")


@app.command()
def main(
    departments: int = typer.Option(8, "--departments", min=0, help="Departments to generate."),
    employees: int = typer.Option(1_000, "--employees", min=0, help="Employees to generate."),
    orders: int = typer.Option(5_000, "--orders", min=0, help="Orders to generate."),
    max_details: int = typer.Option(5, "--max-details", min=1, help="Max detail lines per order."),
    history_days: int = typer.Option(
        90, "--history-days", min=0, help="Order dates are spread over this many past days."
    ),
    orphan_ratio: float = typer.Option(
        0.02, "--orphan-ratio", min=0.0, max=1.0, help="Share of employees with a missing department."
    ),
    unassigned_ratio: float = typer.Option(
        0.03, "--unassigned-ratio", min=0.0, max=1.0, help="Share of employees with no department id."
    ),
    empty_order_ratio: float = typer.Option(
        0.05, "--empty-order-ratio", min=0.0, max=1.0, help="Share of orders without detail lines."
    ),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Directory for the CSV files (if omitted, a temp dir will be used).",
    ),
    schema: Path = typer.Option(
        Path("db/init.sql"), "--schema", help="DDL applied before loading."
    ),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    no_load: bool = typer.Option(False, "--no-load", help="Only generate CSV; skip loading."),
    append: bool = typer.Option(False, "--append", help="Keep existing rows instead of truncating."),
) -> None:
    """
    Generate synthetic data and optionally load it into Postgres using COPY.
    """
    start = time.perf_counter()
    output_dir = output or Path(tempfile.mkdtemp(prefix="nplusone_csv_"))

    typer.echo(f"Generating data -> {output_dir} (seed={seed})")
    counts = generate_tables(
        output_dir,
        departments=departments,
        employees=employees,
        orders=orders,
        max_details=max_details,
        history_days=history_days,
        orphan_ratio=orphan_ratio,
        unassigned_ratio=unassigned_ratio,
        empty_order_ratio=empty_order_ratio,
        seed=seed,
    )
    gen_duration = time.perf_counter() - start
    summary = ", ".join(f"{name}={count:,}" for name, count in counts.items())
    typer.echo(f"CSV generation completed in {gen_duration:.2f}s ({summary})")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    load_start = time.perf_counter()
    typer.echo("Loading CSV into Postgres via COPY...")
    with get_sync_connection(dsn or build_dsn()) as conn:
        _apply_schema(conn, schema)
        _copy_into_db(conn, output_dir, truncate=not append)
    load_duration = time.perf_counter() - load_start

    typer.echo(
        f"Load completed in {load_duration:.2f}s. "
        f"Total time {time.perf_counter() - start:.2f}s."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
