"""CLI for the ``cost_analysis`` package.

Command handlers (``cmd_transactions``, ``cmd_purchases``, ``cmd_classify``)
are plain functions returning an exit status; the Typer app wraps them.
Configuration variables (``COST_ANALYSIS_*``) are loaded from a local ``.env``
using ``python-dotenv`` before any command runs.
"""

from __future__ import annotations

import csv
import dataclasses
import json
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from typer.models import OptionInfo

from .logging_setup import configure_logging, get_logger

_logger = get_logger("cost_analysis.cli")

console = Console()


# ---- Small module-level helpers ----------------------------------------------


def _err(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _read_records(csv_path: Path, header_keywords: Sequence[str]) -> list[Mapping[str, Any]]:
    """Read a CSV into raw rows; I/O and parse failures propagate."""

    from .ingest import load_csv_records

    records = load_csv_records(csv_path, header_keywords)
    _logger.info("read %d rows from %s", len(records), csv_path)
    return records


def _read_or_report(
    csv_path: Path, header_keywords: Sequence[str]
) -> list[Mapping[str, Any]] | None:
    try:
        return _read_records(csv_path, header_keywords)
    except FileNotFoundError:
        _err(f"File not found: {csv_path}")
    except PermissionError:
        _err(f"Permission denied: {csv_path}")
    except UnicodeDecodeError as e:
        _err(f"'{csv_path}' is not UTF-8 text: {e}")
    except csv.Error as e:
        _err(f"Failed to parse CSV: {e}")
    return None


def _print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _money(value: float) -> str:
    return f"{value:,.0f}"


def _totals_table(title: str, totals: Mapping[str, float], key_header: str) -> Table:
    table = Table(title=title)
    table.add_column(key_header)
    table.add_column("Amount", justify="right")
    for key, value in totals.items():
        table.add_row(key, _money(value))
    return table


# ---- Command handlers ----------------------------------------------------------


def cmd_transactions(
    csv_paths: Sequence[Path],
    *,
    headcount: int | None = None,
    purchases_csv_path: Path | None = None,
    start: str | None = None,
    end: str | None = None,
    as_json: bool = False,
) -> int:
    """Normalize transaction CSVs and report totals, buckets and ratios.

    Each CSV is treated as one batch; batches are normalized concurrently and
    merged in date order. When ``start`` and ``end`` are both given only
    transactions dated within that range are reported; giving just one of
    them is an error. An optional purchase ledger supplies food cost when the
    transactions carry none.
    """

    from .aggregate import aggregate_by_counterparty, aggregate_by_period, filter_by_date_range
    from .config import load_alias_table, load_rule_set, resolve_headcount
    from .metrics import compute_snapshot, cost_structure, summarize
    from .normalize import normalize_transaction_batches
    from .purchases import normalize_purchases

    if bool(start) != bool(end):
        return _err("--start and --end must be given together")

    try:
        aliases = load_alias_table()
        rules = load_rule_set()
        heads = resolve_headcount(headcount)
    except ValueError as e:
        return _err(str(e))

    batches: list[list[Mapping[str, Any]]] = []
    for path in csv_paths:
        records = _read_or_report(path, aliases.transaction_header_keywords)
        if records is None:
            return 1
        batches.append(records)

    purchases = None
    if purchases_csv_path is not None:
        purchase_rows = _read_or_report(purchases_csv_path, aliases.purchase_header_keywords)
        if purchase_rows is None:
            return 1
        purchases = normalize_purchases(purchase_rows, aliases=aliases, rules=rules)

    transactions = normalize_transaction_batches(batches, aliases=aliases, rules=rules)
    transactions = filter_by_date_range(transactions, start, end)

    summary = summarize(transactions)
    buckets = aggregate_by_period(transactions)
    by_counterparty = aggregate_by_counterparty(transactions)
    structure = cost_structure(transactions, rules=rules)
    snapshot = compute_snapshot(transactions, heads, rules=rules, purchases=purchases)

    if as_json:
        _print_json(
            {
                "transaction_count": len(transactions),
                "summary": dataclasses.asdict(summary),
                "periods": [dataclasses.asdict(b) for b in buckets],
                "counterparties": dataclasses.asdict(by_counterparty),
                "cost_structure": dataclasses.asdict(structure),
                "snapshot": dataclasses.asdict(snapshot),
            }
        )
        return 0

    console.print(
        f"[cyan]{len(transactions)} transactions[/cyan]  "
        f"revenue {_money(summary.total_revenue)}  "
        f"expense {_money(summary.total_expense)}  "
        f"profit {_money(summary.total_profit)} ({summary.profit_margin:.1f}%)"
    )

    periods = Table(title="By period")
    periods.add_column("Period")
    for header in ("Revenue", "Expense", "Profit"):
        periods.add_column(header, justify="right")
    for b in buckets:
        periods.add_row(b.period_key, _money(b.revenue), _money(b.expense), _money(b.profit))
    console.print(periods)

    console.print(_totals_table("Revenue by counterparty", by_counterparty.revenue, "Counterparty"))
    console.print(_totals_table("Expense by counterparty", by_counterparty.expense, "Counterparty"))
    console.print(_totals_table("Fixed costs", structure.fixed_breakdown, "Category"))
    console.print(_totals_table("Variable costs", structure.variable_breakdown, "Category"))

    ratios = Table(title=f"Snapshot (overall: {snapshot.overall_status})")
    ratios.add_column("Metric")
    ratios.add_column("Value", justify="right")
    ratios.add_row("FL cost", _money(snapshot.fl_cost))
    ratios.add_row("FL ratio", f"{snapshot.fl_ratio:.1f}% ({snapshot.fl_status})")
    ratios.add_row("Labor ratio", f"{snapshot.labor_ratio:.1f}%")
    ratios.add_row("Prime cost", _money(snapshot.prime_cost))
    ratios.add_row("Contribution margin", f"{snapshot.cm_ratio * 100:.1f}%")
    ratios.add_row(
        "Break-even point",
        f"{_money(snapshot.break_even_point)} ({'reached' if snapshot.bep_reached else 'not reached'})",
    )
    ratios.add_row(f"Revenue per head ({snapshot.headcount})", _money(snapshot.revenue_per_head))
    console.print(ratios)
    return 0


def cmd_purchases(csv_path: Path, *, month: str | None = None, as_json: bool = False) -> int:
    """Normalize a purchase ledger and report category, vendor and price views."""

    from .aggregate import filter_by_month
    from .config import load_alias_table, load_rule_set
    from .purchases import (
        analyze_by_major_category,
        analyze_by_vendor,
        analyze_price_trends,
        available_months,
        normalize_purchases,
    )

    try:
        aliases = load_alias_table()
        rules = load_rule_set()
    except ValueError as e:
        return _err(str(e))

    rows = _read_or_report(csv_path, aliases.purchase_header_keywords)
    if rows is None:
        return 1
    records = normalize_purchases(rows, aliases=aliases, rules=rules)
    months = available_months(records)
    if month:
        records = filter_by_month(records, month)

    groups = analyze_by_major_category(records)
    vendors = analyze_by_vendor(records)
    trends = analyze_price_trends(records)

    if as_json:
        _print_json(
            {
                "record_count": len(records),
                "months": months,
                "major_categories": {
                    str(m): {"total_amount": g.total_amount, "count": g.count}
                    for m, g in groups.items()
                },
                "vendors": [dataclasses.asdict(v) for v in vendors],
                "price_trends": [dataclasses.asdict(t) for t in trends],
            }
        )
        return 0

    console.print(f"[cyan]{len(records)} purchase records[/cyan]  months: {', '.join(months) or '-'}")

    cats = Table(title="By major category")
    cats.add_column("Category")
    cats.add_column("Items", justify="right")
    cats.add_column("Amount", justify="right")
    for m, g in groups.items():
        cats.add_row(str(m), str(g.count), _money(g.total_amount))
    console.print(cats)

    vend = Table(title="By vendor")
    vend.add_column("Vendor")
    vend.add_column("Items", justify="right")
    vend.add_column("Amount", justify="right")
    for v in vendors:
        vend.add_row(v.vendor, str(v.item_count), _money(v.total_amount))
    console.print(vend)

    if trends:
        price = Table(title="Price trends")
        price.add_column("Item")
        for header in ("Previous", "Latest", "Change", "Bought"):
            price.add_column(header, justify="right")
        for t in trends:
            price.add_row(
                t.name,
                _money(t.previous_price),
                _money(t.latest_price),
                f"{t.price_change:+.1f}%",
                str(t.purchase_count),
            )
        console.print(price)
    return 0


def cmd_classify(category: str, *, counterparty: str = "", as_json: bool = False) -> int:
    """Print the fixed/variable classification of an expense category."""

    from .classify import classify_cost
    from .config import load_rule_set

    try:
        rules = load_rule_set()
    except ValueError as e:
        return _err(str(e))

    result = classify_cost(category, counterparty, rules=rules)
    if as_json:
        _print_json(dataclasses.asdict(result))
    else:
        typer.echo(f"{result.type}\t{result.category}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Cost and revenue analysis for small food-service businesses. "
        "Loads COST_ANALYSIS_* settings from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)

CSV_PATHS_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a transaction CSV export (repeat for several files)",
    dir_okay=False,
    file_okay=True,
    exists=False,
)

PURCHASES_CSV_OPTION: OptionInfo = typer.Option(
    ...,  # default comes from the parameter (None)
    "--purchases-csv-path",
    help="Optional purchase ledger used for food cost when transactions have none",
    dir_okay=False,
    file_okay=True,
    exists=False,
)


@app.command("transactions")
def transactions_cmd(
    csv_paths: Annotated[list[Path], CSV_PATHS_OPTION],
    purchases_csv_path: Annotated[Path | None, PURCHASES_CSV_OPTION] = None,
    *,
    headcount: int | None = typer.Option(
        None, help="Staff headcount (falls back to COST_ANALYSIS_HEADCOUNT, then 5)."
    ),
    start: str | None = typer.Option(None, help="Earliest date to include (YYYY-MM-DD)."),
    end: str | None = typer.Option(None, help="Latest date to include (YYYY-MM-DD)."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables."),
) -> None:
    """Summarize revenue and expense transactions."""

    rc = cmd_transactions(
        csv_paths,
        headcount=headcount,
        purchases_csv_path=purchases_csv_path,
        start=start,
        end=end,
        as_json=as_json,
    )
    if rc:
        raise typer.Exit(rc)


@app.command("purchases")
def purchases_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    month: str | None = typer.Option(None, help="Only report this month (YYYY-MM)."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of tables."),
) -> None:
    """Analyze a purchase ledger by category, vendor and price movement."""

    rc = cmd_purchases(csv_path, month=month, as_json=as_json)
    if rc:
        raise typer.Exit(rc)


@app.command("classify")
def classify_cmd(
    category: str = typer.Argument(..., help="Expense category text, e.g. '임대료'."),
    *,
    counterparty: str = typer.Option("", help="Counterparty name used as extra context."),
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """Classify an expense category as fixed or variable cost."""

    rc = cmd_classify(category, counterparty=counterparty, as_json=as_json)
    if rc:
        raise typer.Exit(rc)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m cost_analysis.cli`
    app()
