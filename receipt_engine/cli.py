"""
Command-line interface for the receipt engine.

Provides subcommands for one-shot receipt calculation, an interactive
checkout prompt and viewing the active tax table.
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import Callable, Optional, TypeVar

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from receipt_engine.calculator import Item, Receipt, ReceiptCalculator
from receipt_engine.logging import get_logger, parse_level, set_log_level
from receipt_engine.rates import TaxTable, TaxTableError, load_tax_table
from receipt_engine.report_generator import ReportGenerator, format_money
from receipt_engine.validation import (
    InvalidAmount,
    InvalidQuantity,
    ItemValidationError,
    build_item,
    parse_item_arg,
    parse_price,
    parse_quantity,
)

console = Console()
logger = get_logger(__name__)

T = TypeVar("T")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _load_items_csv(path: str) -> list[Item]:
    """
    Load cart lines from a CSV file.

    Expected columns: name, price, quantity, category
    """
    items: list[Item] = []
    csv_path = Path(path)
    if not csv_path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        sys.exit(1)

    with open(csv_path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for i, row in enumerate(reader):
            try:
                items.append(
                    build_item(
                        row.get("name"),
                        row.get("price") or "",
                        row.get("quantity") or "",
                        row.get("category"),
                    )
                )
            except ItemValidationError as e:
                logger.warning("Skipping row %d of %s: %s", i + 1, path, e)
                console.print(f"[yellow]Skipping row {i + 1}: {escape(str(e))}[/yellow]")
    return items


def _load_table(args: argparse.Namespace) -> TaxTable:
    try:
        return load_tax_table(getattr(args, "rates_file", None))
    except TaxTableError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


def _print_receipt(receipt: Receipt) -> None:
    table = Table(
        title=f"Receipt ({receipt.jurisdiction or 'no jurisdiction'})",
        box=box.ROUNDED,
    )
    table.add_column("Item")
    table.add_column("Category", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Line Total", justify="right")
    table.add_column("Tax", justify="right", style="bold")
    table.add_column("Exempt", justify="center")

    for line in receipt.lines:
        table.add_row(
            line.item.name,
            line.item.category or "-",
            format_money(line.item.unit_price),
            str(line.item.quantity),
            format_money(line.item_total),
            format_money(line.item_tax),
            "Y" if line.is_exempt else "",
        )

    console.print(table)
    console.print(
        Panel(
            f"[bold]Subtotal:[/bold] {format_money(receipt.subtotal)}\n"
            f"[bold]Tax:[/bold] {format_money(receipt.sales_tax)}\n"
            f"[bold]Total:[/bold] {format_money(receipt.total)}",
            title="Summary",
            border_style="green",
        )
    )


def _export(receipt: Receipt, args: argparse.Namespace) -> None:
    if not (args.export_json or args.export_csv):
        return
    rg = ReportGenerator(args.output_dir or "receipts")
    if args.export_json:
        rg.to_json(receipt, args.export_json)
        console.print(f"[green]JSON exported to {rg.output_dir / args.export_json}[/green]")
    if args.export_csv:
        rg.to_csv(receipt, args.export_csv)
        console.print(f"[green]CSV exported to {rg.output_dir / args.export_csv}[/green]")


# -----------------------------------------------------------------------
# Subcommand: calculate
# -----------------------------------------------------------------------


def cmd_calculate(args: argparse.Namespace) -> None:
    """Calculate a receipt from --item arguments or a CSV cart."""
    calc = ReceiptCalculator(_load_table(args))

    items: list[Item] = []
    if args.file:
        items.extend(_load_items_csv(args.file))
    for arg in args.item or []:
        try:
            items.append(parse_item_arg(arg))
        except ItemValidationError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            sys.exit(1)

    if not items and not args.file:
        console.print("[red]Provide --item at least once, or --file[/red]")
        sys.exit(1)

    receipt = calc.calculate(args.state, items)
    _print_receipt(receipt)
    _export(receipt, args)


# -----------------------------------------------------------------------
# Subcommand: interactive
# -----------------------------------------------------------------------


def _prompt_until_valid(prompt: str, parse: Callable[[str], T]) -> T:
    while True:
        raw = console.input(prompt)
        try:
            return parse(raw)
        except (InvalidAmount, InvalidQuantity) as e:
            console.print(f"[red]{escape(str(e))}[/red]")


def cmd_interactive(args: argparse.Namespace) -> None:
    """Prompt for a state and cart lines, then print the receipt."""
    calc = ReceiptCalculator(_load_table(args))

    state = console.input("Enter state (CA/NY/other): ").strip().upper()
    items: list[Item] = []

    while True:
        name = console.input("Enter product name, or 'done' to finish: ").strip()
        if name.lower() == "done":
            break
        if not name:
            console.print("[red]Item name cannot be empty[/red]")
            continue
        price = _prompt_until_valid("Enter unit price: ", parse_price)
        quantity = _prompt_until_valid("Enter quantity: ", parse_quantity)
        category = console.input(
            "Enter category (e.g. food, clothing, general): "
        ).strip()
        items.append(build_item(name, price, quantity, category))

    receipt = calc.calculate(state, items)
    console.print()
    console.print(ReportGenerator(args.output_dir or "receipts").format_text(receipt))
    _export(receipt, args)


# -----------------------------------------------------------------------
# Subcommand: rates
# -----------------------------------------------------------------------


def cmd_rates(args: argparse.Namespace) -> None:
    """Display the active tax table, or one jurisdiction."""
    db = _load_table(args)

    if args.state:
        info = db.get_jurisdiction(args.state)
        if info is None:
            console.print(
                f"[yellow]{args.state.upper()} is not configured; no sales tax applies[/yellow]"
            )
            return
        console.print(
            Panel(
                f"[bold]Rate:[/bold] {info.rate * 100:.3f}%\n"
                f"[bold]Exempt Categories:[/bold] "
                f"{', '.join(sorted(info.exempt_categories)) or 'None'}",
                title=f"{info.code} Tax Profile",
                border_style="cyan",
            )
        )
        return

    table = Table(title="Sales Tax Rates", box=box.ROUNDED)
    table.add_column("Jurisdiction", style="bold")
    table.add_column("Rate", justify="right")
    table.add_column("Exempt Categories")
    for info in db.jurisdictions():
        table.add_row(
            info.code,
            f"{info.rate * 100:.3f}%" if info.has_sales_tax else "None",
            ", ".join(sorted(info.exempt_categories)) or "-",
        )
    console.print(table)
    console.print("[dim]Jurisdictions not listed are charged no sales tax.[/dim]")


# -----------------------------------------------------------------------
# Argument parser
# -----------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="receipt-engine",
        description="Shopping receipt calculator with jurisdiction sales tax",
    )
    parser.add_argument(
        "--rates-file",
        help="TOML tax table (defaults to $RECEIPT_ENGINE_TAX_TABLE or built-in rates)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log verbosity (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # calculate
    calc_p = subparsers.add_parser("calculate", help="Calculate a receipt")
    calc_p.add_argument("--state", "-s", required=True, help="Jurisdiction code")
    calc_p.add_argument(
        "--item",
        "-i",
        action="append",
        help='Cart line as "name|price|quantity|category" (repeatable)',
    )
    calc_p.add_argument("--file", "-f", help="CSV file with name,price,quantity,category")
    calc_p.add_argument("--export-json", help="Export receipt to JSON file")
    calc_p.add_argument("--export-csv", help="Export receipt lines to CSV file")
    calc_p.add_argument("--output-dir", help="Output directory for exports")
    calc_p.set_defaults(func=cmd_calculate)

    # interactive
    inter_p = subparsers.add_parser(
        "interactive", help="Enter a cart at the prompt"
    )
    inter_p.add_argument("--export-json", help="Export receipt to JSON file")
    inter_p.add_argument("--export-csv", help="Export receipt lines to CSV file")
    inter_p.add_argument("--output-dir", help="Output directory for exports")
    inter_p.set_defaults(func=cmd_interactive)

    # rates
    rates_p = subparsers.add_parser("rates", help="View the tax table")
    rates_p.add_argument("--state", "-s", help="Jurisdiction code to look up")
    rates_p.set_defaults(func=cmd_rates)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        set_log_level(parse_level(args.log_level))

    if not args.command:
        parser.print_help()
        sys.exit(0)

    args.func(args)
