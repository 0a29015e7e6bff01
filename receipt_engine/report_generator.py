"""
Receipt report generator.

Produces:
- Structured receipt dicts
- Plain-text receipts in the till layout
- Line-item DataFrames
- CSV and JSON export

Amounts are rounded to cents only here; receipts themselves stay exact.
"""

from __future__ import annotations

import json
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from receipt_engine.calculator import LineResult, Receipt
from receipt_engine.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")

LINE_COLUMNS = [
    "name",
    "category",
    "unit_price",
    "quantity",
    "item_total",
    "item_tax",
    "is_exempt",
    "exemption_reason",
]

MONEY_COLUMNS = ["unit_price", "item_total", "item_tax"]


def to_cents(amount: Decimal) -> Decimal:
    """Round an exact amount to cents for display."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal) -> str:
    return f"${to_cents(amount)}"


def _line_dict(line: LineResult) -> dict[str, Any]:
    return {
        "name": line.item.name,
        "category": line.item.category,
        "unit_price": str(to_cents(line.item.unit_price)),
        "quantity": line.item.quantity,
        "item_total": str(to_cents(line.item_total)),
        "item_tax": str(to_cents(line.item_tax)),
        "is_exempt": line.is_exempt,
        "exemption_reason": line.exemption_reason,
    }


class ReportGenerator:
    """
    Formats receipts for the console and exports them to CSV/JSON.

    Files are written under output_dir, created on first export.
    """

    def __init__(self, output_dir: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir) if output_dir else Path("receipts")

    def _target(self, filename: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir / filename

    # ------------------------------------------------------------------
    # Structured receipt
    # ------------------------------------------------------------------

    def receipt_report(self, receipt: Receipt) -> dict[str, Any]:
        """Return the receipt as a JSON-ready dict with cent-rounded strings."""
        return {
            "report_type": "receipt",
            "generated_date": date.today().isoformat(),
            "jurisdiction": receipt.jurisdiction,
            "lines": [_line_dict(line) for line in receipt.lines],
            "summary": {
                "item_count": receipt.item_count,
                "subtotal": str(to_cents(receipt.subtotal)),
                "sales_tax": str(to_cents(receipt.sales_tax)),
                "total": str(to_cents(receipt.total)),
            },
        }

    def to_dataframe(self, receipt: Receipt) -> pd.DataFrame:
        """One row per line with exact Decimal amounts."""
        rows = [
            {
                "name": line.item.name,
                "category": line.item.category,
                "unit_price": line.item.unit_price,
                "quantity": line.item.quantity,
                "item_total": line.item_total,
                "item_tax": line.item_tax,
                "is_exempt": line.is_exempt,
                "exemption_reason": line.exemption_reason,
            }
            for line in receipt.lines
        ]
        return pd.DataFrame(rows, columns=LINE_COLUMNS)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_json(self, receipt: Receipt, filename: str) -> str:
        """Export a receipt to JSON and return the JSON string."""
        json_str = json.dumps(self.receipt_report(receipt), indent=2)
        path = self._target(filename)
        path.write_text(json_str, encoding="utf-8")
        logger.info("Wrote receipt JSON to %s", path)
        return json_str

    def to_csv(self, receipt: Receipt, filename: str) -> str:
        """Export receipt lines to CSV (cent-rounded) and return the CSV string."""
        df = self.to_dataframe(receipt)
        for column in MONEY_COLUMNS:
            df[column] = df[column].map(to_cents)
        csv_str = df.to_csv(index=False)
        path = self._target(filename)
        path.write_text(csv_str, encoding="utf-8")
        logger.info("Wrote receipt CSV to %s", path)
        return csv_str

    # ------------------------------------------------------------------
    # Console-formatted text output
    # ------------------------------------------------------------------

    def format_text(self, receipt: Receipt) -> str:
        """Format a receipt in the till layout."""
        lines: list[str] = [f"{'item':<20}{'price':<10}{'qty':<5}"]
        for line in receipt.lines:
            price = f"${to_cents(line.item.unit_price)}"
            lines.append(f"{line.item.name:<20}{price:<11}{line.item.quantity:<5}")
        lines.append(f"{'subtotal:':<23}{format_money(receipt.subtotal)}")
        lines.append(f"{'tax:':<23}{format_money(receipt.sales_tax)}")
        lines.append(f"{'total:':<23}{format_money(receipt.total)}")
        return "\n".join(lines)
