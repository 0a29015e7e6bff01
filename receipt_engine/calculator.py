"""
Receipt calculation engine.

Handles:
- Exact line totals (unit price x quantity)
- Category exemptions per jurisdiction
- Per-line tax rounded up to the nearest 0.05
- Subtotal / tax / total accumulation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import (
    MAX_PREC,
    ROUND_CEILING,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Iterable, Optional

from receipt_engine.logging import get_logger
from receipt_engine.rates import ZERO, TaxTable

logger = get_logger(__name__)

NICKEL = Decimal("0.05")
NICKELS_PER_DOLLAR = 20

# Money arithmetic never rounds in this context; a dropped digit raises Inexact.
EXACT = Context(
    prec=MAX_PREC,
    rounding=ROUND_HALF_UP,
    traps=[Inexact, InvalidOperation, DivisionByZero, Overflow],
)


def round_up_to_nearest_05(amount: Decimal) -> Decimal:
    """
    Round a tax amount up to the next multiple of 0.05.

    Exact multiples are returned unchanged: 1.13 -> 1.15, 1.151 -> 1.20,
    1.10 -> 1.10, 0 -> 0.
    """
    with localcontext(EXACT):
        steps = (amount * NICKELS_PER_DOLLAR).to_integral_value(rounding=ROUND_CEILING)
        return steps * NICKEL


@dataclass(frozen=True)
class Item:
    """A single cart line as supplied by the caller."""

    name: str
    unit_price: Decimal
    quantity: int
    category: str


@dataclass(frozen=True)
class LineResult:
    """Computed totals for one cart line."""

    item: Item
    item_total: Decimal
    item_tax: Decimal
    is_exempt: bool = False
    exemption_reason: str = ""

    @property
    def total_with_tax(self) -> Decimal:
        with localcontext(EXACT):
            return self.item_total + self.item_tax


@dataclass
class Receipt:
    """Aggregated result for a cart. Amounts are exact; round only for display."""

    jurisdiction: str
    lines: list[LineResult] = field(default_factory=list)
    subtotal: Decimal = ZERO
    sales_tax: Decimal = ZERO
    total: Decimal = ZERO

    @property
    def item_count(self) -> int:
        return sum(line.item.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class ReceiptCalculator:
    """
    Sales tax receipt engine.

    Resolves the jurisdiction's rate once per cart, applies category
    exemptions and computes each line's tax with the nickel round-up rule.
    """

    def __init__(self, table: Optional[TaxTable] = None) -> None:
        self.table = table or TaxTable()

    def _line(self, jurisdiction: str, rate: Decimal, item: Item) -> LineResult:
        with localcontext(EXACT):
            item_total = item.unit_price * item.quantity

        if self.table.is_exempt(jurisdiction, item.category):
            return LineResult(
                item=item,
                item_total=item_total,
                item_tax=ZERO,
                is_exempt=True,
                exemption_reason=f"{jurisdiction} exempts {item.category}",
            )

        # Unlisted jurisdictions and zero-rate ones both land here
        if rate == ZERO:
            return LineResult(
                item=item,
                item_total=item_total,
                item_tax=ZERO,
                is_exempt=True,
                exemption_reason=f"no sales tax in {jurisdiction or 'unknown jurisdiction'}",
            )

        with localcontext(EXACT):
            raw_tax = item_total * rate
        item_tax = round_up_to_nearest_05(raw_tax)
        logger.debug(
            "%s: %s x %d = %s, raw tax %s -> %s",
            item.name, item.unit_price, item.quantity, item_total, raw_tax, item_tax,
        )
        return LineResult(item=item, item_total=item_total, item_tax=item_tax)

    def calculate_line(self, jurisdiction: str, item: Item) -> LineResult:
        """Compute a single line in isolation."""
        code = jurisdiction.strip().upper()
        return self._line(code, self.table.rate_for(code), item)

    def calculate(self, jurisdiction: str, items: Iterable[Item]) -> Receipt:
        """
        Build a receipt for a cart.

        Lines keep input order. An empty cart yields an all-zero receipt.
        """
        code = jurisdiction.strip().upper()
        rate = self.table.rate_for(code)
        if code not in self.table:
            logger.debug("Jurisdiction %r not configured; no tax applies", code)

        receipt = Receipt(jurisdiction=code)
        with localcontext(EXACT):
            for item in items:
                line = self._line(code, rate, item)
                receipt.lines.append(line)
                receipt.subtotal += line.item_total
                receipt.sales_tax += line.item_tax

            receipt.total = receipt.subtotal + receipt.sales_tax
        logger.debug(
            "Receipt %s: %d lines, subtotal %s, tax %s, total %s",
            code, len(receipt.lines), receipt.subtotal, receipt.sales_tax, receipt.total,
        )
        return receipt
