#!/usr/bin/env python3
"""
Quick Start Example
===================

Demonstrates basic usage of the ReceiptCalculator: a small cart bought in
California, then the same cart in New York where clothing is exempt.

Usage:
    python examples/quick_start.py
"""

from decimal import Decimal

from receipt_engine.calculator import Item, ReceiptCalculator
from receipt_engine.rates import TaxTable
from receipt_engine.report_generator import ReportGenerator


def main() -> None:
    # Initialize the tax table and calculator
    table = TaxTable()
    calculator = ReceiptCalculator(table=table)
    rg = ReportGenerator()

    cart = [
        Item("book", Decimal("17.99"), 1, "general"),
        Item("potato chips", Decimal("3.99"), 1, "food"),
        Item("shirt", Decimal("29.99"), 1, "clothing"),
    ]

    receipt = calculator.calculate("CA", cart)
    print("--- California ---")
    print(rg.format_text(receipt))

    for line in receipt.lines:
        if line.is_exempt:
            print(f"  {line.item.name}: {line.exemption_reason}")

    print("\n--- New York ---")
    print(rg.format_text(calculator.calculate("NY", cart)))


if __name__ == "__main__":
    main()
