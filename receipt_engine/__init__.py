"""
Receipt Engine
==============

Sales-tax-inclusive shopping receipts: per-jurisdiction rates, category
exemptions and nickel round-up of each line's tax.

Modules:
    rates           - Jurisdiction rate and exemption tables
    calculator      - Receipt calculation engine
    validation      - Cart line input validation
    report_generator- Receipt text, CSV and JSON output
    cli             - Command-line interface
"""

__version__ = "1.0.0"

from receipt_engine.rates import JurisdictionTaxInfo, TaxTable, TaxTableError, load_tax_table
from receipt_engine.calculator import (
    Item,
    LineResult,
    Receipt,
    ReceiptCalculator,
    round_up_to_nearest_05,
)
from receipt_engine.validation import InvalidAmount, InvalidQuantity, ItemValidationError
from receipt_engine.report_generator import ReportGenerator

__all__ = [
    "InvalidAmount",
    "InvalidQuantity",
    "Item",
    "ItemValidationError",
    "JurisdictionTaxInfo",
    "LineResult",
    "Receipt",
    "ReceiptCalculator",
    "ReportGenerator",
    "TaxTable",
    "TaxTableError",
    "load_tax_table",
    "round_up_to_nearest_05",
]
