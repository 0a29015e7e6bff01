"""Tests for the ReceiptCalculator engine."""

from decimal import Decimal

import pytest

from receipt_engine.calculator import (
    Item,
    LineResult,
    Receipt,
    ReceiptCalculator,
    round_up_to_nearest_05,
)
from receipt_engine.rates import TaxTable


@pytest.fixture
def calc() -> ReceiptCalculator:
    return ReceiptCalculator()


def _item(
    price: str = "1.00",
    quantity: int = 1,
    category: str = "general",
    name: str = "widget",
) -> Item:
    return Item(name=name, unit_price=Decimal(price), quantity=quantity, category=category)


def _cart() -> list[Item]:
    return [
        _item("17.99", 1, "general", "book"),
        _item("3.99", 1, "food", "potato chips"),
        _item("29.99", 1, "clothing", "shirt"),
    ]


# ── Rounding rule ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("0", "0"),
        ("1.13", "1.15"),
        ("1.16", "1.20"),
        ("1.151", "1.20"),
        ("1.10", "1.10"),
        ("0.001", "0.05"),
        ("0.0975", "0.10"),
        ("0.05", "0.05"),
        ("1.1500001", "1.20"),
        ("2.924025", "2.95"),
    ],
)
def test_round_up_to_nearest_05(raw, expected):
    assert round_up_to_nearest_05(Decimal(raw)) == Decimal(expected)


@pytest.mark.parametrize("raw", ["0", "0.01", "0.049", "0.05", "1.754025", "99.999"])
def test_rounding_bounds_and_idempotence(raw):
    amount = Decimal(raw)
    rounded = round_up_to_nearest_05(amount)
    assert rounded >= amount
    assert rounded - amount < Decimal("0.05")
    assert rounded % Decimal("0.05") == 0
    assert round_up_to_nearest_05(rounded) == rounded


def test_exact_multiple_is_unchanged():
    assert round_up_to_nearest_05(Decimal("1.10")) - Decimal("1.10") == 0


# ── Single-line scenarios ────────────────────────────────────────────


def test_california_general_item(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("1.00")])
    # 1.00 * 0.0975 = 0.0975 -> 0.10
    assert receipt.subtotal == Decimal("1.00")
    assert receipt.sales_tax == Decimal("0.10")
    assert receipt.total == Decimal("1.10")


def test_new_york_clothing_is_exempt(calc: ReceiptCalculator):
    receipt = calc.calculate("NY", [_item("1.00", category="clothing")])
    assert receipt.sales_tax == Decimal("0")
    assert receipt.total == Decimal("1.00")
    line = receipt.lines[0]
    assert line.is_exempt is True
    assert "NY exempts clothing" in line.exemption_reason


def test_unlisted_state_charges_no_tax(calc: ReceiptCalculator):
    receipt = calc.calculate("TX", [_item("10.00", 2)])
    assert receipt.subtotal == Decimal("20.00")
    assert receipt.sales_tax == Decimal("0")
    assert receipt.total == Decimal("20.00")
    assert "no sales tax" in receipt.lines[0].exemption_reason


def test_quantity_multiplies_before_tax(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("2.00", 3)])
    # 6.00 * 0.0975 = 0.585 -> 0.60
    assert receipt.lines[0].item_total == Decimal("6.00")
    assert receipt.lines[0].item_tax == Decimal("0.60")


def test_food_exempt_in_california(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("100.00", 5, "food")])
    assert receipt.sales_tax == Decimal("0")
    assert receipt.subtotal == Decimal("500.00")


def test_clothing_taxed_in_california(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("29.99", category="clothing")])
    assert receipt.sales_tax == Decimal("2.95")


def test_category_match_is_case_sensitive(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("1.00", category="Food")])
    assert receipt.sales_tax == Decimal("0.10")
    assert receipt.lines[0].is_exempt is False


def test_jurisdiction_is_normalized(calc: ReceiptCalculator):
    receipt = calc.calculate(" ca ", [_item("1.00")])
    assert receipt.jurisdiction == "CA"
    assert receipt.sales_tax == Decimal("0.10")


def test_free_item_has_no_tax(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("0.00", 4)])
    assert receipt.sales_tax == Decimal("0")
    assert receipt.total == Decimal("0")


# ── Cart totals ──────────────────────────────────────────────────────


def test_empty_cart(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [])
    assert isinstance(receipt, Receipt)
    assert receipt.is_empty is True
    assert receipt.subtotal == 0
    assert receipt.sales_tax == 0
    assert receipt.total == 0
    assert receipt.item_count == 0


def test_california_mixed_cart(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", _cart())
    # book 1.754025 -> 1.80, chips exempt, shirt 2.924025 -> 2.95
    assert [line.item_tax for line in receipt.lines] == [
        Decimal("1.80"),
        Decimal("0"),
        Decimal("2.95"),
    ]
    assert receipt.subtotal == Decimal("51.97")
    assert receipt.sales_tax == Decimal("4.75")
    assert receipt.total == Decimal("56.72")


def test_new_york_mixed_cart(calc: ReceiptCalculator):
    receipt = calc.calculate("NY", _cart())
    # book 1.5966125 -> 1.60, chips and shirt exempt
    assert receipt.sales_tax == Decimal("1.60")
    assert receipt.total == Decimal("53.57")
    assert [line.is_exempt for line in receipt.lines] == [False, True, True]


def test_lines_keep_input_order(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", _cart())
    assert [line.item.name for line in receipt.lines] == ["book", "potato chips", "shirt"]
    assert all(isinstance(line, LineResult) for line in receipt.lines)


def test_item_count_sums_quantities(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item(quantity=3), _item(quantity=2)])
    assert receipt.item_count == 5


def test_tax_is_rounded_per_line_not_per_cart(calc: ReceiptCalculator):
    # each 1.00 line rounds 0.0975 up to 0.10; the cart-level sum would be 0.195 -> 0.20
    receipt = calc.calculate("CA", [_item("1.00"), _item("1.00")])
    assert receipt.sales_tax == Decimal("0.20")
    receipt = calc.calculate("CA", [_item("0.10"), _item("0.10"), _item("0.10")])
    # 0.00975 -> 0.05 each
    assert receipt.sales_tax == Decimal("0.15")


def test_sub_cent_prices_stay_exact(calc: ReceiptCalculator):
    receipt = calc.calculate("TX", [_item("0.3333", 3)])
    assert receipt.subtotal == Decimal("0.9999")
    assert receipt.total == Decimal("0.9999")


@pytest.mark.parametrize("jurisdiction", ["CA", "NY", "TX", ""])
def test_total_is_subtotal_plus_tax(calc: ReceiptCalculator, jurisdiction):
    receipt = calc.calculate(jurisdiction, _cart() + [_item("0.3333", 7)])
    assert receipt.total == receipt.subtotal + receipt.sales_tax


# ── Zero-rate and exemption routes ───────────────────────────────────


def test_zero_rate_jurisdiction_in_table():
    calc = ReceiptCalculator(TaxTable(rates={"OR": "0"}))
    receipt = calc.calculate("OR", _cart())
    assert receipt.sales_tax == Decimal("0")
    assert all("no sales tax" in line.exemption_reason for line in receipt.lines)


def test_exempt_category_reported_before_zero_rate():
    calc = ReceiptCalculator(TaxTable(rates={"OR": "0"}, exemptions={"OR": ["food"]}))
    line = calc.calculate_line("OR", _item(category="food"))
    assert line.exemption_reason == "OR exempts food"


def test_custom_table():
    calc = ReceiptCalculator(TaxTable(rates={"TX": "0.0625"}, exemptions={"TX": ["food"]}))
    receipt = calc.calculate("TX", [_item("10.00"), _item("10.00", category="food")])
    # 0.625 -> 0.65
    assert receipt.sales_tax == Decimal("0.65")
    assert receipt.total == Decimal("20.65")


def test_calculate_line(calc: ReceiptCalculator):
    line = calc.calculate_line("ny", _item("17.99", category="general"))
    assert line.item_total == Decimal("17.99")
    assert line.item_tax == Decimal("1.60")
    assert line.total_with_tax == Decimal("19.59")


def test_items_are_immutable():
    item = _item()
    with pytest.raises(AttributeError):
        item.quantity = 2  # type: ignore[misc]


# ── Precision beyond the default decimal context ─────────────────────


def test_rounding_never_goes_below_long_raw_amount():
    raw = Decimal("1.1000000000000000000000000001")
    assert round_up_to_nearest_05(raw) == Decimal("1.15")


def test_long_price_subtotal_is_exact(calc: ReceiptCalculator):
    price = "1234567890123456789012345.6789"
    receipt = calc.calculate("TX", [_item(price)])
    assert receipt.subtotal == Decimal(price)
    assert receipt.total == Decimal(price)


def test_long_price_tax_is_rounded_up_from_exact_raw(calc: ReceiptCalculator):
    receipt = calc.calculate("CA", [_item("20000000000000000000017.4359")])
    # exact raw tax 1950000000000000000001.70000025 -> .75
    line = receipt.lines[0]
    assert line.item_tax == Decimal("1950000000000000000001.75")
    assert line.item_tax >= line.item_total * Decimal("0.0975")
    assert receipt.total == Decimal("21950000000000000000019.1859")
    assert line.total_with_tax == receipt.total


def test_long_quantity_product_is_exact(calc: ReceiptCalculator):
    receipt = calc.calculate("TX", [_item("0.0001", 10**30 + 1)])
    assert receipt.subtotal == Decimal("100000000000000000000000000.0001")
