"""
Input validation for cart lines.

Raw text from the prompt loop, command-line arguments or CSV rows is
checked here before anything reaches the calculator, which assumes
non-negative prices and positive integer quantities.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Union

from receipt_engine.calculator import Item


class ItemValidationError(ValueError):
    """A cart line could not be turned into a valid Item."""


class InvalidAmount(ItemValidationError):
    """Price is non-numeric, non-finite or negative."""


class InvalidQuantity(ItemValidationError):
    """Quantity is not a positive whole number."""


def parse_price(value: Union[str, int, Decimal]) -> Decimal:
    if isinstance(value, (bool, float)):
        # prices must stay exact
        raise InvalidAmount(f"Price must be given as text or Decimal, got {value!r}")
    text = str(value).strip().lstrip("$")
    try:
        price = Decimal(text)
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Invalid price: {value!r}") from None
    if not price.is_finite():
        raise InvalidAmount(f"Invalid price: {value!r}")
    if price < 0:
        raise InvalidAmount(f"Price cannot be negative: {value!r}")
    return price


def parse_quantity(value: Union[str, int]) -> int:
    if isinstance(value, bool):
        raise InvalidQuantity(f"Invalid quantity: {value!r}")
    if isinstance(value, int):
        quantity = value
    else:
        text = str(value).strip()
        try:
            quantity = int(text)
        except ValueError:
            raise InvalidQuantity(f"Quantity must be a whole number: {value!r}") from None
    if quantity <= 0:
        raise InvalidQuantity(f"Quantity must be positive: {value!r}")
    return quantity


def build_item(name: Any, price: Any, quantity: Any, category: Any = "") -> Item:
    """
    Validate raw fields and return an Item.

    Name and category are stripped of surrounding whitespace; category case
    is preserved because exemption matching is case-sensitive.
    """
    clean_name = str(name or "").strip()
    if not clean_name:
        raise ItemValidationError("Item name cannot be empty")
    return Item(
        name=clean_name,
        unit_price=parse_price(price),
        quantity=parse_quantity(quantity),
        category=str(category or "").strip(),
    )


def parse_item_arg(arg: str, separator: str = "|") -> Item:
    """
    Parse "name|price|quantity|category" as given on the command line.

    Category may be omitted.
    """
    parts = [p.strip() for p in arg.split(separator)]
    if len(parts) not in (3, 4):
        raise ItemValidationError(
            f"Expected name{separator}price{separator}quantity[{separator}category], got {arg!r}"
        )
    if len(parts) == 3:
        parts.append("")
    name, price, quantity, category = parts
    return build_item(name, price, quantity, category)
