"""Tests for notification text formatting."""

from decimal import Decimal

from restock_bot.enrich import ComponentEconomics
from restock_bot.notify.formatters import (
    format_currency,
    format_error_message,
    format_number,
    format_restock_entry,
    format_restock_listing,
)


def test_format_number():
    assert format_number(0) == "0"
    assert format_number(1234567) == "1,234,567"
    assert format_number(Decimal("12.0")) == "12"
    assert format_number(None) == "0"


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(Decimal("-3")) == "-$3.00"
    assert format_currency(None) == "$0.00"


def _item(sku="LAP-100-4", quantity=3):
    return ComponentEconomics(
        sku=sku,
        quantity=quantity,
        retail_price=Decimal("80.00"),
        refurbished_sku=sku.replace("-4", "-3"),
        refurbished_retail_price=Decimal("125.00"),
    )


def test_restock_entry():
    entry = format_restock_entry(_item())
    assert entry.startswith(
        "* Sku: [LAP-100-4](https://app.skuvault.com/products/product/list?term=LAP-100-4)\n"
    )
    assert "* Quantity In Stock: 3\n" in entry
    assert "* Used Retail Price: $80.00\n" in entry
    assert "* Refurbished Retail Price: $125.00\n" in entry
    assert "* Potential Revenue Per Item: $45.00\n" in entry


def test_restock_listing_has_one_entry_per_item():
    listing = format_restock_listing([_item("A-4"), _item("B-4")])
    assert listing.count("* Sku: ") == 2


def test_error_message():
    message = format_error_message("Restock", "Sat Oct 17 2026 to Sun Oct 18 2026", ValueError("boom"))
    assert message.splitlines() == [
        "**Restock**",
        "Sat Oct 17 2026 to Sun Oct 18 2026",
        "Run failed: ValueError: boom",
    ]


def test_error_message_without_window():
    message = format_error_message(None, None, RuntimeError("x"))
    assert message.splitlines()[0] == "**Restock Report**"
    assert len(message.splitlines()) == 2
