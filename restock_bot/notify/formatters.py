"""Text formatting for restock notifications."""

from decimal import Decimal
from typing import Sequence

from restock_bot.config import settings
from restock_bot.enrich import ComponentEconomics


def format_number(value: int | Decimal | float | None) -> str:
    """Format a quantity with thousands separators (``1,234``)."""
    if value is None:
        return "0"
    if isinstance(value, int):
        return f"{value:,}"
    value = Decimal(str(value))
    if value == value.to_integral_value():
        return f"{int(value):,}"
    return f"{value.normalize():,}"


def format_currency(value: Decimal | float | int | None) -> str:
    """Format a price in dollars (``$1,234.56``, ``-$3.00``)."""
    value = Decimal(str(value)) if value is not None else Decimal("0")
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def sku_link(sku: str) -> str:
    """Markdown link to the sku in the inventory system."""
    return f"[{sku}]({settings.sku_link_template.format(sku=sku)})"


def format_restock_entry(item: ComponentEconomics) -> str:
    """Markdown list entry describing one restock candidate."""
    return (
        f"* Sku: {sku_link(item.sku)}\n"
        f"    * Quantity In Stock: {format_number(item.quantity)}\n"
        f"    * Used Retail Price: {format_currency(item.retail_price)}\n"
        f"    * Refurbished Retail Price: {format_currency(item.refurbished_retail_price)}\n"
        f"    * Potential Revenue Per Item: {format_currency(item.potential_revenue_per_item)}\n"
    )


def format_restock_listing(items: Sequence[ComponentEconomics]) -> str:
    return "\n".join(format_restock_entry(item) for item in items)


def format_error_message(title: str | None, date_range: str | None, error: BaseException) -> str:
    """Plain-text message posted when a run fails."""
    lines = [f"**{title or 'Restock Report'}**"]
    if date_range:
        lines.append(date_range)
    lines.append(f"Run failed: {type(error).__name__}: {error}")
    return "\n".join(lines)
