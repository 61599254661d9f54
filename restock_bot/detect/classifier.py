"""Restock candidate selection."""

from typing import Iterable

from restock_bot.enrich import ComponentEconomics


def classify(records: Iterable[ComponentEconomics]) -> list[ComponentEconomics]:
    """Keep records with used stock on hand, in input order."""
    return [record for record in records if record.quantity > 0]
