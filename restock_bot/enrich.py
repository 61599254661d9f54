"""Bounded-concurrency enrichment of pick events into component economics.

Each pick event names a refurbished sku (``...-3``). The matching used
sku (``...-4``) is looked up next to it and the price difference between
the two conditions is the revenue a refurbish would add per unit.
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, Optional, Protocol, Sequence, TypeVar

from restock_bot.config import settings
from restock_bot.db.repositories import REFURBISHED_SUFFIX, ComponentRecord, PickEvent
from restock_bot.errors import EnrichmentError, InvalidSku, LookupNotFound

logger = logging.getLogger(__name__)

USED_SUFFIX = "-4"

T = TypeVar("T")


@dataclass(frozen=True)
class ItemResult(Generic[T]):
    """Outcome of one pooled item: a value or the error that replaced it."""

    index: int
    value: Optional[T] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ComponentEconomics:
    """Used-condition stock paired with its refurbished counterpart."""

    sku: str
    quantity: int
    retail_price: Decimal
    refurbished_sku: str
    refurbished_retail_price: Decimal

    @property
    def potential_revenue_per_item(self) -> Decimal:
        return self.refurbished_retail_price - self.retail_price


@dataclass
class EnrichmentReport:
    """Pool output, index-aligned with the input events."""

    results: list[ItemResult[ComponentEconomics]]

    @property
    def succeeded(self) -> list[ComponentEconomics]:
        return [r.value for r in self.results if r.ok]

    @property
    def failures(self) -> list[ItemResult[ComponentEconomics]]:
        return [r for r in self.results if not r.ok]

    @property
    def failure_count(self) -> int:
        return len(self.failures)


class ComponentLookup(Protocol):
    async def get_by_sku(self, sku: str) -> ComponentRecord | None: ...


def used_sku_for(sku: str) -> str:
    """
    Derive the used-condition sku from a refurbished sku.

    The last ``-3`` is replaced with ``-4`` (``ABC-3`` -> ``ABC-4``).

    Raises:
        InvalidSku: If the sku does not contain ``-3``
    """
    if not sku or REFURBISHED_SUFFIX not in sku:
        raise InvalidSku(sku)
    head, _, tail = sku.rpartition(REFURBISHED_SUFFIX)
    return f"{head}{USED_SUFFIX}{tail}"


def _price(value: Decimal | None) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


class EnrichmentPool:
    """Resolves component economics for pick events, at most N lookups at a time."""

    def __init__(self, lookup: ComponentLookup, max_concurrency: int | None = None):
        self.lookup = lookup
        self.max_concurrency = max_concurrency or settings.max_concurrency

    async def enrich_one(self, event: PickEvent) -> ComponentEconomics:
        """
        Look up both conditions of one sku.

        Raises:
            InvalidSku: If the pick event sku is not a refurbished sku
            LookupNotFound: If either component record is missing
            QueryError: If a lookup query fails
        """
        refurbished_sku = event.sku
        used_sku = used_sku_for(refurbished_sku)

        refurbished = await self.lookup.get_by_sku(refurbished_sku)
        if refurbished is None:
            raise LookupNotFound(refurbished_sku, "Refurbished component")

        logger.debug(f"Querying used component quantity for {used_sku}")
        used = await self.lookup.get_by_sku(used_sku)
        if used is None:
            raise LookupNotFound(used_sku, "Used component")

        return ComponentEconomics(
            sku=used.sku,
            quantity=used.quantity,
            retail_price=_price(used.retail_price),
            refurbished_sku=refurbished_sku,
            refurbished_retail_price=_price(refurbished.retail_price),
        )

    async def enrich(self, events: Sequence[PickEvent]) -> EnrichmentReport:
        """
        Enrich all events with bounded concurrency.

        A failed item is kept in place as an error result and never
        cancels the other lookups. When every item failed only because
        component records are missing, the report is returned as is and
        the caller treats it as a data condition rather than an error.

        Raises:
            EnrichmentError: If every item failed and at least one failure
                was something other than a missing component record
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def enrich_with_semaphore(index: int, event: PickEvent) -> ItemResult[ComponentEconomics]:
            async with semaphore:
                try:
                    return ItemResult(index=index, value=await self.enrich_one(event))
                except Exception as e:
                    logger.warning(f"Component lookup failed for {event.sku}: {e}")
                    return ItemResult(index=index, error=e)

        tasks = [enrich_with_semaphore(i, event) for i, event in enumerate(events)]
        results = list(await asyncio.gather(*tasks))
        report = EnrichmentReport(results=results)

        if report.failure_count:
            logger.warning(
                f"Component lookups: {len(report.succeeded)} succeeded, "
                f"{report.failure_count} failed"
            )

        if results and not report.succeeded:
            errors = [r.error for r in report.failures]
            if not all(isinstance(e, LookupNotFound) for e in errors):
                raise EnrichmentError(errors)

        return report
