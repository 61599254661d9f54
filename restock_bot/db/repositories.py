"""Read and write access to the warehouse tables.

All three repositories open a fresh session per call so they can be
driven concurrently from the lookup and ledger pools.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from restock_bot.db.models import Component, PickTransaction, RestockNotification
from restock_bot.errors import QueryError

logger = logging.getLogger(__name__)

REFURBISHED_SUFFIX = "-3"


@dataclass(frozen=True)
class PickEvent:
    """A pick that emptied the refurbished-condition stock of a sku."""

    date: datetime
    sku: str
    quantity: int
    quantity_before: Optional[int]
    quantity_after: Optional[int]


@dataclass(frozen=True)
class ComponentRecord:
    """Stock and price of one sku."""

    sku: str
    quantity: int
    retail_price: Optional[Decimal]


def _session_factory(
    session_factory: async_sessionmaker[AsyncSession] | None,
) -> async_sessionmaker[AsyncSession]:
    if session_factory is not None:
        return session_factory
    from restock_bot.db.session import AsyncSessionLocal

    return AsyncSessionLocal


class PickEventRepository:
    """Queries pick transactions that left a refurbished sku at zero."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self.session_factory = _session_factory(session_factory)

    async def fetch(self, start: date | datetime, end: date | datetime) -> list[PickEvent]:
        """
        Fetch pick events in ``[start, end)``.

        Bounds are compared as calendar dates, start inclusive and end
        exclusive.

        Args:
            start: Window start
            end: Window end (exclusive)

        Returns:
            Pick events in database order

        Raises:
            QueryError: If the query fails
        """
        start_date = start.date() if isinstance(start, datetime) else start
        end_date = end.date() if isinstance(end, datetime) else end
        logger.info(f"Querying pick transactions for {start_date.isoformat()} up to {end_date.isoformat()}")

        query = select(
            PickTransaction.transaction_date,
            PickTransaction.sku,
            PickTransaction.quantity,
            PickTransaction.quantity_before,
            PickTransaction.quantity_after,
        ).where(
            PickTransaction.transaction_type == "Pick",
            PickTransaction.sku.like(f"%{REFURBISHED_SUFFIX}"),
            PickTransaction.quantity_after == 0,
            PickTransaction.transaction_date >= start_date,
            PickTransaction.transaction_date < end_date,
        )

        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Pick transaction query failed: {e}")
            raise QueryError("Error querying pick transactions") from e

        return [
            PickEvent(
                date=row.transaction_date,
                sku=row.sku,
                quantity=row.quantity,
                quantity_before=row.quantity_before,
                quantity_after=row.quantity_after,
            )
            for row in rows
        ]


class ComponentRepository:
    """Looks up component records by exact sku."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self.session_factory = _session_factory(session_factory)

    async def get_by_sku(self, sku: str) -> ComponentRecord | None:
        """Return the component for ``sku`` or None if there is no such row."""
        query = select(Component.sku, Component.quantity, Component.retail_price).where(
            Component.sku == sku
        )
        try:
            async with self.session_factory() as db:
                result = await db.execute(query)
                row = result.first()
        except SQLAlchemyError as e:
            logger.error(f"Component query failed for {sku}: {e}")
            raise QueryError(f"Error querying component {sku}") from e

        if row is None:
            return None
        return ComponentRecord(sku=row.sku, quantity=row.quantity, retail_price=row.retail_price)


class LedgerRepository:
    """Appends restock notification rows."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self.session_factory = _session_factory(session_factory)

    async def insert(self, sku: str, refurbished_price: Decimal, used_price: Decimal) -> int:
        """Insert one ledger row and return its id."""
        try:
            async with self.session_factory() as db:
                row = RestockNotification(
                    sku=sku,
                    refurbished_price=refurbished_price,
                    used_price=used_price,
                )
                db.add(row)
                await db.commit()
                return row.id
        except SQLAlchemyError as e:
            logger.error(f"Failed to record restock notification for {sku}: {e}")
            raise QueryError(f"Error recording restock notification for {sku}") from e
