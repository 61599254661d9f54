"""SQLAlchemy database models.

``PickTransaction`` and ``Component`` map tables owned by the warehouse
systems and are only read. ``RestockNotification`` is the ledger this job
appends to.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class PickTransaction(Base):
    """Inventory transaction recorded by the warehouse metrics feed."""

    __tablename__ = "surplus_metrics_data"
    __table_args__ = {"schema": "surtrics"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    transaction_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(32), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_before: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quantity_after: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class Component(Base):
    """Stocked component, one row per sku and condition."""

    __tablename__ = "components"
    __table_args__ = {"schema": "sursuite"}

    sku: Mapped[str] = mapped_column(String(64), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    retail_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)


class RestockNotification(Base):
    """Ledger row written once per dispatched restock candidate."""

    __tablename__ = "restock_notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    refurbished_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    used_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
