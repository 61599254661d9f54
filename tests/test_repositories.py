"""Tests for the warehouse repositories against an in-memory session."""

import logging
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from restock_bot.db.repositories import (
    ComponentRecord,
    ComponentRepository,
    LedgerRepository,
    PickEvent,
    PickEventRepository,
)
from restock_bot.errors import QueryError


class FakeResult:
    def __init__(self, rows):
        self.rows = rows

    def all(self):
        return list(self.rows)

    def first(self):
        return self.rows[0] if self.rows else None


class FakeSession:
    """Records executed statements and added rows; optionally fails like a dropped connection."""

    def __init__(self, rows=(), fail: bool = False):
        self.rows = list(rows)
        self.fail = fail
        self.statements = []
        self.added = []
        self.committed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def _raise(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    async def execute(self, statement):
        if self.fail:
            self._raise()
        self.statements.append(statement)
        return FakeResult(self.rows)

    def add(self, row):
        self.added.append(row)

    async def commit(self):
        if self.fail:
            self._raise()
        for i, row in enumerate(self.added, start=1):
            row.id = i
        self.committed = True


def compile_pg(statement):
    return statement.compile(dialect=postgresql.dialect())


class TestPickEventRepository:
    @pytest.mark.asyncio
    async def test_query_filters_emptied_refurbished_picks(self):
        """The window is [start, end) on calendar dates with the four pick predicates."""
        session = FakeSession()
        repo = PickEventRepository(session_factory=lambda: session)

        await repo.fetch(datetime(2026, 10, 17, 9, 30), datetime(2026, 10, 18))

        compiled = compile_pg(session.statements[0])
        sql = str(compiled)
        assert "surtrics.surplus_metrics_data" in sql
        assert "transaction_type =" in sql
        assert "sku LIKE" in sql
        assert "quantity_after =" in sql
        assert "transaction_date >=" in sql
        assert "transaction_date <" in sql
        assert "transaction_date <=" not in sql

        params = list(compiled.params.values())
        assert "Pick" in params
        assert "%-3" in params
        assert 0 in params
        assert date(2026, 10, 17) in params
        assert date(2026, 10, 18) in params

    @pytest.mark.asyncio
    async def test_rows_become_pick_events(self):
        row = SimpleNamespace(
            transaction_date=datetime(2026, 10, 17, 14, 5),
            sku="LAP-100-3",
            quantity=1,
            quantity_before=1,
            quantity_after=0,
        )
        repo = PickEventRepository(session_factory=lambda: FakeSession(rows=[row]))

        events = await repo.fetch(date(2026, 10, 17), date(2026, 10, 18))

        assert events == [
            PickEvent(
                date=datetime(2026, 10, 17, 14, 5),
                sku="LAP-100-3",
                quantity=1,
                quantity_before=1,
                quantity_after=0,
            )
        ]

    @pytest.mark.asyncio
    async def test_driver_error_becomes_query_error(self):
        repo = PickEventRepository(session_factory=lambda: FakeSession(fail=True))

        with pytest.raises(QueryError):
            await repo.fetch(date(2026, 10, 17), date(2026, 10, 18))


class TestComponentRepository:
    @pytest.mark.asyncio
    async def test_missing_row_returns_none(self):
        repo = ComponentRepository(session_factory=lambda: FakeSession())

        assert await repo.get_by_sku("LAP-100-4") is None

    @pytest.mark.asyncio
    async def test_row_becomes_component_record(self):
        row = SimpleNamespace(sku="LAP-100-4", quantity=3, retail_price=Decimal("80.00"))
        session = FakeSession(rows=[row])
        repo = ComponentRepository(session_factory=lambda: session)

        record = await repo.get_by_sku("LAP-100-4")

        assert record == ComponentRecord(sku="LAP-100-4", quantity=3, retail_price=Decimal("80.00"))
        compiled = compile_pg(session.statements[0])
        assert "sursuite.components" in str(compiled)
        assert "LAP-100-4" in compiled.params.values()

    @pytest.mark.asyncio
    async def test_driver_error_becomes_query_error(self):
        repo = ComponentRepository(session_factory=lambda: FakeSession(fail=True))

        with pytest.raises(QueryError):
            await repo.get_by_sku("LAP-100-4")


class TestLedgerRepository:
    @pytest.mark.asyncio
    async def test_insert_commits_and_returns_id(self):
        session = FakeSession()
        repo = LedgerRepository(session_factory=lambda: session)

        row_id = await repo.insert("LAP-100-4", Decimal("120.00"), Decimal("80.00"))

        assert row_id == 1
        assert session.committed
        assert session.added[0].sku == "LAP-100-4"
        assert session.added[0].refurbished_price == Decimal("120.00")
        assert session.added[0].used_price == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_driver_error_is_logged_and_becomes_query_error(self, caplog):
        repo = LedgerRepository(session_factory=lambda: FakeSession(fail=True))

        with caplog.at_level(logging.ERROR, logger="restock_bot.db.repositories"):
            with pytest.raises(QueryError):
                await repo.insert("LAP-100-4", Decimal("120.00"), Decimal("80.00"))

        assert "Failed to record restock notification for LAP-100-4" in caplog.text
