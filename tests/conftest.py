"""Shared fakes for the repositories, chat client and window store."""

import asyncio
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from restock_bot.db.repositories import ComponentRecord, PickEvent
from restock_bot.errors import DeliveryError, QueryError
from restock_bot.window import RunConfig, WindowState


def pick(sku: str, quantity: int = 1, when: datetime | None = None) -> PickEvent:
    return PickEvent(
        date=when or datetime(2026, 10, 17, 10, 30),
        sku=sku,
        quantity=quantity,
        quantity_before=quantity,
        quantity_after=0,
    )


def component(sku: str, quantity: int, price: str | None) -> ComponentRecord:
    return ComponentRecord(
        sku=sku,
        quantity=quantity,
        retail_price=Decimal(price) if price is not None else None,
    )


class FakeComponentRepository:
    """In-memory component lookup that tracks peak concurrency."""

    def __init__(self, records=(), delays=None, broken=()):
        self.records = {r.sku: r for r in records}
        self.delays = delays or {}
        self.broken = set(broken)
        self.in_flight = 0
        self.peak = 0
        self.calls: list[str] = []

    async def get_by_sku(self, sku):
        self.calls.append(sku)
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(sku, 0))
            if sku in self.broken:
                raise QueryError(f"Error querying component {sku}")
            return self.records.get(sku)
        finally:
            self.in_flight -= 1


class FakeEvents:
    def __init__(self, events=(), error: Exception | None = None):
        self.events = list(events)
        self.error = error
        self.windows = []

    async def fetch(self, start, end):
        self.windows.append((start, end))
        if self.error:
            raise self.error
        return list(self.events)


class FakeStore:
    def __init__(self, config: RunConfig | None = None, watermark: datetime | None = None, error=None):
        self.config = config or RunConfig()
        self.state = WindowState(watermark=watermark or datetime(2026, 10, 17))
        self.error = error
        self.saves: list[WindowState] = []

    def load(self):
        if self.error:
            raise self.error
        return self.config, self.state

    def save(self, config, state):
        saved = replace(state, version=state.version + 1)
        self.state = saved
        self.saves.append(saved)
        return saved


class FakeLedger:
    def __init__(self, broken=()):
        self.broken = set(broken)
        self.rows = []

    async def insert(self, sku, refurbished_price, used_price):
        if sku in self.broken:
            raise QueryError(f"Error recording restock notification for {sku}")
        self.rows.append((sku, refurbished_price, used_price))
        return len(self.rows)


class FakeChat:
    def __init__(self, fail_cards=False, fail_text=False):
        self.fail_cards = fail_cards
        self.fail_text = fail_text
        self.cards = []
        self.updates = []
        self.texts = []
        self.closed = False

    async def post_card(self, card):
        if self.fail_cards:
            raise DeliveryError("RingCentral POST failed")
        self.cards.append(card)
        return {"id": f"card-{len(self.cards)}"}

    async def update_card(self, card_id, card):
        self.updates.append((card_id, card))
        return {"id": card_id}

    async def post_text(self, message):
        if self.fail_text:
            raise DeliveryError("RingCentral POST failed")
        self.texts.append(message)
        return {"id": f"post-{len(self.texts)}"}

    async def close(self):
        self.closed = True


@pytest.fixture
def chat():
    return FakeChat()


@pytest.fixture
def ledger():
    return FakeLedger()
