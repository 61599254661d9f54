"""Ledger recording and chat delivery of restock notifications."""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Protocol, Sequence

from restock_bot.config import settings
from restock_bot.enrich import ComponentEconomics, ItemResult

logger = logging.getLogger(__name__)


class LedgerWriter(Protocol):
    async def insert(self, sku: str, refurbished_price: Decimal, used_price: Decimal) -> int: ...


class ChatClient(Protocol):
    async def post_text(self, message: str) -> dict[str, Any]: ...

    async def post_card(self, card: dict[str, Any]) -> dict[str, Any]: ...

    async def update_card(self, card_id: str, card: dict[str, Any]) -> dict[str, Any]: ...

    async def close(self) -> None: ...


class NotificationDispatcher:
    """Writes ledger rows for candidates and delivers cards to the chat."""

    def __init__(
        self,
        chat: ChatClient,
        ledger: LedgerWriter,
        max_concurrency: int | None = None,
    ):
        self.chat = chat
        self.ledger = ledger
        self.max_concurrency = max_concurrency or settings.max_concurrency

    async def close(self):
        await self.chat.close()

    async def record(self, candidates: Sequence[ComponentEconomics]) -> list[ItemResult[int]]:
        """
        Insert one ledger row per candidate, at most N at a time.

        Returns:
            Per-candidate results in input order; a failed insert is an
            error result and does not stop the others
        """
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def insert_with_semaphore(index: int, item: ComponentEconomics) -> ItemResult[int]:
            async with semaphore:
                try:
                    row_id = await self.ledger.insert(
                        item.sku, item.refurbished_retail_price, item.retail_price
                    )
                    return ItemResult(index=index, value=row_id)
                except Exception as e:
                    logger.error(f"Failed to record restock notification for {item.sku}: {e}")
                    return ItemResult(index=index, error=e)

        results = list(await asyncio.gather(
            *(insert_with_semaphore(i, item) for i, item in enumerate(candidates))
        ))
        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Recorded {len(results) - failed} of {len(results)} restock notifications")
        return results

    async def deliver(self, document: dict[str, Any], card_id: str | None = None) -> dict[str, Any]:
        """
        Post the card, or replace card ``card_id`` when given.

        Raises:
            DeliveryError: If the chat platform call fails
        """
        if card_id:
            return await self.chat.update_card(card_id, document)
        return await self.chat.post_card(document)

    async def deliver_error(self, message: str) -> bool:
        """Best-effort plain-text error post. Never raises."""
        try:
            await self.chat.post_text(message)
            return True
        except Exception as e:
            logger.error(f"Failed to deliver error notification: {e}")
            return False
