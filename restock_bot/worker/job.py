"""Daily restock report job.

Stages run strictly in order::

    LOAD_CONFIG -> LOAD_WINDOW -> FETCH -> ENRICH -> CLASSIFY -> ASSEMBLE -> DISPATCH -> DONE

Each of FETCH, ENRICH and CLASSIFY may come up empty, which ends the run
in REPORT_NONE with the matching status text. Any exception ends it in
ERROR after one best-effort error post.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol, Sequence
from uuid import uuid4

from restock_bot.config import settings
from restock_bot.db.repositories import PickEvent
from restock_bot.detect.classifier import classify
from restock_bot.enrich import ComponentEconomics, EnrichmentPool, ItemResult
from restock_bot.errors import ConfigError
from restock_bot.notify.card import Fact, NotificationData, build_card
from restock_bot.notify.dispatcher import NotificationDispatcher
from restock_bot.notify.formatters import format_error_message, format_number, format_restock_listing
from restock_bot.window import RunConfig, Window, WindowState, WindowStore, advance

logger = logging.getLogger(__name__)

FOUND_ITEMS_DESCRIPTION = (
    "*The following items had all on hand quantity in refurbished condition picked, "
    "These items have Used inventory available to be refurbished.*"
)


class Stage(Enum):
    LOAD_CONFIG = "load_config"
    LOAD_WINDOW = "load_window"
    FETCH = "fetch"
    ENRICH = "enrich"
    CLASSIFY = "classify"
    ASSEMBLE = "assemble"
    DISPATCH = "dispatch"
    REPORT_NONE = "report_none"
    DONE = "done"
    ERROR = "error"


class PickEventSource(Protocol):
    async def fetch(self, start, end) -> list[PickEvent]: ...


@dataclass
class RunOutcome:
    """What one run did."""

    run_id: str
    stage: Stage = Stage.LOAD_CONFIG
    status: Optional[str] = None
    document: Optional[dict[str, Any]] = None
    window: Optional[Window] = None
    state: Optional[WindowState] = None
    pick_events: int = 0
    used_records: int = 0
    candidates: list[ComponentEconomics] = field(default_factory=list)
    enrichment_failures: int = 0
    ledger_results: list[ItemResult[int]] = field(default_factory=list)
    delivered: bool = False
    error: Optional[BaseException] = None

    @property
    def ledger_failures(self) -> int:
        return sum(1 for r in self.ledger_results if not r.ok)


class RestockJob:
    """Runs one restock report from watermark to chat post."""

    def __init__(
        self,
        store: WindowStore,
        events: PickEventSource,
        pool: EnrichmentPool,
        dispatcher: NotificationDispatcher,
        min_columns: int | None = None,
        max_columns: int | None = None,
    ):
        self.store = store
        self.events = events
        self.pool = pool
        self.dispatcher = dispatcher
        self.min_columns = min_columns or settings.grid_min_columns
        self.max_columns = max_columns or settings.grid_max_columns

    def _build(self, data: NotificationData) -> dict[str, Any]:
        return build_card(data, min_columns=self.min_columns, max_columns=self.max_columns)

    async def _publish(
        self,
        outcome: RunOutcome,
        config: RunConfig,
        document: dict[str, Any],
        candidates: Sequence[ComponentEconomics] = (),
    ) -> None:
        outcome.document = document
        if config.debug:
            logger.info(f"[debug] Notification not sent:\n{json.dumps(document, indent=2)}")
            return
        if config.dry_run:
            logger.info(
                f"[dry run] Notification not sent (status: {outcome.status}, "
                f"{len(candidates)} restock candidates)"
            )
            return

        if candidates:
            outcome.ledger_results = await self.dispatcher.record(candidates)
            if outcome.ledger_failures:
                logger.warning(f"{outcome.ledger_failures} ledger rows could not be written")
        await self.dispatcher.deliver(document)
        outcome.delivered = True

    async def _report_none(
        self,
        outcome: RunOutcome,
        config: RunConfig,
        data: NotificationData,
        status: str,
        description: str,
    ) -> RunOutcome:
        logger.info(description)
        data.status = status
        data.description = description
        outcome.status = status
        await self._publish(outcome, config, self._build(data))
        outcome.stage = Stage.REPORT_NONE
        return outcome

    async def run(self) -> RunOutcome:
        """Run the job once. Never raises."""
        outcome = RunOutcome(run_id=uuid4().hex)
        data = NotificationData()
        config: RunConfig | None = None
        logger.info(f"Starting restock report (run_id: {outcome.run_id[:16]}...)")

        try:
            config, state = self.store.load()

            outcome.stage = Stage.LOAD_WINDOW
            window, next_state = advance(state)
            outcome.window = window
            data.title = config.base_message
            data.date_range = window.date_range

            outcome.stage = Stage.FETCH
            events = await self.events.fetch(window.start, window.end)
            outcome.pick_events = len(events)

            if config.suppress_side_effects:
                logger.info(f"Watermark not saved (debug/dry run), would advance to {next_state.watermark.isoformat()}")
                outcome.state = next_state
            else:
                outcome.state = self.store.save(config, next_state)

            if not events:
                return await self._report_none(
                    outcome, config, data, config.error_no_items,
                    "No Pick Transactions matching query found in the date range",
                )
            data.facts.append(Fact("Pick Transactions", format_number(len(events))))

            outcome.stage = Stage.ENRICH
            report = await self.pool.enrich(events)
            used = report.succeeded
            outcome.used_records = len(used)
            outcome.enrichment_failures = report.failure_count
            if not used:
                return await self._report_none(
                    outcome, config, data, config.error_no_used_items, "No Used Components found"
                )
            data.facts.append(Fact("Used Condition Skus", format_number(len(used))))
            if report.failure_count:
                data.facts.append(Fact("Lookup Failures", format_number(report.failure_count)))

            outcome.stage = Stage.CLASSIFY
            candidates = classify(used)
            outcome.candidates = candidates
            if not candidates:
                return await self._report_none(
                    outcome, config, data, config.error_no_items_in_stock, "No Items to restock from"
                )

            outcome.stage = Stage.ASSEMBLE
            outcome.status = config.message_found_items
            data.status = config.message_found_items
            data.description = FOUND_ITEMS_DESCRIPTION
            data.facts.append(format_restock_listing(candidates))
            data.facts.append(Fact("Items for Restock", format_number(len(candidates))))
            document = self._build(data)

            outcome.stage = Stage.DISPATCH
            await self._publish(outcome, config, document, candidates)
            outcome.stage = Stage.DONE
            logger.info(
                f"Restock report complete: {outcome.pick_events} picks, "
                f"{outcome.used_records} used skus, {len(candidates)} candidates"
            )

        except Exception as e:
            failed_stage = outcome.stage
            outcome.stage = Stage.ERROR
            outcome.error = e
            logger.error(f"Restock report failed during {failed_stage.value}: {e}", exc_info=True)

            if isinstance(e, ConfigError) or config is None:
                return outcome
            if config.suppress_side_effects:
                logger.info("Error notification not sent (debug/dry run)")
                return outcome

            message = format_error_message(config.base_message, outcome.window and outcome.window.date_range, e)
            outcome.delivered = await self.dispatcher.deliver_error(message)

        return outcome
