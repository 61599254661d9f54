"""Command line entry point.

Runs the restock report once, or on ``SCHEDULE_CRON`` when that is set.
"""

import asyncio
import logging

from restock_bot.config import settings
from restock_bot.db.repositories import ComponentRepository, LedgerRepository, PickEventRepository
from restock_bot.db.session import engine
from restock_bot.enrich import EnrichmentPool
from restock_bot.logging_config import setup_logging
from restock_bot.notify.dispatcher import NotificationDispatcher
from restock_bot.notify.ringcentral import RingCentralClient
from restock_bot.window import JsonWindowStore
from restock_bot.worker.job import RestockJob, RunOutcome
from restock_bot.worker.scheduler import setup_scheduler

logger = logging.getLogger(__name__)


def build_job() -> RestockJob:
    """Wire a job against the configured database, chat and config file."""
    return RestockJob(
        store=JsonWindowStore(settings.run_config_path),
        events=PickEventRepository(),
        pool=EnrichmentPool(ComponentRepository()),
        dispatcher=NotificationDispatcher(RingCentralClient(), LedgerRepository()),
    )


async def run_once() -> RunOutcome:
    job = build_job()
    try:
        return await job.run()
    finally:
        await job.dispatcher.close()
        await engine.dispose()


async def serve() -> None:
    scheduler = setup_scheduler(run_once)
    scheduler.start()
    logger.info("Scheduler started")
    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown()


def main() -> None:
    setup_logging()
    if settings.schedule_cron:
        asyncio.run(serve())
    else:
        asyncio.run(run_once())


if __name__ == "__main__":
    main()
