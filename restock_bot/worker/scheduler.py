"""APScheduler setup for unattended runs."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from restock_bot.config import settings

logger = logging.getLogger(__name__)


def setup_scheduler(run_job, cron: str | None = None) -> AsyncIOScheduler:
    """
    Schedule ``run_job`` on a crontab expression.

    Runs never overlap: a trigger that fires while a run is still going
    is coalesced into the next one.

    Args:
        run_job: Coroutine function running one job
        cron: Crontab expression, defaults to ``settings.schedule_cron``

    Returns:
        Configured scheduler instance (not started)
    """
    cron = cron or settings.schedule_cron
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_job,
        CronTrigger.from_crontab(cron),
        id="restock_report",
        name="Refurbished restock report",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=600,
        replace_existing=True,
    )
    logger.info(f"Scheduler configured: restock report on '{cron}'")
    return scheduler
