"""Daily refresh of the patches cache, independent of client traffic."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from services.cache import PatchCache

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "patches_refresh"


async def run_refresh_job(cache: PatchCache, token: str | None) -> None:
    """One timer firing. Never raises, so the scheduler keeps the next run."""
    try:
        await cache.force_refresh(token)
    except Exception as e:
        logger.warning("Scheduled patches refresh failed: %s", e, exc_info=True)


def build_scheduler(cache: PatchCache, token: str | None, crontab: str = "0 0 * * *") -> AsyncIOScheduler:
    """Scheduler with the refresh job registered; caller starts/stops it."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_refresh_job,
        CronTrigger.from_crontab(crontab),
        args=[cache, token],
        id=REFRESH_JOB_ID,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
