import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .config import RESET_HOUR, RESET_MINUTE, TIMEZONE
from .engine import GamificationEngine

logger = logging.getLogger(__name__)


def setup_scheduler(engine: GamificationEngine) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=TIMEZONE)

    # Daily chores reset shortly after midnight
    scheduler.add_job(
        daily_reset,
        CronTrigger(hour=RESET_HOUR, minute=RESET_MINUTE, timezone=TIMEZONE),
        args=[engine],
        id="daily_reset",
        replace_existing=True,
    )

    return scheduler


async def daily_reset(engine: GamificationEngine) -> None:
    """Clear yesterday's daily chores."""
    logger.info("Running scheduled daily reset")
    try:
        performed = await engine.check_and_perform_daily_reset()
    except Exception as e:
        logger.error("Daily reset failed: %s", e)
        return
    if not performed:
        logger.info("Daily reset already done today")
