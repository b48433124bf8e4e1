import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def register_jobs():
    """Register the periodic maintenance jobs."""
    from app.services.data_export import purge_expired_exports

    scheduler.add_job(
        purge_expired_exports,
        IntervalTrigger(minutes=settings.data_export_cleanup_minutes),
        id="data_export_cleanup",
        replace_existing=True,
    )


def start_scheduler():
    """Start the background job scheduler."""
    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")


def stop_scheduler():
    """Stop the background job scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
