"""
Nightly Streak Scheduler

Runs StreakTrackingService.update_all_streaks once a day at
STREAK_JOB_HOUR:STREAK_JOB_MINUTE in STUDY_TIMEZONE, evaluating the day
that just ended.

The AsyncIOScheduler shares the app's event loop and is started and
stopped by the lifespan in study_tracker/main.py. Every replica runs its
own copy of the job; users already evaluated for the day are skipped, so
extra runs change nothing.

Usage:
    start_scheduler()  # lifespan startup
    stop_scheduler()   # lifespan shutdown
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from study_tracker.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.study_tz)


async def trigger_streak_update() -> None:
    """Evaluate yesterday's study totals against every user's goal."""
    # Deferred imports: avoid loading DB and service modules until job execution.
    from study_tracker.db.base import async_session_maker
    from study_tracker.services.study.streak_tracking import StreakTrackingService

    async with async_session_maker() as db:
        service = StreakTrackingService(db)
        summary = await service.update_all_streaks()
        if summary.failed:
            logger.warning(f"Streak update finished with {summary.failed} failures")


def setup_scheduled_jobs() -> None:
    """Configure all scheduled jobs."""

    # Streak update - daily at local midnight by default
    scheduler.add_job(
        trigger_streak_update,
        CronTrigger(
            hour=settings.STREAK_JOB_HOUR,
            minute=settings.STREAK_JOB_MINUTE,
            timezone=settings.study_tz,
        ),
        id="streak_update",
        name="Daily Streak Update",
        replace_existing=True,
        misfire_grace_time=3600,  # Allow 1 hour grace period
    )

    logger.info("Scheduled jobs configured:")
    logger.info(
        f"  - Streak update: daily at {settings.STREAK_JOB_HOUR:02d}:"
        f"{settings.STREAK_JOB_MINUTE:02d} {settings.STUDY_TIMEZONE}"
    )


def start_scheduler() -> None:
    """Start the scheduler and configure jobs."""
    if scheduler.running:
        logger.warning("Scheduler already running")
        return

    setup_scheduled_jobs()
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler() -> None:
    """Stop the scheduler gracefully."""
    if not scheduler.running:
        logger.warning("Scheduler not running")
        return

    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")


def get_scheduled_jobs() -> list[dict]:
    """Get list of scheduled jobs with their next run times."""
    jobs = []
    for job in scheduler.get_jobs():
        jobs.append(
            {
                "id": job.id,
                "name": job.name,
                "next_run": (
                    job.next_run_time.isoformat()
                    if getattr(job, "next_run_time", None)
                    else None
                ),
                "trigger": str(job.trigger),
            }
        )
    return jobs
