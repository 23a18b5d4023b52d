"""
APScheduler-based scheduler for the membership expiry job.

The scheduler is an explicit component owned by the host process:
build it, start() it during app startup, stop() it on shutdown. Nothing is
scheduled as a side effect of importing this module.

Jobs live in memory only. They are re-registered on every start, so a
persistent job store would just accumulate duplicates.
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

import sentry_sdk
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import get_expiry_job_time, get_expiry_timezone
from core.enums import RunStatus
from core.notifications.expiry import ExpiryRunResult, run_expiry_notifications
from core.timezone import get_timezone

logger = logging.getLogger(__name__)


DAILY_JOB_ID = "expiry_notifications_daily"
STARTUP_JOB_ID = "expiry_notifications_startup"

JOB_DEFAULTS = {
    "coalesce": True,  # Combine missed runs into one
    "max_instances": 1,
    "misfire_grace_time": 3600,  # Allow 1 hour late execution
}


class ExpiryScheduler:
    """
    Runs the expiry job once at startup and then once a day.

    Usage:
        scheduler = ExpiryScheduler(hour=0, minute=0, timezone="UTC").start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[ExpiryRunResult]] = run_expiry_notifications,
        hour: int = 0,
        minute: int = 0,
        timezone: str = "UTC",
        run_on_start: bool = True,
    ):
        self.job = job
        self.hour = hour
        self.minute = minute
        self.timezone = timezone
        self.run_on_start = run_on_start
        self.last_result: ExpiryRunResult | None = None
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> "ExpiryScheduler":
        """
        Register the jobs and start the scheduler.

        Must be called from within a running asyncio event loop
        (e.g. the FastAPI lifespan). Calling start() twice is a no-op.
        """
        if self._scheduler is not None:
            return self

        tz = get_timezone(self.timezone)
        self._scheduler = AsyncIOScheduler(job_defaults=JOB_DEFAULTS, timezone=tz)
        self._scheduler.add_job(
            self.run_now,
            trigger=CronTrigger(hour=self.hour, minute=self.minute, timezone=tz),
            id=DAILY_JOB_ID,
            replace_existing=True,
        )
        if self.run_on_start:
            # Date trigger without run_date fires immediately
            self._scheduler.add_job(
                self.run_now,
                trigger="date",
                id=STARTUP_JOB_ID,
                replace_existing=True,
            )

        self._scheduler.start()
        logger.info(
            f"Expiry scheduler started: daily at {self.hour:02d}:{self.minute:02d} "
            f"{self.timezone}"
        )
        return self

    def stop(self) -> None:
        """Shutdown the scheduler. Safe to call when not started."""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Expiry scheduler stopped")

    async def run_now(self) -> ExpiryRunResult:
        """
        Run the job once and remember the result.

        This is the function APScheduler calls. It never raises: an unexpected
        exception from the job becomes a failed result.
        """
        try:
            result = await self.job()
        except Exception as e:
            logger.exception("Expiry notification job crashed")
            sentry_sdk.capture_exception(e)
            result = ExpiryRunResult(
                status=RunStatus.failed,
                started_at=datetime.now(timezone.utc),
                finished_at=datetime.now(timezone.utc),
                error=str(e),
            )

        if result.status == RunStatus.failed:
            logger.error(f"Expiry notification run failed: {result.error}")
        # Skipped overlaps leave the previous result in place
        if result.status != RunStatus.skipped:
            self.last_result = result
        return result


def start_expiry_scheduler(**overrides) -> ExpiryScheduler:
    """
    Build an ExpiryScheduler from configuration and start it.

    Keyword overrides are passed to ExpiryScheduler (job, hour, minute,
    timezone, run_on_start).
    """
    hour, minute = get_expiry_job_time()
    options = {
        "hour": hour,
        "minute": minute,
        "timezone": get_expiry_timezone(),
        **overrides,
    }
    return ExpiryScheduler(**options).start()
