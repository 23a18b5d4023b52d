"""
Membership expiry reminder job.

One run: load settings -> compute the target date -> find students whose
membership ends on or before it -> send reminders. Runs are independent;
students still inside the window are reminded again on the next run.

The job never raises. Failures are logged, reported to Sentry and returned
as an ExpiryRunResult so the host process (scheduler, admin endpoint, CLI)
can decide what to do with them.
"""

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable

import sentry_sdk
from sqlalchemy.ext.asyncio import AsyncConnection

from core.config import (
    get_expiry_timezone,
    get_notification_channels,
    get_notification_timeout,
)
from core.database import get_connection
from core.enums import NotificationChannel, RunStatus
from core.notifications.channels.email import is_email_configured
from core.notifications.context import (
    compute_target_date,
    get_expiry_targets,
    load_expiry_settings,
)
from core.notifications.dispatcher import DeliveryResult, dispatch_expiry_notifications
from core.timezone import today_in_timezone

logger = logging.getLogger(__name__)


# Set while a run is in flight; a second trigger during that time is skipped
_run_in_progress = False


@dataclass
class ExpiryRunResult:
    """Outcome of one expiry run."""

    status: RunStatus
    started_at: datetime
    finished_at: datetime | None = None
    target_date: date | None = None
    template_id: int | None = None
    days_before: int | None = None
    matched: int = 0
    deliveries: list[DeliveryResult] = field(default_factory=list)
    error: str | None = None

    @property
    def sent(self) -> int:
        return sum(1 for d in self.deliveries if d.success)

    @property
    def failed_deliveries(self) -> int:
        return sum(1 for d in self.deliveries if not d.success)

    @property
    def ok(self) -> bool:
        return self.status != RunStatus.failed

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "template_id": self.template_id,
            "days_before": self.days_before,
            "matched": self.matched,
            "sent": self.sent,
            "failed": self.failed_deliveries,
            "deliveries": [d.to_dict() for d in self.deliveries],
            "error": self.error,
        }


def is_run_in_progress() -> bool:
    return _run_in_progress


def _finish(result: ExpiryRunResult) -> ExpiryRunResult:
    result.finished_at = datetime.now(timezone.utc)
    return result


async def run_expiry_notifications(
    channels: frozenset[NotificationChannel] | None = None,
    today: date | None = None,
    connection_factory: Callable[
        [], AbstractAsyncContextManager[AsyncConnection]
    ] = get_connection,
) -> ExpiryRunResult:
    """
    Run the expiry reminder pipeline once.

    Args:
        channels: Channels to send on (default: EXPIRY_NOTIFICATION_CHANNELS)
        today: Reference date (default: today in EXPIRY_JOB_TIMEZONE)
        connection_factory: Async context manager yielding a DB connection

    Returns:
        ExpiryRunResult describing what happened
    """
    global _run_in_progress

    started_at = datetime.now(timezone.utc)
    if _run_in_progress:
        logger.warning("Expiry notification run already in progress, skipping")
        return _finish(ExpiryRunResult(status=RunStatus.skipped, started_at=started_at))

    _run_in_progress = True
    result = ExpiryRunResult(status=RunStatus.failed, started_at=started_at)
    try:
        logger.info("Running expiry notifications...")

        try:
            if channels is None:
                channels = get_notification_channels()
            timeout = get_notification_timeout()
        except ValueError as e:
            logger.error(f"Invalid notification configuration: {e}")
            result.error = str(e)
            return _finish(result)

        if today is None:
            today = today_in_timezone(get_expiry_timezone())

        try:
            async with connection_factory() as conn:
                settings = await load_expiry_settings(conn)
                result.template_id = settings.template_id
                result.days_before = settings.days_before

                result.target_date = compute_target_date(today, settings.days_before)
                logger.info(f"Target expiry date: {result.target_date.isoformat()}")

                targets = await get_expiry_targets(conn, result.target_date)
        except Exception as e:
            logger.exception("Failed to load expiry settings or students")
            sentry_sdk.capture_exception(e)
            result.error = f"Query failed: {e}"
            return _finish(result)

        result.matched = len(targets)
        logger.info(f"Found {len(targets)} students to notify")
        if not targets:
            result.status = RunStatus.no_matches
            return _finish(result)

        if NotificationChannel.email in channels and not is_email_configured():
            logger.error("BREVO_API_KEY is not set, aborting expiry notifications")
            result.error = "BREVO_API_KEY is not set"
            return _finish(result)

        result.deliveries = await dispatch_expiry_notifications(
            targets,
            template_id=settings.template_id,
            channels=channels,
            timeout=timeout,
        )
        result.status = RunStatus.completed
        logger.info(
            f"Expiry notifications done: {result.sent} sent, "
            f"{result.failed_deliveries} failed"
        )
        return _finish(result)
    finally:
        _run_in_progress = False
