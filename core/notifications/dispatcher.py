"""
Notification dispatcher - sends expiry reminders to each matched student.

One student's failure never stops the batch: every send is attempted once,
failures are logged with recipient context and returned as results.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from core.enums import NotificationChannel
from core.notifications.channels.email import send_transactional_email
from core.notifications.channels.sms import send_sms
from core.notifications.context import NotificationTarget
from core.notifications.templates import get_message

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of one send attempt to one recipient."""

    student_id: int
    channel: NotificationChannel
    recipient: str | None
    success: bool
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "channel": self.channel.value,
            "recipient": self.recipient,
            "success": self.success,
            "error": self.error,
        }


async def _deliver(
    target: NotificationTarget,
    channel: NotificationChannel,
    recipient: str | None,
    send: Callable[[], Awaitable[object]],
) -> DeliveryResult:
    """Run one send, turning any failure into a logged DeliveryResult."""
    if not recipient:
        logger.warning(
            f"Student {target.student_id} has no {channel.value} address, skipping"
        )
        return DeliveryResult(
            student_id=target.student_id,
            channel=channel,
            recipient=None,
            success=False,
            error=f"No {channel.value} address on record",
        )

    try:
        await send()
    except Exception as e:
        logger.error(
            f"Failed to send {channel.value} to {recipient} "
            f"(student {target.student_id}): {e}"
        )
        return DeliveryResult(
            student_id=target.student_id,
            channel=channel,
            recipient=recipient,
            success=False,
            error=str(e),
        )

    logger.info(f"Sent {channel.value} to {recipient} (student {target.student_id})")
    return DeliveryResult(
        student_id=target.student_id,
        channel=channel,
        recipient=recipient,
        success=True,
    )


async def send_expiry_email(
    client: httpx.AsyncClient, target: NotificationTarget, template_id: int
) -> dict:
    """Send the expiry reminder email for one target."""
    return await send_transactional_email(
        client,
        to_email=target.email,
        to_name=target.name,
        template_id=template_id,
        params={"NAME": target.name, "EXPIRY_DATE": target.expiry_date},
    )


async def send_expiry_sms(client: httpx.AsyncClient, target: NotificationTarget) -> dict:
    """Send the expiry reminder SMS for one target."""
    message = get_message(
        "membership_expiry",
        "sms",
        {"name": target.name, "expiry_date": target.expiry_date},
    )
    return await send_sms(client, target.phone, message)


async def dispatch_expiry_notifications(
    targets: list[NotificationTarget],
    template_id: int,
    channels: frozenset[NotificationChannel],
    timeout: float = 10.0,
) -> list[DeliveryResult]:
    """
    Send expiry reminders to every target over the enabled channels.

    Targets are processed sequentially; per target, email goes first, then SMS.

    Args:
        targets: Students to notify
        template_id: Email provider template id
        channels: Enabled channels
        timeout: Per-call timeout in seconds for every outbound request

    Returns:
        One DeliveryResult per attempted (target, channel) pair
    """
    results: list[DeliveryResult] = []

    async with httpx.AsyncClient(timeout=timeout) as client:
        for target in targets:
            if NotificationChannel.email in channels:
                results.append(
                    await _deliver(
                        target,
                        NotificationChannel.email,
                        target.email,
                        lambda: send_expiry_email(client, target, template_id),
                    )
                )
            if NotificationChannel.sms in channels:
                results.append(
                    await _deliver(
                        target,
                        NotificationChannel.sms,
                        target.phone,
                        lambda: send_expiry_sms(client, target),
                    )
                )

    return results
