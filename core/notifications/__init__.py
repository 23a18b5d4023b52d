"""
Membership expiry notifications (email and SMS).

Public API:
    run_expiry_notifications() - Run the reminder pipeline once
    ExpiryScheduler / start_expiry_scheduler() - Run it at startup and daily
    dispatch_expiry_notifications(...) - Send reminders to a list of targets
"""

from .dispatcher import DeliveryResult, dispatch_expiry_notifications
from .expiry import ExpiryRunResult, run_expiry_notifications
from .scheduler import ExpiryScheduler, start_expiry_scheduler

__all__ = [
    "run_expiry_notifications",
    "ExpiryRunResult",
    "ExpiryScheduler",
    "start_expiry_scheduler",
    "dispatch_expiry_notifications",
    "DeliveryResult",
]
