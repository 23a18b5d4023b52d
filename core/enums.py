"""Enum definitions shared by the notification job and the web API."""

import enum


class UserRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"


class NotificationChannel(str, enum.Enum):
    email = "email"
    sms = "sms"


class RunStatus(str, enum.Enum):
    completed = "completed"
    no_matches = "no_matches"
    skipped = "skipped"
    failed = "failed"
