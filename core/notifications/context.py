"""
Context for the expiry notification job: resolved settings, the expiry
window, and the students that fall inside it.

Everything here is recomputed on every run; nothing is cached or persisted.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncConnection

from core.queries.settings import get_settings_by_keys
from core.queries.students import get_students_expiring_by


TEMPLATE_ID_KEY = "email_template_id"
DAYS_BEFORE_KEY = "days_before_expiry"

DEFAULT_TEMPLATE_ID = 1
DEFAULT_DAYS_BEFORE = 7

# ASCII digits only: int() alone would also take "1_0" and non-Latin digits
_INT_PATTERN = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class ExpirySettings:
    """Settings that drive one expiry run."""

    template_id: int
    days_before: int


@dataclass(frozen=True)
class NotificationTarget:
    """One student to notify in one run. Never persisted."""

    student_id: int
    name: str
    email: str | None
    phone: str | None
    expiry_date: str  # YYYY-MM-DD


def parse_int_setting(value: str | None, default: int, minimum: int = 0) -> int:
    """
    Parse a stored setting value as an integer.

    Missing, non-numeric, or below-minimum values fall back to the default
    instead of raising.
    """
    if value is None:
        return default
    text = str(value).strip()
    if not _INT_PATTERN.fullmatch(text):
        return default
    parsed = int(text)
    if parsed < minimum:
        return default
    return parsed


def resolve_expiry_settings(raw: dict[str, str]) -> ExpirySettings:
    """Turn raw settings rows into typed values, applying defaults."""
    return ExpirySettings(
        template_id=parse_int_setting(
            raw.get(TEMPLATE_ID_KEY), DEFAULT_TEMPLATE_ID, minimum=1
        ),
        days_before=parse_int_setting(
            raw.get(DAYS_BEFORE_KEY), DEFAULT_DAYS_BEFORE, minimum=0
        ),
    )


async def load_expiry_settings(conn: AsyncConnection) -> ExpirySettings:
    """Read both expiry settings in a single query."""
    raw = await get_settings_by_keys(conn, [TEMPLATE_ID_KEY, DAYS_BEFORE_KEY])
    return resolve_expiry_settings(raw)


def compute_target_date(today: date, days_before: int) -> date:
    """Last membership end date (inclusive) that gets a reminder."""
    return today + timedelta(days=days_before)


def format_expiry_date(value: date | datetime | str) -> str:
    """
    Format a membership end date as YYYY-MM-DD.

    Accepts a date, a datetime (time of day dropped) or an ISO string.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


def build_target(student: dict) -> NotificationTarget:
    """Build a notification target from a student row."""
    return NotificationTarget(
        student_id=student["id"],
        name=student["name"],
        email=student.get("email"),
        phone=student.get("phone"),
        expiry_date=format_expiry_date(student["membership_end"]),
    )


async def get_expiry_targets(
    conn: AsyncConnection, target_date: date
) -> list[NotificationTarget]:
    """Get notification targets for every membership ending on or before target_date."""
    rows = await get_students_expiring_by(conn, target_date)
    return [build_target(row) for row in rows]
