"""Query layer for database operations using SQLAlchemy Core."""

from .settings import get_settings_by_keys, upsert_setting
from .students import get_students_expiring_by

__all__ = [
    # Settings
    "get_settings_by_keys",
    "upsert_setting",
    # Students
    "get_students_expiring_by",
]
