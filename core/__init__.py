"""
Core business logic for the library membership backend.
Used by the web API, the expiry scheduler and the CLI.
"""

# Database (SQLAlchemy)
from .database import (
    get_connection,
    get_transaction,
    get_engine,
    close_engine,
    is_configured,
    ping_database,
)

# Timezone utilities
from .timezone import today_in_timezone

__all__ = [
    "get_connection",
    "get_transaction",
    "get_engine",
    "close_engine",
    "is_configured",
    "ping_database",
    "today_in_timezone",
]
