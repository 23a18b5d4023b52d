"""
Centralized configuration for the library membership backend.

Everything is read from environment variables (loaded from .env.local / .env
by main.py) so the API process, the expiry scheduler and one-off CLI runs
share the same settings.
"""

import os

from .enums import NotificationChannel


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running in the production environment."""
    return os.getenv("APP_ENV", "").lower() == "production"


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_frontend_url() -> str:
    """Get the dashboard URL allowed for CORS."""
    return os.environ.get("FRONTEND_URL", "http://localhost:8080").rstrip("/")


def get_allowed_origins() -> list[str]:
    """
    Get list of allowed CORS origins.

    Includes localhost variants of the dashboard dev server and the
    production frontend URL.
    """
    hosts = ["localhost", "127.0.0.1"]
    ports = [8080, 5173, get_api_port()]
    origins = [f"http://{host}:{port}" for host in hosts for port in ports]

    frontend_url = get_frontend_url()
    if frontend_url not in origins:
        origins.append(frontend_url)

    return origins


# =============================================================================
# Expiry notification job
# =============================================================================


def get_notification_channels() -> frozenset[NotificationChannel]:
    """
    Parse EXPIRY_NOTIFICATION_CHANNELS ("email", "sms" or "email,sms").

    Returns:
        Set of enabled channels; email only when the variable is unset or empty

    Raises:
        ValueError: If the list names an unknown channel
    """
    raw = os.getenv("EXPIRY_NOTIFICATION_CHANNELS", "")
    names = [name.strip().lower() for name in raw.split(",") if name.strip()]
    if not names:
        return frozenset({NotificationChannel.email})

    channels = set()
    for name in names:
        try:
            channels.add(NotificationChannel(name))
        except ValueError:
            raise ValueError(
                f"Unknown notification channel '{name}' in EXPIRY_NOTIFICATION_CHANNELS"
            ) from None
    return frozenset(channels)


def get_expiry_job_time() -> tuple[int, int]:
    """Get the (hour, minute) of the daily expiry run. Defaults to midnight."""
    hour = int(os.getenv("EXPIRY_JOB_HOUR", "0"))
    minute = int(os.getenv("EXPIRY_JOB_MINUTE", "0"))
    if not 0 <= hour <= 23 or not 0 <= minute <= 59:
        raise ValueError(f"Invalid expiry job time {hour}:{minute:02d}")
    return hour, minute


def get_expiry_timezone() -> str:
    """Timezone used for the daily trigger and for computing 'today'."""
    return os.getenv("EXPIRY_JOB_TIMEZONE", "UTC")


def get_notification_timeout() -> float:
    """Timeout in seconds applied to every outbound email/SMS call."""
    return float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "10"))


def is_expiry_scheduler_disabled() -> bool:
    """Check if the recurring expiry job is disabled (--no-scheduler flag)."""
    return os.getenv("DISABLE_EXPIRY_SCHEDULER", "").lower() in ("true", "1", "yes")


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("JWT_SECRET", "Secret key for admin session tokens", True),
]

# Provider credentials are never fatal at startup: a missing email key fails
# each run that has students to notify, a missing SMS key fails each SMS.
CHANNEL_CREDENTIALS = {
    NotificationChannel.email: ("BREVO_API_KEY", "Brevo API key for expiry reminder emails"),
    NotificationChannel.sms: ("FAST2SMS_API_KEY", "Fast2SMS API key for expiry reminder SMS"),
}


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Only REQUIRED_ENV_VARS can fail startup (in production). Credentials of
    enabled notification channels are reported as warnings.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production():
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    try:
        channels = get_notification_channels()
    except ValueError as e:
        warnings.append(f"  ⚠ {e}")
        channels = frozenset()

    for channel in sorted(channels, key=lambda c: c.value):
        name, description = CHANNEL_CREDENTIALS[channel]
        if not os.environ.get(name):
            warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
