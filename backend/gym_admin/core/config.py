"""
Centralized configuration module for application-wide settings.

Every value is read from the environment (a ``.env`` file is loaded by
``gym_admin.main`` when present) and resolved once at import time.
"""

import logging
import os
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# ===========================
# Database Configuration
# ===========================

DEFAULT_DATABASE_URL = "sqlite:///./gym_admin.db"


def get_database_url() -> str:
    """Return the SQLAlchemy URL from DATABASE_URL (local SQLite by default)."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """Timezone used to decide what "today" is at the front desk (TZ, default UTC)."""
    tz_name = os.getenv("TZ", "UTC")
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            "Unknown timezone in TZ, using UTC",
            extra={"context": {"setting": "TZ", "raw": tz_name}},
        )
        return ZoneInfo("UTC")


APP_TZ = get_app_timezone()


def today() -> date:
    """Current calendar date in the application timezone."""
    return datetime.now(APP_TZ).date()


# ===========================
# Membership Configuration
# ===========================


def _get_int_setting(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = int(raw)
    except ValueError:
        logger.warning(
            f"Invalid integer '{raw}' for {name}. Falling back to {default}.",
            extra={"context": {"setting": name, "raw": raw}},
        )
        return default

    if value < minimum:
        logger.warning(
            f"{name}={value} is below the minimum of {minimum}. "
            f"Falling back to {default}.",
            extra={"context": {"setting": name, "raw": raw}},
        )
        return default

    return value


def get_expiring_threshold_days() -> int:
    """
    Number of days before a membership end date during which the member is
    shown as Expiring (inclusive).

    Environment Variables:
        EXPIRING_THRESHOLD_DAYS: Default 7
    """
    return _get_int_setting("EXPIRING_THRESHOLD_DAYS", 7)


def get_payment_grace_days() -> int:
    """
    Days after the start of a billing period before an unpaid membership is
    reported as Overdue.

    Environment Variables:
        PAYMENT_GRACE_DAYS: Default 7
    """
    return _get_int_setting("PAYMENT_GRACE_DAYS", 7)


EXPIRING_THRESHOLD_DAYS = get_expiring_threshold_days()
PAYMENT_GRACE_DAYS = get_payment_grace_days()


# ===========================
# Logging Configuration
# ===========================


def _get_bool_setting(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = _get_bool_setting("LOG_JSON", "false")
LOG_TO_FILE = _get_bool_setting("LOG_TO_FILE", "true")


def log_membership_config():
    """
    Log the active membership configuration.

    Should be called during application startup to provide visibility
    into the status windows in use.
    """
    logger.info(
        "Membership configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "expiring_threshold_days": EXPIRING_THRESHOLD_DAYS,
                "payment_grace_days": PAYMENT_GRACE_DAYS,
            }
        },
    )
