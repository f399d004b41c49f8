"""
Centralized configuration module for application-wide settings.

Values come from environment variables; ``clinica.main.bootstrap`` loads a
``.env`` file first (python-dotenv) so local overrides work the same way as
process environment.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# ===========================
# Database Configuration
# ===========================

DEFAULT_DATABASE_URL = "sqlite:///./clinica.db"


def get_database_url() -> str:
    """Return the store URL (``DATABASE_URL``), defaulting to a local SQLite file."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_sql_echo() -> bool:
    return _env_flag("SQL_ECHO", False)


# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'America/Lima', 'UTC')
            Default: 'UTC'
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


# Global timezone instance - initialized once at import time
APP_TZ = get_app_timezone()


def log_timezone_config():
    """Log the active timezone configuration at startup."""
    logger.info(
        "Timezone configuration initialized",
        extra={"context": {"timezone": str(APP_TZ), "tz_env_var": os.getenv("TZ", "UTC")}},
    )


# ===========================
# Logging Configuration
# ===========================


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_json() -> bool:
    return _env_flag("LOG_JSON", False)


def get_log_to_file() -> bool:
    return _env_flag("LOG_TO_FILE", False)


def get_log_dir() -> Path:
    return Path(os.getenv("LOG_DIR", "logs"))


# ===========================
# Error Tracking Configuration
# ===========================


def get_environment() -> str:
    return os.getenv("APP_ENV", "development")


def get_sentry_dsn() -> Optional[str]:
    """Sentry DSN (``SENTRY_DSN``); error tracking stays off when unset."""
    return os.getenv("SENTRY_DSN") or None


# ===========================
# Seed Configuration
# ===========================

DEFAULT_ADMIN_NAME = "Admin General"
DEFAULT_ADMIN_DNI = "99999999"


def get_default_admin_credentials() -> Tuple[str, str]:
    """
    Email and password of the administrator created on first run.

    Environment Variables:
        ADMIN_EMAIL: default 'admin@clinica.com'
        ADMIN_PASSWORD: default 'adminpass' (change it after first login)
    """
    email = os.getenv("ADMIN_EMAIL", "admin@clinica.com")
    password = os.getenv("ADMIN_PASSWORD", "adminpass")
    return email, password


# ===========================
# Booking Configuration
# ===========================

# (day, month) pairs expanded into dates once per calendar year
HOLIDAYS: List[Tuple[int, int]] = [
    (1, 1),
    (18, 4),
    (1, 5),
    (28, 7),
    (29, 7),
    (8, 10),
    (1, 11),
    (8, 12),
    (25, 12),
]

# ===========================
# Pharmacy / Checkout Configuration
# ===========================

CURRENCY_LABEL = "S/."


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
