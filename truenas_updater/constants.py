"""Centralized constants module for truenas-updater.

This module serves as the single source of truth for shared constants
across the truenas-updater codebase. Constants are organized by logical
categories and use typing.Final annotations to ensure immutability.

Usage:
    from truenas_updater.constants import API_BASE_PATH
"""

from typing import Final

# =============================================================================
# Configuration Constants
# =============================================================================

CONFIG_FILE_NAME: Final[str] = "settings.conf"
CONFIG_DIR_NAME: Final[str] = ".config"
DEFAULT_CONFIG_SUBDIR: Final[str] = "truenas-updater"

DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_BACKUP_COUNT: Final[int] = 3

DEFAULT_TRUENAS_HOST: Final[str] = "localhost"

# Config section and key names
SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_TRUENAS: Final[str] = "truenas"
SECTION_PLEX: Final[str] = "plex"
SECTION_POLL: Final[str] = "poll"
SECTION_DIRECTORY: Final[str] = "directory"

KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"
KEY_HOST: Final[str] = "host"
KEY_PORT: Final[str] = "port"
KEY_CHECK_SESSIONS: Final[str] = "check_sessions"
KEY_MAX_WAIT_SECONDS: Final[str] = "max_wait_seconds"
KEY_INTERVAL_SECONDS: Final[str] = "interval_seconds"
KEY_LOGS: Final[str] = "logs"

# Environment variables consulted for secrets (never stored in settings.conf)
ENV_API_KEY: Final[str] = "TRUENAS_API_KEY"
ENV_API_KEY_FALLBACK: Final[str] = "API_KEY"
ENV_PLEX_TOKEN: Final[str] = "PLEX_TOKEN"

# =============================================================================
# Management API Constants
# =============================================================================

API_BASE_PATH: Final[str] = "api/v2.0"
ENDPOINT_SYSTEM_INFO: Final[str] = "system/info"
ENDPOINT_APPS: Final[str] = "app"
ENDPOINT_APP_BY_ID: Final[str] = "app/id/{app_id}"
ENDPOINT_APP_UPGRADE: Final[str] = "app/id/{app_id}/upgrade"

# Number of characters of a raw response shown in debug logs
RESPONSE_PREVIEW_CHARS: Final[int] = 200

# =============================================================================
# Plex Constants
# =============================================================================

PLEX_APP_ID: Final[str] = "plex"
DEFAULT_PLEX_PORT: Final[int] = 32400
PLEX_SESSIONS_PATH: Final[str] = "/status/sessions"
PLEX_TOKEN_PARAM: Final[str] = "X-Plex-Token"
PLEX_UNKNOWN_USER: Final[str] = "Unknown"
PLEX_UNKNOWN_TITLE: Final[str] = "Unknown"
PLEX_UNKNOWN_STATE: Final[str] = "unknown"

# =============================================================================
# Polling Constants
# =============================================================================

DEFAULT_MAX_WAIT_SECONDS: Final[int] = 600
DEFAULT_POLL_INTERVAL_SECONDS: Final[int] = 10

# =============================================================================
# Logging Constants
# =============================================================================

APP_LOGGER_NAME: Final[str] = "truenas_updater"
LOG_MAX_FILE_SIZE_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = DEFAULT_BACKUP_COUNT
LOG_FILE_NAME: Final[str] = "truenas-updater.log"

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# =============================================================================
# Terminal Output Constants
# =============================================================================

COLOR_RED: Final[str] = "\033[0;31m"
COLOR_GREEN: Final[str] = "\033[0;32m"
COLOR_YELLOW: Final[str] = "\033[1;33m"
COLOR_BLUE: Final[str] = "\033[0;34m"
COLOR_RESET: Final[str] = "\033[0m"

SEPARATOR_WIDTH: Final[int] = 32
