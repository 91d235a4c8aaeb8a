"""Logging utilities for truenas-updater.

This module provides structured logging with a colored console handler and
an optional rotating log file. Loggers are shared per name so every module
that calls ``get_logger`` writes through the same handlers.
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Any

from truenas_updater.constants import (
    APP_LOGGER_NAME,
    DEFAULT_CONSOLE_LOG_LEVEL,
    LOG_BACKUP_COUNT,
    LOG_COLORS,
    LOG_CONSOLE_DATE_FORMAT,
    LOG_CONSOLE_FORMAT,
    LOG_FILE_DATE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_MAX_FILE_SIZE_BYTES,
)

# Global registry to prevent duplicate loggers across the application
_logger_instances: dict[str, "UpdaterLogger"] = {}

_logger_lock = threading.Lock()


class LoggingError(Exception):
    """Base exception for logging errors."""


class ConfigurationError(LoggingError):
    """Error in logging configuration."""


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors.

        Args:
            record: The log record to format

        Returns:
            Formatted log message with color codes

        """
        if record.levelname in LOG_COLORS:
            color = LOG_COLORS[record.levelname]
            reset = LOG_COLORS["RESET"]
            colored_level = f"{color}{record.levelname}{reset}"

            original_levelname = record.levelname
            record.levelname = colored_level
            try:
                return super().format(record)
            finally:
                record.levelname = original_levelname

        return super().format(record)


class UpdaterLogger:
    """Logger manager for truenas-updater."""

    def __init__(self, name: str = APP_LOGGER_NAME) -> None:
        """Initialize logger with given name.

        Args:
            name: Logger name

        """
        self._name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self._file_logging_setup = False
        self._console_handler: logging.StreamHandler | None = None
        self._previous_console_level: int | None = None
        self._file_handler: logging.handlers.RotatingFileHandler | None = None

        # Module loggers propagate to the application logger's handlers
        if name.startswith(f"{APP_LOGGER_NAME}."):
            return

        if not self.logger.handlers:
            self._setup_console_handler()

    def _setup_console_handler(self) -> None:
        """Set up console handler with colors."""
        self._console_handler = logging.StreamHandler(sys.stdout)
        console_formatter = ColoredFormatter(
            LOG_CONSOLE_FORMAT,
            datefmt=LOG_CONSOLE_DATE_FORMAT,
        )
        self._console_handler.setFormatter(console_formatter)
        self._console_handler.setLevel(logging.WARNING)
        self.logger.addHandler(self._console_handler)

    def setup_file_logging(self, log_file: Path, level: str = "DEBUG") -> None:
        """Set up file logging with rotation.

        Args:
            log_file: Path to log file
            level: Logging level for file output

        Raises:
            ConfigurationError: If file logging setup fails

        """
        with _logger_lock:
            if self._file_logging_setup and self._file_handler:
                return

            try:
                self._remove_existing_file_handlers()
                log_file.parent.mkdir(parents=True, exist_ok=True)

                self._file_handler = logging.handlers.RotatingFileHandler(
                    log_file,
                    maxBytes=LOG_MAX_FILE_SIZE_BYTES,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                    delay=False,
                )
                formatter = logging.Formatter(
                    LOG_FILE_FORMAT, datefmt=LOG_FILE_DATE_FORMAT
                )
                self._file_handler.setFormatter(formatter)

                numeric_level = getattr(logging, level.upper(), logging.INFO)
                self._file_handler.setLevel(numeric_level)

                self.logger.addHandler(self._file_handler)
                self._file_logging_setup = True
            except OSError as e:
                raise ConfigurationError(
                    f"Failed to setup file logging: {e}"
                ) from e

    def _remove_existing_file_handlers(self) -> None:
        """Remove any existing file handlers to avoid duplicates."""
        handlers_to_remove = [
            handler
            for handler in self.logger.handlers
            if isinstance(handler, logging.handlers.RotatingFileHandler)
        ]

        for handler in handlers_to_remove:
            self.logger.removeHandler(handler)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""
        if self.logger.isEnabledFor(logging.WARNING):
            self.logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log error message."""
        if self.logger.isEnabledFor(logging.ERROR):
            self.logger.error(message, *args, **kwargs)

    def set_console_level(self, level: str) -> None:
        """Set console logging level.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

        """
        if self._console_handler:
            numeric_level = getattr(logging, level.upper(), logging.WARNING)
            self._console_handler.setLevel(numeric_level)

    def set_console_level_temporarily(self, level: str) -> None:
        """Temporarily adjust console logging level.

        Stores the current console level so it can be restored later.

        Args:
            level: Temporary logging level name.

        """
        if not self._console_handler:
            return

        if self._previous_console_level is None:
            self._previous_console_level = self._console_handler.level

        self.set_console_level(level)

    def restore_console_level(self) -> None:
        """Restore the console logging level after a temporary change."""
        if not self._console_handler:
            return

        if self._previous_console_level is not None:
            self._console_handler.setLevel(self._previous_console_level)

        self._previous_console_level = None


def get_logger(name: str = APP_LOGGER_NAME) -> UpdaterLogger:
    """Get logger instance with singleton pattern.

    Args:
        name: Logger name

    Returns:
        Logger instance

    """
    if name in _logger_instances:
        return _logger_instances[name]

    logger_instance = UpdaterLogger(name)
    logger_instance.set_console_level(DEFAULT_CONSOLE_LOG_LEVEL)

    _logger_instances[name] = logger_instance
    return logger_instance


# Root application logger; file logging is enabled by the CLI runner
logger = get_logger()
