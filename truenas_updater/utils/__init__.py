"""Utility helpers for truenas-updater."""

from .update_displays import (
    display_banner,
    display_error,
    display_info,
    display_outcome,
    display_processing,
    display_run_summary,
    display_sessions,
    display_success,
    display_warning,
)

__all__ = [
    "display_banner",
    "display_error",
    "display_info",
    "display_outcome",
    "display_processing",
    "display_run_summary",
    "display_sessions",
    "display_success",
    "display_warning",
]
