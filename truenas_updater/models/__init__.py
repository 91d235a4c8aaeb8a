"""Shared models and data structures for truenas-updater operations."""

from .app import AppRecord, AppState
from .session import (
    PayloadFormat,
    SessionCheckResult,
    SessionCheckStatus,
    SessionInfo,
    SessionSnapshot,
)
from .update import AppOutcome, OutcomeStatus, PollResult, RunSummary

__all__ = [
    "AppOutcome",
    "AppRecord",
    "AppState",
    "OutcomeStatus",
    "PayloadFormat",
    "PollResult",
    "RunSummary",
    "SessionCheckResult",
    "SessionCheckStatus",
    "SessionInfo",
    "SessionSnapshot",
]
