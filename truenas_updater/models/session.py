"""Plex playback session models."""

from dataclasses import dataclass
from enum import Enum


class PayloadFormat(Enum):
    """Which parser produced a session snapshot."""

    JSON = "json"
    LEGACY = "legacy"


class SessionCheckStatus(Enum):
    """Outcome of a Plex session check."""

    IDLE = "idle"
    ACTIVE = "active"
    DISABLED = "disabled"


@dataclass(slots=True, frozen=True)
class SessionInfo:
    """One active playback session."""

    user: str
    title: str
    player_state: str

    def __str__(self) -> str:
        return (
            f"User: {self.user} | Title: {self.title} | "
            f"State: {self.player_state}"
        )


@dataclass(slots=True, frozen=True)
class SessionSnapshot:
    """Parsed reply of the Plex sessions endpoint.

    ``size`` is the session count reported by the server. ``sessions`` holds
    whatever per-session detail the payload carried, which the legacy text
    format never does.
    """

    size: int
    source: PayloadFormat
    sessions: tuple[SessionInfo, ...] = ()

    @property
    def active(self) -> bool:
        return self.size > 0


@dataclass(slots=True, frozen=True)
class SessionCheckResult:
    """Result of checking Plex for active playback."""

    status: SessionCheckStatus
    snapshot: SessionSnapshot | None = None
    host: str | None = None

    @classmethod
    def disabled(cls) -> "SessionCheckResult":
        """Result used when session checking is turned off."""
        return cls(status=SessionCheckStatus.DISABLED)

    @classmethod
    def from_snapshot(
        cls, snapshot: SessionSnapshot, host: str
    ) -> "SessionCheckResult":
        status = (
            SessionCheckStatus.ACTIVE
            if snapshot.active
            else SessionCheckStatus.IDLE
        )
        return cls(
            status=status,
            snapshot=snapshot,
            host=host,
        )

    @property
    def active(self) -> bool:
        """Whether playback was measured as active."""
        return self.status is SessionCheckStatus.ACTIVE

    @property
    def sessions(self) -> tuple[SessionInfo, ...]:
        return self.snapshot.sessions if self.snapshot else ()

    @property
    def session_count(self) -> int:
        return self.snapshot.size if self.snapshot else 0
