"""Application records returned by the TrueNAS management API."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class AppState(Enum):
    """Lifecycle state reported for an installed application."""

    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    DEPLOYING = "DEPLOYING"
    UPDATING = "UPDATING"
    FAILED = "FAILED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, raw: Any) -> "AppState":
        """Map a raw API state value onto a known state.

        Args:
            raw: State value from the API (may be missing or unrecognized)

        Returns:
            Matching AppState, or UNKNOWN

        """
        if not isinstance(raw, str):
            return cls.UNKNOWN
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_quiescent(self) -> bool:
        """Whether the app is healthy-running or stopped."""
        return self in (AppState.RUNNING, AppState.STOPPED)

    @property
    def is_failed(self) -> bool:
        """Whether the app ended in a failure state."""
        return self in (AppState.FAILED, AppState.ERROR)


def _first_flag(data: dict[str, Any], *keys: str) -> bool | None:
    """Return the first non-null flag, or None if it is not a real boolean."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value if isinstance(value, bool) else None
    return None


@dataclass(slots=True, frozen=True)
class AppRecord:
    """Snapshot of one installed application.

    Attributes:
        id: Application identifier, never empty
        name: Display name (falls back to ``app_name`` then ``id``)
        state: Parsed lifecycle state
        raw_state: State text as reported by the API
        update_available: Update flag, or None when the API omits it

    """

    id: str
    name: str
    state: AppState
    raw_state: str
    update_available: bool | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "AppRecord":
        """Create AppRecord from management API response data.

        Args:
            data: Raw application object from the API

        Returns:
            AppRecord instance

        Raises:
            ValueError: If the object is not a mapping or has no id

        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected an app object, got {type(data).__name__}")

        app_id = data.get("id")
        if not isinstance(app_id, str) or not app_id:
            raise ValueError("App object has no identifier")

        name = data.get("name") or data.get("app_name") or app_id
        raw_state = data.get("state")

        return cls(
            id=app_id,
            name=str(name),
            state=AppState.parse(raw_state),
            raw_state=str(raw_state) if raw_state is not None else "unknown",
            update_available=_first_flag(
                data, "update_available", "upgrade_available"
            ),
        )

    @property
    def has_update(self) -> bool:
        """Whether an update is known to be available.

        An absent flag counts as no update.
        """
        return self.update_available is True
