"""Exception classes for truenas-updater operations.

Management API failures derive from ``TrueNASError``; failures of the Plex
session check derive from ``SessionCheckError``. Both share ``UpdaterError``
so the CLI can report any of them uniformly.
"""


class UpdaterError(Exception):
    """Base exception for all truenas-updater errors."""

    def __init__(self, message: str, target: str | None = None) -> None:
        """Initialize updater error.

        Args:
            message: Error message describing the failure.
            target: Optional app id or host the failure relates to.

        """
        super().__init__(message)
        self.message = message
        self.target = target

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Formatted error message with target if available.

        """
        if self.target:
            return f"{self.message} ({self.target})"
        return self.message


class TrueNASError(UpdaterError):
    """Raised when a management API call fails."""


class ConnectivityError(TrueNASError):
    """Raised when the HTTP round-trip itself fails."""


class EmptyResponseError(TrueNASError):
    """Raised when the management API answers with an empty body."""


class UnreachableError(TrueNASError):
    """Raised when the preflight cannot reach the management API."""


class AuthenticationFailedError(TrueNASError):
    """Raised when the preflight response does not carry a version."""


class FetchFailedError(TrueNASError):
    """Raised when an app listing or status call fails or is unparseable."""


class UpgradeRejectedError(TrueNASError):
    """Raised when an upgrade trigger is refused by the management API."""


class SessionCheckError(UpdaterError):
    """Raised when active Plex sessions cannot be verified."""


class MissingCredentialError(SessionCheckError):
    """Raised when no Plex token is configured for a required check."""


class SessionCheckUnavailableError(SessionCheckError):
    """Raised when the Plex server is unreachable or its reply unreadable."""
