"""Plex active-session detection.

Before Plex itself is updated, the Plex server is asked for its current
playback sessions so that an update does not cut off someone mid-stream.
The sessions endpoint answers with JSON or with legacy XML depending on
server configuration, so replies are parsed by ``parse_sessions_payload``
which tries JSON first and falls back to the ``size="N"`` attribute.

When sessions cannot be verified (no token, server unreachable, unreadable
reply) a ``SessionCheckError`` is raised; callers must treat that as busy.
"""

import re
from typing import Any

import aiohttp
import orjson

from .config import UpdateConfig
from .constants import (
    PLEX_APP_ID,
    PLEX_SESSIONS_PATH,
    PLEX_TOKEN_PARAM,
    PLEX_UNKNOWN_STATE,
    PLEX_UNKNOWN_TITLE,
    PLEX_UNKNOWN_USER,
    RESPONSE_PREVIEW_CHARS,
)
from .exceptions import (
    MissingCredentialError,
    SessionCheckUnavailableError,
    TrueNASError,
)
from .logger import get_logger
from .models import (
    PayloadFormat,
    SessionCheckResult,
    SessionInfo,
    SessionSnapshot,
)
from .truenas_client import NO_TIMEOUT, TrueNASClient

logger = get_logger(__name__)

LEGACY_SIZE_PATTERN = re.compile(r'size="(\d+)"')


def _nested_title(entry: dict[str, Any], key: str, attr: str) -> Any:
    value = entry.get(key)
    if isinstance(value, dict):
        return value.get(attr)
    return None


def _session_from_metadata(entry: Any) -> SessionInfo:
    if not isinstance(entry, dict):
        entry = {}
    user = _nested_title(entry, "User", "title")
    title = entry.get("title") or entry.get("grandparentTitle")
    state = _nested_title(entry, "Player", "state")
    return SessionInfo(
        user=str(user) if user else PLEX_UNKNOWN_USER,
        title=str(title) if title else PLEX_UNKNOWN_TITLE,
        player_state=str(state) if state else PLEX_UNKNOWN_STATE,
    )


def _parse_json_payload(data: Any) -> SessionSnapshot:
    if not isinstance(data, dict):
        raise SessionCheckUnavailableError(
            "Unexpected JSON structure in Plex sessions response"
        )

    container = data.get("MediaContainer")
    if not isinstance(container, dict):
        container = {}

    raw_size = container.get("size")
    try:
        size = int(raw_size) if raw_size is not None else 0
    except (TypeError, ValueError) as e:
        raise SessionCheckUnavailableError(
            f"Invalid session count in Plex response: {raw_size!r}"
        ) from e

    metadata = container.get("Metadata")
    if not isinstance(metadata, list):
        metadata = []

    return SessionSnapshot(
        size=size,
        source=PayloadFormat.JSON,
        sessions=tuple(_session_from_metadata(entry) for entry in metadata),
    )


def _parse_legacy_payload(text: str) -> SessionSnapshot:
    match = LEGACY_SIZE_PATTERN.search(text)
    if match is None:
        raise SessionCheckUnavailableError(
            "Plex sessions response is neither JSON nor a known legacy format"
        )
    return SessionSnapshot(size=int(match.group(1)), source=PayloadFormat.LEGACY)


def parse_sessions_payload(text: str) -> SessionSnapshot:
    """Parse a Plex ``/status/sessions`` reply in either format.

    Args:
        text: Raw response body

    Returns:
        Session snapshot tagged with the format that was recognized

    Raises:
        SessionCheckUnavailableError: If no session count can be extracted

    """
    try:
        data = orjson.loads(text)
    except orjson.JSONDecodeError:
        return _parse_legacy_payload(text)
    return _parse_json_payload(data)


class PlexSessionChecker:
    """Checks a Plex server for active playback sessions."""

    def __init__(
        self,
        config: UpdateConfig,
        session: aiohttp.ClientSession,
        truenas_client: TrueNASClient,
    ) -> None:
        """Initialize the session checker.

        Args:
            config: Run configuration with the Plex settings
            session: aiohttp session for the Plex request
            truenas_client: Management API client used for host auto-detection

        """
        self.config = config
        self.session = session
        self.truenas_client = truenas_client

    async def resolve_host(self) -> str:
        """Resolve the Plex server host.

        An explicit override wins. Otherwise the Plex app is looked up on
        TrueNAS, but its network address is not read from the app config:
        the TrueNAS host is used whether or not the lookup succeeds.

        Returns:
            Host to contact for session information

        """
        if self.config.plex_host:
            return self.config.plex_host

        try:
            apps = await self.truenas_client.list_applications()
            plex_app = next(
                (
                    app
                    for app in apps
                    if app.name == PLEX_APP_ID or PLEX_APP_ID in app.id
                ),
                None,
            )
            if plex_app is not None:
                await self.truenas_client.get_application_status(plex_app.id)
                logger.info(
                    "Auto-detected Plex server at: %s:%s",
                    self.config.host,
                    self.config.plex_port,
                )
        except TrueNASError as e:
            logger.debug("Plex auto-detection failed: %s", e)

        return self.config.host

    async def check_sessions(self) -> SessionCheckResult:
        """Determine whether Plex is currently streaming.

        Returns:
            DISABLED when checking is turned off, otherwise IDLE or ACTIVE

        Raises:
            MissingCredentialError: If no Plex token is configured
            SessionCheckUnavailableError: If sessions cannot be verified

        """
        if not self.config.plex_check_sessions:
            return SessionCheckResult.disabled()

        host = await self.resolve_host()

        if not self.config.plex_token:
            raise MissingCredentialError(
                "No Plex token provided, cannot check active sessions"
            )

        url = f"http://{host}:{self.config.plex_port}{PLEX_SESSIONS_PATH}"
        logger.info("Checking Plex active sessions at %s", url)

        body = await self._fetch_sessions(url, host)
        logger.debug(
            "Plex response (first %d chars): %s",
            RESPONSE_PREVIEW_CHARS,
            body[:RESPONSE_PREVIEW_CHARS],
        )

        snapshot = parse_sessions_payload(body)
        result = SessionCheckResult.from_snapshot(snapshot, host)
        if result.active:
            logger.warning(
                "%d active Plex session(s) detected", snapshot.size
            )
            for info in snapshot.sessions:
                logger.info("Active session: %s", info)
        return result

    async def _fetch_sessions(self, url: str, host: str) -> str:
        target = f"{host}:{self.config.plex_port}"
        try:
            async with self.session.get(
                url,
                params={PLEX_TOKEN_PARAM: self.config.plex_token},
                headers={"Accept": "application/json"},
                timeout=NO_TIMEOUT,
            ) as response:
                body = await response.text()
                status = response.status
        except (aiohttp.ClientError, OSError, TimeoutError) as e:
            raise SessionCheckUnavailableError(
                f"Could not connect to Plex server: {e}", target=target
            ) from e
        except UnicodeDecodeError as e:
            raise SessionCheckUnavailableError(
                f"Unreadable response from Plex server: {e}", target=target
            ) from e

        if status >= 400:
            raise SessionCheckUnavailableError(
                f"Plex server answered HTTP {status}", target=target
            )
        if not body or not body.strip():
            raise SessionCheckUnavailableError(
                "Empty response from Plex server", target=target
            )
        return body
