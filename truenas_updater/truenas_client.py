"""TrueNAS Scale management API client.

This module wraps the ``/api/v2.0`` REST interface used to list installed
applications, read their status and trigger upgrades. Requests are bearer
token authenticated, sent one at a time and never retried here; failures
are raised to the caller as ``TrueNASError`` subclasses.
"""

from typing import Any

import aiohttp
import orjson

from .constants import (
    API_BASE_PATH,
    ENDPOINT_APP_BY_ID,
    ENDPOINT_APP_UPGRADE,
    ENDPOINT_APPS,
    ENDPOINT_SYSTEM_INFO,
    RESPONSE_PREVIEW_CHARS,
)
from .exceptions import (
    AuthenticationFailedError,
    ConnectivityError,
    EmptyResponseError,
    FetchFailedError,
    UnreachableError,
    UpgradeRejectedError,
)
from .logger import get_logger
from .models import AppRecord

logger = get_logger(__name__)

# Individual calls are not bounded; only completion polling has a ceiling
NO_TIMEOUT = aiohttp.ClientTimeout(total=None)


def _decode_json(body: str) -> Any:
    """Decode a response body, returning None when it is not JSON."""
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError:
        return None


class TrueNASClient:
    """Authenticated client for the TrueNAS Scale management API."""

    def __init__(
        self, host: str, api_key: str, session: aiohttp.ClientSession
    ) -> None:
        """Initialize the API client.

        Args:
            host: TrueNAS host or IP, optionally with a port
            api_key: API key sent as a bearer token
            session: aiohttp session for making requests

        """
        self.host = host
        self.api_key = api_key
        self.session = session

    @property
    def base_url(self) -> str:
        return f"http://{self.host}/{API_BASE_PATH}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    async def request(
        self, method: str, endpoint: str, payload: Any | None = None
    ) -> str:
        """Issue one API call and return the raw response body.

        The body is returned whatever the HTTP status; callers decide what a
        reply means.

        Args:
            method: HTTP method
            endpoint: Path relative to ``/api/v2.0/``
            payload: Optional JSON-serializable request body

        Returns:
            Response body text

        Raises:
            ConnectivityError: If the network call fails or the body
                cannot be decoded
            EmptyResponseError: If the response body is empty

        """
        url = f"{self.base_url}/{endpoint}"
        data = orjson.dumps(payload) if payload is not None else None

        logger.debug("%s %s", method, url)
        try:
            async with self.session.request(
                method, url, headers=self._headers(), data=data, timeout=NO_TIMEOUT
            ) as response:
                body = await response.text()
                logger.debug("%s %s -> HTTP %s", method, url, response.status)
        except (aiohttp.ClientError, OSError, TimeoutError) as e:
            raise ConnectivityError(
                f"Request to {url} failed: {e}", target=self.host
            ) from e
        except UnicodeDecodeError as e:
            raise ConnectivityError(
                f"Undecodable response from {url}: {e}", target=self.host
            ) from e

        if not body or not body.strip():
            raise EmptyResponseError(
                f"Empty response from {endpoint}", target=self.host
            )
        return body

    async def preflight(self) -> str:
        """Verify connectivity and credentials against ``system/info``.

        Returns:
            TrueNAS version string

        Raises:
            UnreachableError: If the host cannot be reached or answers empty
            AuthenticationFailedError: If the reply carries no version

        """
        try:
            body = await self.request("GET", ENDPOINT_SYSTEM_INFO)
        except (ConnectivityError, EmptyResponseError) as e:
            raise UnreachableError(
                f"Cannot connect to TrueNAS Scale at {self.host}",
                target=self.host,
            ) from e

        info = _decode_json(body)
        version = info.get("version") if isinstance(info, dict) else None
        if version is None:
            logger.debug(
                "system/info reply without version: %s",
                body[:RESPONSE_PREVIEW_CHARS],
            )
            raise AuthenticationFailedError(
                "Authentication failed, check the API key", target=self.host
            )
        return str(version)

    async def list_applications(self) -> list[AppRecord]:
        """Fetch all installed applications.

        Returns:
            Application records in the order the API returned them

        Raises:
            FetchFailedError: If the call fails or the listing is unparseable

        """
        try:
            body = await self.request("GET", ENDPOINT_APPS)
        except (ConnectivityError, EmptyResponseError) as e:
            raise FetchFailedError(
                f"Failed to fetch applications: {e.message}", target=self.host
            ) from e

        logger.debug(
            "App listing (first %d chars): %s",
            RESPONSE_PREVIEW_CHARS,
            body[:RESPONSE_PREVIEW_CHARS],
        )

        data = _decode_json(body)
        if not isinstance(data, list):
            raise FetchFailedError(
                "Could not parse app list from API response; this might "
                "indicate an API endpoint change or authentication issue",
                target=self.host,
            )

        try:
            return [AppRecord.from_api_response(item) for item in data]
        except ValueError as e:
            raise FetchFailedError(
                f"Unparseable app entry in listing: {e}", target=self.host
            ) from e

    async def get_application_status(self, app_id: str) -> AppRecord:
        """Fetch the current record of one application.

        Args:
            app_id: Application identifier

        Returns:
            Fresh application record

        Raises:
            FetchFailedError: If the call fails or the app no longer exists

        """
        endpoint = ENDPOINT_APP_BY_ID.format(app_id=app_id)
        try:
            body = await self.request("GET", endpoint)
        except (ConnectivityError, EmptyResponseError) as e:
            raise FetchFailedError(
                f"Failed to fetch status: {e.message}", target=app_id
            ) from e

        try:
            return AppRecord.from_api_response(_decode_json(body))
        except ValueError as e:
            raise FetchFailedError(
                f"Unparseable status response: {e}", target=app_id
            ) from e

    async def trigger_upgrade(self, app_id: str) -> None:
        """Ask TrueNAS to upgrade one application.

        Acceptance only means the job was queued, not that it finished.

        Args:
            app_id: Application identifier

        Raises:
            UpgradeRejectedError: If the call fails or the API returns an error

        """
        endpoint = ENDPOINT_APP_UPGRADE.format(app_id=app_id)
        try:
            body = await self.request("POST", endpoint, payload={})
        except EmptyResponseError:
            return
        except ConnectivityError as e:
            raise UpgradeRejectedError(
                f"Failed to trigger update: {e.message}", target=app_id
            ) from e

        data = _decode_json(body)
        if isinstance(data, dict) and data.get("error") is not None:
            raise UpgradeRejectedError(str(data["error"]), target=app_id)
