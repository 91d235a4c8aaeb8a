"""Completion polling for triggered upgrades."""

import asyncio

from .constants import DEFAULT_MAX_WAIT_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS
from .exceptions import FetchFailedError
from .logger import get_logger
from .models import PollResult
from .truenas_client import TrueNASClient

logger = get_logger(__name__)


class CompletionPoller:
    """Polls an application's state until its upgrade settles."""

    def __init__(
        self,
        client: TrueNASClient,
        max_wait_seconds: int = DEFAULT_MAX_WAIT_SECONDS,
        poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Initialize the poller.

        Args:
            client: Management API client
            max_wait_seconds: Total time budget for polling
            poll_interval_seconds: Sleep between status fetches

        Raises:
            ValueError: If the poll interval is not positive

        """
        if poll_interval_seconds <= 0:
            raise ValueError("Poll interval must be a positive number of seconds")
        self.client = client
        self.max_wait_seconds = max_wait_seconds
        self.poll_interval_seconds = poll_interval_seconds

    async def wait_for_ready(self, app_id: str, name: str) -> PollResult:
        """Wait for an application to leave its deploying/updating states.

        Elapsed time advances by one interval per poll, so a budget of
        ``max_wait_seconds`` allows ``ceil(max_wait / interval)`` polls.
        A failed status fetch is inconclusive and polling continues.

        Args:
            app_id: Application identifier
            name: Display name used in log messages

        Returns:
            COMPLETED, FAILED, or TIMED_OUT

        """
        elapsed = 0
        while elapsed < self.max_wait_seconds:
            try:
                record = await self.client.get_application_status(app_id)
            except FetchFailedError as e:
                logger.debug("Status poll for %s inconclusive: %s", name, e)
            else:
                if record.state.is_quiescent:
                    logger.info(
                        "%s update completed (State: %s)", name, record.raw_state
                    )
                    return PollResult.COMPLETED
                if record.state.is_failed:
                    logger.error(
                        "%s update failed (State: %s)", name, record.raw_state
                    )
                    return PollResult.FAILED
                logger.info(
                    "%s still updating... (State: %s)", name, record.raw_state
                )

            await asyncio.sleep(self.poll_interval_seconds)
            elapsed += self.poll_interval_seconds

        logger.error("Timeout waiting for %s to complete update", name)
        return PollResult.TIMED_OUT
