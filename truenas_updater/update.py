"""Update orchestration for TrueNAS Scale applications.

This module walks the installed applications in listing order and decides,
one app at a time, whether to skip it, trigger its upgrade, or report it as
up to date. Plex is special-cased: its upgrade is held back while playback
is active or cannot be verified, unless the run is forced.
"""

import aiohttp

from .config import UpdateConfig
from .constants import PLEX_APP_ID
from .exceptions import SessionCheckError, UpgradeRejectedError
from .logger import get_logger
from .models import (
    AppOutcome,
    AppRecord,
    OutcomeStatus,
    PollResult,
    RunSummary,
)
from .plex_sessions import PlexSessionChecker
from .poller import CompletionPoller
from .truenas_client import TrueNASClient
from .utils import (
    display_info,
    display_outcome,
    display_processing,
    display_sessions,
    display_success,
    display_warning,
)

logger = get_logger(__name__)


class UpdateOrchestrator:
    """Applies update policy to every installed application."""

    def __init__(
        self,
        config: UpdateConfig,
        client: TrueNASClient,
        session_checker: PlexSessionChecker,
        poller: CompletionPoller,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Run configuration
            client: Management API client
            session_checker: Plex session checker
            poller: Completion poller used when waiting is enabled

        """
        self.config = config
        self.client = client
        self.session_checker = session_checker
        self.poller = poller

    async def run(self) -> RunSummary:
        """List installed applications and process each in order.

        Returns:
            Summary with one outcome per listed application

        Raises:
            FetchFailedError: If the application listing cannot be fetched

        """
        display_info("Fetching installed applications...")
        apps = await self.client.list_applications()
        summary = RunSummary(dry_run=self.config.dry_run)

        if not apps:
            display_warning("No applications found")
            return summary

        display_success(f"Found {len(apps)} applications")
        print()

        for app in apps:
            display_processing(app)
            outcome = await self.process_app(app)
            logger.info(
                "%s (%s): %s %s",
                app.name,
                app.id,
                outcome.status.value,
                outcome.reason,
            )
            display_outcome(outcome)
            summary.record(outcome)

        return summary

    async def process_app(self, app: AppRecord) -> AppOutcome:
        """Classify and, where eligible, upgrade one application.

        Args:
            app: Application record from the listing

        Returns:
            Outcome for this application

        """
        if self.config.dry_run:
            return self._outcome(app, OutcomeStatus.UPDATED, dry_run=True)

        if app.id == PLEX_APP_ID:
            reason = await self._plex_block_reason()
            if reason:
                if not self.config.force:
                    return self._outcome(app, OutcomeStatus.SKIPPED, reason)
                display_warning("Force update enabled - updating Plex anyway")

        if not app.state.is_quiescent and not self.config.force:
            return self._outcome(
                app,
                OutcomeStatus.SKIPPED,
                "not in RUNNING or STOPPED state "
                f"(Current: {app.raw_state}); use --force to update anyway",
            )

        if not (self.config.force or app.has_update):
            return self._outcome(app, OutcomeStatus.UP_TO_DATE)

        return await self._upgrade(app)

    async def _plex_block_reason(self) -> str:
        """Return why Plex must not be updated now, or an empty string."""
        display_info("Detected Plex app - checking for active sessions...")
        try:
            result = await self.session_checker.check_sessions()
        except SessionCheckError as e:
            logger.warning("Plex session check unavailable: %s", e)
            display_warning(f"Warning: {e}")
            return f"cannot verify Plex sessions ({e.message})"

        if result.active:
            display_sessions(result)
            return (
                f"{result.session_count} active Plex session(s); "
                "use --force to update anyway, or wait for sessions to end"
            )

        if result.snapshot is not None:
            display_success("No active Plex sessions - safe to update")
        return ""

    async def _upgrade(self, app: AppRecord) -> AppOutcome:
        display_info(f"Updating {app.name} (ID: {app.id})...")
        try:
            await self.client.trigger_upgrade(app.id)
        except UpgradeRejectedError as e:
            return self._outcome(app, OutcomeStatus.FAILED, e.message)

        if not self.config.wait:
            return self._outcome(app, OutcomeStatus.UPDATED)

        display_success(f"Update initiated for {app.name}")
        display_info(f"Waiting for {app.name} update to complete...")
        result = await self.poller.wait_for_ready(app.id, app.name)
        if result is PollResult.COMPLETED:
            return self._outcome(
                app, OutcomeStatus.UPDATED, f"{app.name} update completed"
            )
        if result is PollResult.FAILED:
            return self._outcome(
                app, OutcomeStatus.FAILED, "app entered a failed state"
            )
        return self._outcome(
            app, OutcomeStatus.FAILED, "timed out waiting for completion"
        )

    @staticmethod
    def _outcome(
        app: AppRecord,
        status: OutcomeStatus,
        reason: str = "",
        dry_run: bool = False,
    ) -> AppOutcome:
        return AppOutcome(
            app_id=app.id,
            name=app.name,
            status=status,
            reason=reason,
            dry_run=dry_run,
        )


async def execute_update_run(
    config: UpdateConfig, session: aiohttp.ClientSession
) -> RunSummary:
    """Run preflight, then update every installed application.

    Args:
        config: Run configuration
        session: aiohttp session shared by all API clients

    Returns:
        Run summary

    Raises:
        UnreachableError: If TrueNAS cannot be reached
        AuthenticationFailedError: If the API key is rejected
        FetchFailedError: If the application listing is unusable

    """
    client = TrueNASClient(config.host, config.api_key, session)

    display_info("Testing connection to TrueNAS Scale...")
    version = await client.preflight()
    display_success(f"Connected to TrueNAS Scale version: {version}")

    orchestrator = UpdateOrchestrator(
        config,
        client,
        PlexSessionChecker(config, session, client),
        CompletionPoller(
            client,
            max_wait_seconds=config.max_wait_seconds,
            poll_interval_seconds=config.poll_interval_seconds,
        ),
    )
    return await orchestrator.run()
