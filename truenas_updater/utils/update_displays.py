"""Display utility functions for update runs.

This module provides functions for printing per-app status lines and the
final run summary in a consistent, colored format.
"""

from truenas_updater.constants import (
    COLOR_BLUE,
    COLOR_GREEN,
    COLOR_RED,
    COLOR_RESET,
    COLOR_YELLOW,
    SEPARATOR_WIDTH,
)
from truenas_updater.models import (
    AppOutcome,
    AppRecord,
    OutcomeStatus,
    RunSummary,
    SessionCheckResult,
)

_OUTCOME_COLORS = {
    OutcomeStatus.UPDATED: COLOR_GREEN,
    OutcomeStatus.UP_TO_DATE: COLOR_GREEN,
    OutcomeStatus.SKIPPED: COLOR_YELLOW,
    OutcomeStatus.FAILED: COLOR_RED,
}


def colorize(message: str, color: str) -> str:
    """Wrap a message in an ANSI color sequence."""
    return f"{color}{message}{COLOR_RESET}"


def display_info(message: str) -> None:
    print(colorize(message, COLOR_BLUE))


def display_success(message: str) -> None:
    print(colorize(message, COLOR_GREEN))


def display_warning(message: str) -> None:
    print(colorize(message, COLOR_YELLOW))


def display_error(message: str) -> None:
    print(colorize(message, COLOR_RED))


def display_banner() -> None:
    display_info("TrueNAS Scale App Update Script")
    print("=" * SEPARATOR_WIDTH)


def display_processing(app: AppRecord) -> None:
    """Print the line announcing which app is being processed."""
    display_info(f"Processing: {app.name} (ID: {app.id}, State: {app.raw_state})")


def display_sessions(result: SessionCheckResult) -> None:
    """Print details of active Plex sessions.

    Args:
        result: Session check result with at least one active session

    """
    display_error(
        f"Warning: {result.session_count} active Plex session(s) detected!"
    )
    if result.sessions:
        print("Active sessions:")
        for info in result.sessions:
            print(f"  - {info}")


def display_outcome(outcome: AppOutcome) -> None:
    """Print the classification line for one app.

    Args:
        outcome: Outcome to report

    """
    color = _OUTCOME_COLORS[outcome.status]
    if outcome.dry_run:
        message = f"[DRY RUN] Would update: {outcome.name} (ID: {outcome.app_id})"
    elif outcome.status is OutcomeStatus.UPDATED:
        message = outcome.reason or f"Update initiated for {outcome.name}"
    elif outcome.status is OutcomeStatus.UP_TO_DATE:
        message = f"{outcome.name} is already up to date"
    elif outcome.status is OutcomeStatus.SKIPPED:
        message = f"Skipping {outcome.name}: {outcome.reason}"
    else:
        message = f"Update failed for {outcome.name}: {outcome.reason}"
    print(colorize(message, color))
    print()


def display_run_summary(summary: RunSummary) -> None:
    """Display the final summary of an update run.

    Args:
        summary: Completed run summary

    """
    print("=" * SEPARATOR_WIDTH)
    display_info("Update Summary:")
    print(f"Apps processed: {summary.processed}")
    print(f"Updates initiated: {colorize(str(summary.updated), COLOR_GREEN)}")
    print(f"Failed updates: {colorize(str(summary.failed), COLOR_RED)}")
    print(f"Skipped: {colorize(str(summary.skipped), COLOR_YELLOW)}")
    print(f"Already up to date: {summary.up_to_date}")

    failed = summary.names_with(OutcomeStatus.FAILED)
    if failed:
        print(f"Failed apps: {', '.join(failed)}")

    if summary.dry_run:
        display_warning(
            "This was a dry run - no actual updates were performed"
        )
