"""Update operation models and data structures."""

from dataclasses import dataclass, field
from enum import Enum


class OutcomeStatus(Enum):
    """Classification of one application in a run."""

    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
    UP_TO_DATE = "up_to_date"


class PollResult(Enum):
    """Terminal result of waiting for an upgrade to settle."""

    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(slots=True, frozen=True)
class AppOutcome:
    """Outcome recorded for a single application."""

    app_id: str
    name: str
    status: OutcomeStatus
    reason: str = ""
    dry_run: bool = False


@dataclass(slots=True)
class RunSummary:
    """Result object containing update run outcomes.

    Outcomes are appended in listing order, one per application.
    """

    dry_run: bool = False
    outcomes: list[AppOutcome] = field(default_factory=list)

    def record(self, outcome: AppOutcome) -> None:
        """Append the outcome for one application."""
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def processed(self) -> int:
        """Get total number of apps processed."""
        return len(self.outcomes)

    @property
    def updated(self) -> int:
        return self._count(OutcomeStatus.UPDATED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def up_to_date(self) -> int:
        return self._count(OutcomeStatus.UP_TO_DATE)

    def names_with(self, status: OutcomeStatus) -> list[str]:
        """Return app names with the given classification, in run order."""
        return [
            outcome.name
            for outcome in self.outcomes
            if outcome.status is status
        ]
