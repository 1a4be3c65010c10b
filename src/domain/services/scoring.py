"""Pass/fail decision for a single assessment attempt."""

from __future__ import annotations

from dataclasses import dataclass

from src.infrastructure.db.models import AttemptStatus


@dataclass(frozen=True, slots=True)
class ScoringOutcome:
    status: AttemptStatus

    @property
    def passed(self) -> bool:
        return self.status is AttemptStatus.PASSED


def decide_outcome(raw_score: float, passing_score: float) -> ScoringOutcome:
    """Return ``Passed`` when ``raw_score`` meets or exceeds ``passing_score``.

    Both values are percentages. Nothing is rounded, clamped or range-checked here;
    validating the inputs is the caller's job.
    """
    if float(raw_score) >= float(passing_score):
        return ScoringOutcome(status=AttemptStatus.PASSED)
    return ScoringOutcome(status=AttemptStatus.FAILED)
