"""
Attempt submission for assessments.

POST /assessments/{id}/attempts records a scored attempt and cascades its
consequences in one transaction:
- the attempt row is always written
- a passing attempt completes the employee's Active enrollment in the course
- completing that enrollment mints a certificate
Notifications are dispatched only after the transaction commits.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.core.config import Settings, get_settings
from src.domain.errors import (
    AssessmentNotFoundError,
    EmployeeNotFoundError,
    InvalidInputError,
    NotFoundError,
    SubmissionFailedError,
)
from src.domain.services.certificates import CertificateIssuer
from src.domain.services.notifications import Notifier
from src.domain.services.scoring import decide_outcome
from src.infrastructure.db.models import (
    AssessmentAttempt,
    Certification,
    Employee,
)
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()

PASSED_MESSAGE = "Congratulations! You passed!"
COMPLETED_MESSAGE = "Assessment completed"


@dataclass(slots=True)
class SubmissionResult:
    attempt: AssessmentAttempt
    passed: bool
    message: str
    enrollment_completed: bool = False
    certification: Certification | None = None


@dataclass(slots=True)
class AttemptListItem:
    attempt: AssessmentAttempt
    employee_name: str | None


class SubmissionService:
    """Records assessment attempts and their enrollment/certificate side effects."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
        settings: Settings | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.notifier = notifier
        settings = settings or get_settings()
        self.issuer = CertificateIssuer(
            expiry_years=settings.certificate_expiry_years,
            max_attempts=settings.certificate_number_attempts,
        )

    async def submit_attempt(
        self,
        *,
        assessment_id: str,
        employee_id: str | None,
        score: Any,
    ) -> SubmissionResult:
        """
        Submit one attempt.

        Raises InvalidInputError before touching the database when a required field is
        missing, NotFoundError when the assessment or employee does not exist, and
        SubmissionFailedError when the transaction had to be rolled back.
        """
        employee_id, raw_score = self._validate_input(employee_id, score)

        try:
            async with UnitOfWork(self.session_factory) as uow:
                assessment = await uow.assessments.get(assessment_id)
                if assessment is None:
                    raise AssessmentNotFoundError("Assessment not found")
                if await uow.employees.get(employee_id) is None:
                    raise EmployeeNotFoundError("Employee not found")

                outcome = decide_outcome(raw_score, assessment.passing_score)
                attempt = await uow.attempts.add(
                    assessment_id=assessment.id,
                    employee_id=employee_id,
                    score=raw_score,
                    status=outcome.status,
                    recorded_at=datetime.now(UTC),
                )

                enrollment_completed = False
                certification: Certification | None = None
                if outcome.passed:
                    enrollment = await uow.enrollments.find_active(
                        employee_id=employee_id, course_id=assessment.course_id
                    )
                    if enrollment is not None:
                        await uow.enrollments.mark_completed(enrollment.id)
                        enrollment_completed = True
                        certification = await self.issuer.issue(
                            uow,
                            employee_id=employee_id,
                            course_id=assessment.course_id,
                        )

                assessment_title = assessment.title
                course_title = assessment.course.title if assessment.course else None
        except NotFoundError:
            raise
        except Exception as exc:
            logger.error(
                "attempt_submission_failed",
                assessment_id=assessment_id,
                employee_id=employee_id,
                exc_info=True,
            )
            raise SubmissionFailedError("Failed to submit attempt") from exc

        await logger.ainfo(
            "attempt_submitted",
            assessment_id=assessment_id,
            attempt_id=attempt.id,
            employee_id=employee_id,
            score=raw_score,
            status=attempt.status.value,
            enrollment_completed=enrollment_completed,
            certificate_number=certification.certificate_number if certification else None,
        )

        self._dispatch_notifications(
            employee_id=employee_id,
            assessment_title=assessment_title,
            score=raw_score,
            passed=outcome.passed,
            course_title=course_title,
            certification=certification,
        )

        return SubmissionResult(
            attempt=attempt,
            passed=outcome.passed,
            message=PASSED_MESSAGE if outcome.passed else COMPLETED_MESSAGE,
            enrollment_completed=enrollment_completed,
            certification=certification,
        )

    @staticmethod
    def _validate_input(employee_id: str | None, score: Any) -> tuple[str, float]:
        if not employee_id or score is None:
            raise InvalidInputError("Employee ID and score are required")
        if isinstance(score, bool):
            raise InvalidInputError("Score must be a number")
        try:
            raw_score = float(score)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("Score must be a number") from exc
        if not math.isfinite(raw_score):
            raise InvalidInputError("Score must be a number")
        return employee_id, raw_score

    def _dispatch_notifications(
        self,
        *,
        employee_id: str,
        assessment_title: str,
        score: float,
        passed: bool,
        course_title: str | None,
        certification: Certification | None,
    ) -> None:
        self.notifier.dispatch(
            self.notifier.notify_assessment_result(employee_id, assessment_title, score, passed)
        )
        if certification is not None and course_title:
            self.notifier.dispatch(
                self.notifier.notify_certification(
                    employee_id, course_title, certification.certificate_number
                )
            )


async def list_attempts(session: AsyncSession, assessment_id: str) -> list[AttemptListItem]:
    """Return attempts for an assessment, most recent first."""
    stmt = (
        select(AssessmentAttempt, Employee.name)
        .join(Employee, AssessmentAttempt.employee_id == Employee.id, isouter=True)
        .where(AssessmentAttempt.assessment_id == assessment_id)
        .order_by(AssessmentAttempt.attempted_at.desc())
    )
    rows = (await session.execute(stmt)).all()
    return [AttemptListItem(attempt=attempt, employee_name=name) for attempt, name in rows]
