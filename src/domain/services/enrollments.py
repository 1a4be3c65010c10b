"""Enrollment creation and status updates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.errors import (
    CourseNotFoundError,
    DuplicateEnrollmentError,
    EmployeeNotFoundError,
    EnrollmentNotFoundError,
    InvalidInputError,
)
from src.domain.services.notifications import Notifier
from src.infrastructure.db.models import Enrollment, EnrollmentStatus
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()

DUPLICATE_MESSAGE = "Employee already enrolled in this course"


@dataclass(slots=True)
class EnrollmentRequest:
    employee_id: str | None
    course_id: str | None
    enrollment_type: str = "Manual"
    program_name: str | None = None
    comments: str | None = None


class EnrollmentService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
    ) -> None:
        self.session_factory = session_factory
        self.notifier = notifier

    async def create(self, request: EnrollmentRequest, *, enrolled_by: str) -> Enrollment:
        """
        Create a Pending enrollment.

        The open-enrollment pre-check gives a friendly error for the common case; the
        partial unique index catches concurrent inserts that slip past it.
        """
        if not request.employee_id or not request.course_id:
            raise InvalidInputError("Employee ID and Course ID are required")

        try:
            async with UnitOfWork(self.session_factory) as uow:
                employee = await uow.employees.get(request.employee_id)
                if employee is None:
                    raise EmployeeNotFoundError("Employee not found")
                course = await uow.courses.get(request.course_id)
                if course is None:
                    raise CourseNotFoundError("Course not found")

                existing = await uow.enrollments.find_open(
                    employee_id=request.employee_id, course_id=request.course_id
                )
                if existing is not None:
                    raise DuplicateEnrollmentError(DUPLICATE_MESSAGE)

                enrollment = Enrollment(
                    employee_id=request.employee_id,
                    course_id=request.course_id,
                    status=EnrollmentStatus.PENDING,
                    completion_percentage=0.0,
                    enrollment_date=date.today(),
                    enrollment_type=request.enrollment_type,
                    enrolled_by=enrolled_by,
                    program_name=request.program_name,
                    comments=request.comments,
                )
                uow.session.add(enrollment)
                await uow.session.flush()
                course_title = course.title
        except IntegrityError as exc:
            logger.warning(
                "enrollment_conflict",
                employee_id=request.employee_id,
                course_id=request.course_id,
            )
            raise DuplicateEnrollmentError(DUPLICATE_MESSAGE) from exc

        logger.info(
            "enrollment_created",
            enrollment_id=enrollment.id,
            employee_id=enrollment.employee_id,
            course_id=enrollment.course_id,
            enrolled_by=enrolled_by,
        )
        self.notifier.dispatch(
            self.notifier.notify_enrollment(
                enrollment.employee_id, course_title, enrollment.enrollment_type
            )
        )
        return enrollment

    async def update(
        self,
        enrollment_id: str,
        *,
        status: str | None = None,
        completion_percentage: float | None = None,
    ) -> Enrollment:
        new_status: EnrollmentStatus | None = None
        if status is not None:
            try:
                new_status = EnrollmentStatus(status)
            except ValueError as exc:
                raise InvalidInputError("Invalid enrollment status") from exc
        if completion_percentage is not None and not 0 <= completion_percentage <= 100:
            raise InvalidInputError("Percentage must be between 0 and 100")

        try:
            async with UnitOfWork(self.session_factory) as uow:
                enrollment = await uow.session.get(Enrollment, enrollment_id)
                if enrollment is None:
                    raise EnrollmentNotFoundError("Enrollment not found")
                if new_status is not None:
                    enrollment.status = new_status
                if completion_percentage is not None:
                    enrollment.completion_percentage = completion_percentage
                await uow.session.flush()
        except IntegrityError as exc:
            raise DuplicateEnrollmentError(DUPLICATE_MESSAGE) from exc

        logger.info(
            "enrollment_updated",
            enrollment_id=enrollment_id,
            status=enrollment.status.value,
            completion_percentage=enrollment.completion_percentage,
        )
        return enrollment
