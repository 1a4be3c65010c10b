from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from src.infrastructure.db.models import (
    Assessment,
    AssessmentAttempt,
    AttemptStatus,
    Certification,
    CertificationStatus,
    Course,
    Employee,
    Enrollment,
    EnrollmentStatus,
)

logger = structlog.get_logger()


@dataclass
class AssessmentRepository:
    session: AsyncSession

    async def get(self, assessment_id: str) -> Assessment | None:
        stmt = (
            select(Assessment)
            .where(Assessment.id == assessment_id)
            .options(selectinload(Assessment.course))
        )
        return await self.session.scalar(stmt)


@dataclass
class AttemptRepository:
    session: AsyncSession

    async def add(
        self,
        *,
        assessment_id: str,
        employee_id: str,
        score: float,
        status: AttemptStatus,
        recorded_at: datetime,
    ) -> AssessmentAttempt:
        # No separate start/finish tracking: both marks share one timestamp
        attempt = AssessmentAttempt(
            assessment_id=assessment_id,
            employee_id=employee_id,
            score=score,
            status=status,
            attempted_at=recorded_at,
            completed_at=recorded_at,
        )
        self.session.add(attempt)
        await self.session.flush()
        return attempt


@dataclass
class EnrollmentRepository:
    session: AsyncSession

    async def find_active(self, *, employee_id: str, course_id: str) -> Enrollment | None:
        stmt = (
            select(Enrollment)
            .where(
                Enrollment.employee_id == employee_id,
                Enrollment.course_id == course_id,
                Enrollment.status == EnrollmentStatus.ACTIVE,
            )
            .limit(1)
        )
        return await self.session.scalar(stmt)

    async def find_open(self, *, employee_id: str, course_id: str) -> Enrollment | None:
        stmt = (
            select(Enrollment)
            .where(
                Enrollment.employee_id == employee_id,
                Enrollment.course_id == course_id,
                Enrollment.status.in_(EnrollmentStatus.open_statuses()),
            )
            .limit(1)
        )
        return await self.session.scalar(stmt)

    async def mark_completed(self, enrollment_id: str) -> None:
        await self.session.execute(
            update(Enrollment)
            .where(Enrollment.id == enrollment_id)
            .values(status=EnrollmentStatus.COMPLETED, completion_percentage=100.0)
        )


@dataclass
class CertificationRepository:
    session: AsyncSession

    async def number_exists(self, certificate_number: str) -> bool:
        stmt = select(Certification.id).where(
            Certification.certificate_number == certificate_number
        )
        return (await self.session.scalar(stmt)) is not None

    async def add(
        self,
        *,
        employee_id: str,
        course_id: str,
        certificate_number: str,
        issue_date: date,
        expiry_date: date,
    ) -> Certification:
        certification = Certification(
            employee_id=employee_id,
            course_id=course_id,
            certificate_number=certificate_number,
            issue_date=issue_date,
            expiry_date=expiry_date,
            status=CertificationStatus.ACTIVE,
        )
        self.session.add(certification)
        await self.session.flush()
        return certification


@dataclass
class EmployeeRepository:
    session: AsyncSession

    async def get(self, employee_id: str) -> Employee | None:
        return await self.session.get(Employee, employee_id)


@dataclass
class CourseRepository:
    session: AsyncSession

    async def get(self, course_id: str) -> Course | None:
        return await self.session.get(Course, course_id)


class UnitOfWork:
    """One database transaction with the repositories bound to it.

    Commits on a clean exit, rolls back on any exception and always closes the
    session so the pooled connection is released.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> UnitOfWork:
        self.session = self._session_factory()
        self.assessments = AssessmentRepository(self.session)
        self.attempts = AttemptRepository(self.session)
        self.enrollments = EnrollmentRepository(self.session)
        self.certifications = CertificationRepository(self.session)
        self.employees = EmployeeRepository(self.session)
        self.courses = CourseRepository(self.session)
        logger.debug("uow_enter")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc:
                await self.rollback()
            else:
                await self.commit()
        finally:
            await self.session.close()
            logger.debug("uow_exit", exc_type=str(exc_type) if exc_type else None)

    async def commit(self) -> None:
        await self.session.commit()
        logger.debug("uow_commit")

    async def rollback(self) -> None:
        await self.session.rollback()
        logger.debug("uow_rollback")
