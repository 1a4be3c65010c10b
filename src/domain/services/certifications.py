"""Certification lookup and manual issuance."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from src.core.config import Settings, get_settings
from src.domain.errors import (
    CertificationNotFoundError,
    CourseNotFoundError,
    EmployeeNotFoundError,
    InvalidInputError,
    TransactionFailureError,
)
from src.domain.services.certificates import CertificateIssuer
from src.infrastructure.db.models import Certification
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()


@dataclass(slots=True)
class CertificationView:
    certification: Certification
    employee_name: str | None
    course_title: str | None


class CertificationService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ) -> None:
        self.session_factory = session_factory
        settings = settings or get_settings()
        self.issuer = CertificateIssuer(
            expiry_years=settings.certificate_expiry_years,
            max_attempts=settings.certificate_number_attempts,
        )

    async def list_certifications(
        self,
        session: AsyncSession,
        *,
        employee_id: str | None = None,
        course_id: str | None = None,
    ) -> list[CertificationView]:
        stmt = select(Certification).options(
            selectinload(Certification.employee), selectinload(Certification.course)
        )
        if employee_id:
            stmt = stmt.where(Certification.employee_id == employee_id)
        if course_id:
            stmt = stmt.where(Certification.course_id == course_id)
        stmt = stmt.order_by(Certification.created_at.desc())
        certifications = (await session.execute(stmt)).scalars().all()
        return [self._view(cert) for cert in certifications]

    async def get(self, session: AsyncSession, certification_id: str) -> CertificationView:
        stmt = (
            select(Certification)
            .where(Certification.id == certification_id)
            .options(selectinload(Certification.employee), selectinload(Certification.course))
        )
        certification = await session.scalar(stmt)
        if certification is None:
            raise CertificationNotFoundError("Certification not found")
        return self._view(certification)

    async def issue(
        self,
        *,
        employee_id: str | None,
        course_id: str | None,
        expiry_years: int | None = None,
    ) -> Certification:
        """Issue a certificate outside the assessment workflow."""
        if not employee_id or not course_id:
            raise InvalidInputError("Employee ID and Course ID are required")
        if expiry_years is not None and expiry_years < 1:
            raise InvalidInputError("expiry_years must be a positive integer")

        try:
            async with UnitOfWork(self.session_factory) as uow:
                if await uow.employees.get(employee_id) is None:
                    raise EmployeeNotFoundError("Employee not found")
                if await uow.courses.get(course_id) is None:
                    raise CourseNotFoundError("Course not found")
                return await self.issuer.issue(
                    uow,
                    employee_id=employee_id,
                    course_id=course_id,
                    expiry_years=expiry_years,
                )
        except IntegrityError as exc:
            logger.error("certificate_issue_failed", employee_id=employee_id, course_id=course_id)
            raise TransactionFailureError("Failed to generate certification") from exc

    @staticmethod
    def _view(certification: Certification) -> CertificationView:
        return CertificationView(
            certification=certification,
            employee_name=certification.employee.name if certification.employee else None,
            course_title=certification.course.title if certification.course else None,
        )
