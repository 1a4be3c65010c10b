from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import issue_smoke_token
from src.core.auth import Role
from src.infrastructure.db.models import (
    Assessment,
    Course,
    CourseStatus,
    Employee,
    Enrollment,
    EnrollmentStatus,
)


def auth_headers(user_id: str = "employee-1", role: Role = Role.EMPLOYEE) -> dict[str, str]:
    token = issue_smoke_token(user_id, role=role, email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


async def seed_employee(session: AsyncSession, **overrides: Any) -> Employee:
    values: dict[str, Any] = {
        "employee_code": f"EMP-{uuid.uuid4().hex[:8]}",
        "name": "Dana Reyes",
        "email": "dana.reyes@example.com",
        "department": "Engineering",
        "designation": "Backend Engineer",
        "user_id": None,
    }
    values.update(overrides)
    employee = Employee(**values)
    session.add(employee)
    await session.commit()
    return employee


async def seed_course(session: AsyncSession, **overrides: Any) -> Course:
    values: dict[str, Any] = {
        "title": "Async Python",
        "description": "Event loops, tasks and structured concurrency",
        "category": "Engineering",
        "duration": 12,
        "status": CourseStatus.ACTIVE,
    }
    values.update(overrides)
    course = Course(**values)
    session.add(course)
    await session.commit()
    return course


async def seed_assessment(session: AsyncSession, course: Course, **overrides: Any) -> Assessment:
    values: dict[str, Any] = {
        "course_id": course.id,
        "title": f"{course.title} final exam",
        "passing_score": 70.0,
        "total_points": 100,
        "duration": 45,
    }
    values.update(overrides)
    assessment = Assessment(**values)
    session.add(assessment)
    await session.commit()
    return assessment


async def seed_enrollment(
    session: AsyncSession,
    employee: Employee,
    course: Course,
    *,
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
    enrollment_date: date | None = None,
    completion_percentage: float = 0.0,
) -> Enrollment:
    enrollment = Enrollment(
        employee_id=employee.id,
        course_id=course.id,
        status=status,
        completion_percentage=completion_percentage,
        enrollment_date=enrollment_date or date.today(),
    )
    session.add(enrollment)
    await session.commit()
    return enrollment


async def count_rows(session: AsyncSession, model: type, **filters: Any) -> int:
    stmt = select(func.count()).select_from(model)
    for column, value in filters.items():
        stmt = stmt.where(getattr(model, column) == value)
    return int(await session.scalar(stmt) or 0)
