#!/usr/bin/env python3
"""
Seed a small demo dataset: two departments, a handful of courses with
assessments, and enrollments spread over the last few months.

Run against the configured DATABASE_URL after `alembic upgrade head`:
    python scripts/seed_demo_data.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio  # noqa: E402
from datetime import date, timedelta  # noqa: E402

import structlog  # noqa: E402
from sqlalchemy import select  # noqa: E402
from src.core.config import get_settings  # noqa: E402
from src.core.logging import setup_logging  # noqa: E402
from src.infrastructure.db import build_engine, build_session_factory  # noqa: E402
from src.infrastructure.db.models import (  # noqa: E402
    Assessment,
    Course,
    Employee,
    Enrollment,
    EnrollmentStatus,
)

logger = structlog.get_logger()

EMPLOYEES = [
    ("E-1001", "Dana Reyes", "Engineering", "Backend Engineer", "dana"),
    ("E-1002", "Sam Ortiz", "Engineering", "Data Engineer", "sam"),
    ("E-1003", "Priya Nair", "Engineering", "Backend Engineer", None),
    ("E-2001", "Lee Park", "Sales", "Account Executive", "lee"),
]

COURSES = [
    ("Async Python", "Event loops and tasks for every Backend Engineer", "Engineering", 12),
    ("PostgreSQL Internals", "Indexes, MVCC and query plans", "Engineering", 16),
    ("Data Pipelines", "Batch and streaming for the Data Engineer", "Data", 20),
    ("Negotiation Basics", "Closing deals without leaving value behind", "Sales", 6),
]

# (employee code, course title, status, days ago)
ENROLLMENTS = [
    ("E-1002", "Async Python", EnrollmentStatus.COMPLETED, 120),
    ("E-1003", "Async Python", EnrollmentStatus.ACTIVE, 60),
    ("E-1003", "PostgreSQL Internals", EnrollmentStatus.ACTIVE, 45),
    ("E-1001", "PostgreSQL Internals", EnrollmentStatus.ACTIVE, 10),
    ("E-2001", "Negotiation Basics", EnrollmentStatus.PENDING, 3),
]


async def seed() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.json_logs)
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    try:
        async with session_factory() as session:
            if await session.scalar(select(Employee.id).limit(1)):
                logger.info("seed_skipped", reason="employees already present")
                return

            employees = {}
            for code, name, department, designation, user_id in EMPLOYEES:
                employees[code] = Employee(
                    employee_code=code,
                    name=name,
                    email=f"{name.split()[0].lower()}@example.com",
                    department=department,
                    designation=designation,
                    user_id=user_id,
                )
            courses = {}
            for title, description, category, duration in COURSES:
                course = Course(
                    title=title, description=description, category=category, duration=duration
                )
                courses[title] = course
                session.add(
                    Assessment(course=course, title=f"{title} final exam", passing_score=70)
                )
            session.add_all([*employees.values(), *courses.values()])
            await session.flush()

            today = date.today()
            for code, title, status, days_ago in ENROLLMENTS:
                session.add(
                    Enrollment(
                        employee_id=employees[code].id,
                        course_id=courses[title].id,
                        status=status,
                        completion_percentage=(
                            100.0 if status is EnrollmentStatus.COMPLETED else 0.0
                        ),
                        enrollment_date=today - timedelta(days=days_ago),
                        enrollment_type="Manual",
                    )
                )
            await session.commit()
            logger.info(
                "seed_completed",
                employees=len(employees),
                courses=len(courses),
                enrollments=len(ENROLLMENTS),
            )
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
