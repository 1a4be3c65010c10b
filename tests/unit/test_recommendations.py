from __future__ import annotations

from datetime import date, timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.config import Settings
from src.domain.errors import EmployeeNotFoundError
from src.domain.services.recommendations import (
    DEPARTMENT_POOL,
    ROLE_POOL,
    TRENDING_POOL,
    RecommendationService,
    merge_pools,
    rank_pool,
)
from src.infrastructure.db.models import CourseStatus, EnrollmentStatus

from tests.utils import seed_course, seed_employee, seed_enrollment

TODAY = date(2026, 10, 19)
LONG_AGO = TODAY - timedelta(days=90)


def _course(course_id: str, title: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        id=course_id,
        title=title or course_id,
        description=None,
        category=None,
        duration=None,
        status=CourseStatus.ACTIVE,
    )


def test_rank_pool_counts_positions_after_exclusions() -> None:
    ranked = rank_pool(
        [_course("a"), _course("b"), _course("c")],
        DEPARTMENT_POOL,
        "Popular in Engineering department",
        excluded={"a"},
    )

    assert [(item.id, item.recommendation_score) for item in ranked] == [("b", 90), ("c", 85)]
    assert {item.recommendation_type for item in ranked} == {"department"}


def test_merge_pools_keeps_first_seen_and_sorts_stably() -> None:
    department = rank_pool([_course("a"), _course("b")], DEPARTMENT_POOL, "dept", excluded=set())
    role = rank_pool([_course("b"), _course("c")], ROLE_POOL, "role", excluded=set())
    trending = rank_pool([_course("d"), _course("e")], TRENDING_POOL, "trend", excluded=set())
    # Same score as the second role entry; the role entry must stay ahead
    trending[0].recommendation_score = 70

    merged = merge_pools([department, role, trending], limit=10)

    assert [item.id for item in merged] == ["a", "b", "c", "d", "e"]
    b = next(item for item in merged if item.id == "b")
    assert b.recommendation_type == "department"


def test_merge_pools_truncates() -> None:
    pool = rank_pool(
        [_course(f"c{i}") for i in range(10)], DEPARTMENT_POOL, "dept", excluded=set()
    )
    extra = rank_pool([_course(f"t{i}") for i in range(5)], TRENDING_POOL, "t", excluded=set())

    merged = merge_pools([pool, extra], limit=10)

    assert len(merged) == 10
    assert [item.id for item in merged][5:] == ["c5", "c6", "t0", "c7", "t1"]


async def _seed_department_activity(db: AsyncSession, course, count: int) -> None:
    for index in range(count):
        colleague = await seed_employee(
            db, name=f"Colleague {course.title} {index}", designation="QA Analyst"
        )
        await seed_enrollment(
            db,
            colleague,
            course,
            status=EnrollmentStatus.COMPLETED,
            enrollment_date=LONG_AGO,
        )


async def test_end_to_end_ranking(db: AsyncSession, settings: Settings) -> None:
    employee = await seed_employee(db, department="Engineering", designation="Backend Engineer")
    course_a = await seed_course(db, title="A Distributed Systems")
    course_b = await seed_course(db, title="B Databases")
    course_c = await seed_course(
        db, title="C API Design", description="Core skills for every Backend Engineer"
    )
    course_d = await seed_course(db, title="D Negotiation")
    await _seed_department_activity(db, course_a, 3)
    await _seed_department_activity(db, course_b, 2)

    sales = await seed_employee(db, department="Sales", designation="Account Executive")
    await seed_enrollment(db, sales, course_d, enrollment_date=TODAY - timedelta(days=3))

    recommendations = await RecommendationService(db, settings).recommend(
        employee.id, today=TODAY
    )

    assert [
        (item.id, item.recommendation_score, item.recommendation_reason)
        for item in recommendations
    ] == [
        (course_a.id, 90, "Popular in Engineering department"),
        (course_b.id, 85, "Popular in Engineering department"),
        (course_c.id, 75, "Relevant for Backend Engineer role"),
        (course_d.id, 60, "Trending course this month"),
    ]


async def test_completed_courses_are_excluded(db: AsyncSession, settings: Settings) -> None:
    employee = await seed_employee(db, department="Engineering", designation="Backend Engineer")
    done = await seed_course(db, title="Completed Course")
    open_course = await seed_course(db, title="Open Course")
    await _seed_department_activity(db, done, 3)
    await _seed_department_activity(db, open_course, 1)
    await seed_enrollment(
        db, employee, done, status=EnrollmentStatus.COMPLETED, enrollment_date=TODAY
    )

    recommendations = await RecommendationService(db, settings).recommend(
        employee.id, today=TODAY
    )

    ids = [item.id for item in recommendations]
    assert done.id not in ids
    assert ids[0] == open_course.id
    assert recommendations[0].recommendation_score == 90


async def test_inactive_courses_are_ignored(db: AsyncSession, settings: Settings) -> None:
    employee = await seed_employee(db)
    draft = await seed_course(db, title="Draft Course", status=CourseStatus.DRAFT)
    await _seed_department_activity(db, draft, 2)

    assert await RecommendationService(db, settings).recommend(employee.id, today=TODAY) == []


async def test_results_capped_and_non_increasing(db: AsyncSession, settings: Settings) -> None:
    employee = await seed_employee(db, designation="Data Engineer")
    for index in range(12):
        course = await seed_course(
            db, title=f"Course {index:02d}", description="Handy for any data engineer"
        )
        await _seed_department_activity(db, course, 1)

    recommendations = await RecommendationService(db, settings).recommend(
        employee.id, today=TODAY
    )

    scores = [item.recommendation_score for item in recommendations]
    assert len(recommendations) == 10
    assert scores == sorted(scores, reverse=True)


async def test_employee_without_designation_gets_no_role_pool(
    db: AsyncSession, settings: Settings
) -> None:
    employee = await seed_employee(db, designation=None)
    await seed_course(db, title="Anything", description="")

    recommendations = await RecommendationService(db, settings).recommend(
        employee.id, today=TODAY
    )

    assert all(item.recommendation_type != "role" for item in recommendations)


async def test_unknown_employee_raises(db: AsyncSession, settings: Settings) -> None:
    with pytest.raises(EmployeeNotFoundError):
        await RecommendationService(db, settings).recommend("missing")
