"""
Rule-based course recommendations for an employee.

Three candidate pools are blended into one ranked list:
- department: courses most enrolled in by the employee's department (base score 90)
- role: courses whose description mentions the employee's designation (base 75)
- trending: courses with the most enrollments in the trailing window (base 60)
Each pool loses 5 points per rank. Completed courses never appear, and a course
appears once, in the first pool that produced it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.config import Settings, get_settings
from src.domain.errors import EmployeeNotFoundError
from src.infrastructure.db.models import (
    Course,
    CourseStatus,
    Employee,
    Enrollment,
    EnrollmentStatus,
)

logger = structlog.get_logger()

SCORE_STEP = 5


@dataclass(frozen=True, slots=True)
class CandidatePool:
    kind: str
    base_score: int
    size: int


DEPARTMENT_POOL = CandidatePool(kind="department", base_score=90, size=10)
ROLE_POOL = CandidatePool(kind="role", base_score=75, size=5)
TRENDING_POOL = CandidatePool(kind="trending", base_score=60, size=5)


@dataclass(slots=True)
class CourseRecommendation:
    id: str
    title: str
    description: str | None
    category: str | None
    duration: int | None
    status: str
    recommendation_score: int
    recommendation_reason: str
    recommendation_type: str

    @classmethod
    def from_course(
        cls, course: Course, *, score: int, reason: str, kind: str
    ) -> CourseRecommendation:
        return cls(
            id=course.id,
            title=course.title,
            description=course.description,
            category=course.category,
            duration=course.duration,
            status=course.status.value,
            recommendation_score=score,
            recommendation_reason=reason,
            recommendation_type=kind,
        )


def rank_pool(
    candidates: list[Course],
    pool: CandidatePool,
    reason: str,
    *,
    excluded: set[str],
) -> list[CourseRecommendation]:
    """Score a pool after dropping excluded course ids; rank counts from the survivors."""
    ranked: list[CourseRecommendation] = []
    for course in candidates:
        if course.id in excluded:
            continue
        score = pool.base_score - len(ranked) * SCORE_STEP
        ranked.append(
            CourseRecommendation.from_course(course, score=score, reason=reason, kind=pool.kind)
        )
    return ranked


def merge_pools(
    pools: list[list[CourseRecommendation]], limit: int
) -> list[CourseRecommendation]:
    """Keep first-seen entries, then sort by score descending (stable) and truncate."""
    seen: set[str] = set()
    merged: list[CourseRecommendation] = []
    for pool in pools:
        for item in pool:
            if item.id in seen:
                continue
            seen.add(item.id)
            merged.append(item)
    merged.sort(key=lambda item: item.recommendation_score, reverse=True)
    return merged[:limit]


class RecommendationService:
    """Builds ranked course recommendations from enrollment data."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()

    async def recommend(
        self, employee_id: str, *, today: date | None = None
    ) -> list[CourseRecommendation]:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError("Employee not found")

        completed = await self._completed_course_ids(employee_id)

        department_courses = await self._department_courses(employee.department)
        department_pool = rank_pool(
            department_courses,
            DEPARTMENT_POOL,
            f"Popular in {employee.department} department",
            excluded=completed,
        )

        taken = completed | {item.id for item in department_pool}
        role_courses = await self._role_courses(employee.designation)
        role_pool = rank_pool(
            role_courses,
            ROLE_POOL,
            f"Relevant for {employee.designation} role",
            excluded=taken,
        )

        taken |= {item.id for item in role_pool}
        trending_courses = await self._trending_courses(today or date.today())
        trending_pool = rank_pool(
            trending_courses,
            TRENDING_POOL,
            "Trending course this month",
            excluded=taken,
        )

        recommendations = merge_pools(
            [department_pool, role_pool, trending_pool], self.settings.recommendation_limit
        )
        logger.info(
            "recommendations_generated",
            employee_id=employee_id,
            completed_count=len(completed),
            department_candidates=len(department_pool),
            role_candidates=len(role_pool),
            trending_candidates=len(trending_pool),
            returned=len(recommendations),
        )
        return recommendations

    async def _completed_course_ids(self, employee_id: str) -> set[str]:
        stmt = select(Enrollment.course_id).where(
            Enrollment.employee_id == employee_id,
            Enrollment.status == EnrollmentStatus.COMPLETED,
        )
        return set((await self.session.execute(stmt)).scalars().all())

    async def _department_courses(self, department: str | None) -> list[Course]:
        if not department:
            return []
        enrollment_count = func.count(Enrollment.id).label("enrollment_count")
        stmt = (
            select(Course, enrollment_count)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .join(Employee, Enrollment.employee_id == Employee.id)
            .where(Employee.department == department, Course.status == CourseStatus.ACTIVE)
            .group_by(Course.id)
            .order_by(enrollment_count.desc(), Course.title)
            .limit(DEPARTMENT_POOL.size)
        )
        return [course for course, _ in (await self.session.execute(stmt)).all()]

    async def _role_courses(self, designation: str | None) -> list[Course]:
        if not designation:
            return []
        stmt = (
            select(Course)
            .where(
                Course.status == CourseStatus.ACTIVE,
                Course.description.icontains(designation, autoescape=True),
            )
            .order_by(Course.title)
            .limit(ROLE_POOL.size)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def _trending_courses(self, today: date) -> list[Course]:
        window_start = today - timedelta(days=self.settings.trending_window_days)
        recent_enrollments = func.count(Enrollment.id).label("recent_enrollments")
        stmt = (
            select(Course, recent_enrollments)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .where(
                Course.status == CourseStatus.ACTIVE,
                Enrollment.enrollment_date >= window_start,
            )
            .group_by(Course.id)
            .order_by(recent_enrollments.desc(), Course.title)
            .limit(TRENDING_POOL.size)
        )
        return [course for course, _ in (await self.session.execute(stmt)).all()]


@dataclass(slots=True)
class LearningPath:
    current_courses: list[dict[str, Any]] = field(default_factory=list)
    recommended_courses: list[CourseRecommendation] = field(default_factory=list)
    learning_path: list[dict[str, Any]] = field(default_factory=list)


STUDY_HOURS_PER_DAY = 2
DEFAULT_COURSE_HOURS = 10
PATH_RECOMMENDATIONS = 5


def estimate_completion(
    duration_hours: int | None, progress: float | None, *, today: date
) -> date:
    """Remaining share of the course at two study hours a day."""
    hours = duration_hours or DEFAULT_COURSE_HOURS
    pct = progress or 0.0
    remaining_hours = hours * (100 - pct) / 100
    days = math.ceil(remaining_hours / STUDY_HOURS_PER_DAY)
    return today + timedelta(days=days)


class LearningPathService:
    """Combines in-flight enrollments with fresh recommendations."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self.session = session
        self.recommendations = RecommendationService(session, settings)

    async def build(self, employee_id: str, *, today: date | None = None) -> LearningPath:
        today = today or date.today()
        recommended = await self.recommendations.recommend(employee_id, today=today)

        stmt = (
            select(Enrollment, Course)
            .join(Course, Enrollment.course_id == Course.id)
            .where(
                Enrollment.employee_id == employee_id,
                Enrollment.status.in_(EnrollmentStatus.open_statuses()),
            )
            .order_by(Enrollment.enrollment_date.desc())
        )
        rows = (await self.session.execute(stmt)).all()

        current = [
            {
                "enrollment_id": enrollment.id,
                "course_id": course.id,
                "title": course.title,
                "duration": course.duration,
                "status": enrollment.status.value,
                "completion_percentage": enrollment.completion_percentage,
                "enrollment_date": enrollment.enrollment_date.isoformat(),
            }
            for enrollment, course in rows
        ]

        path: list[dict[str, Any]] = [
            {
                "course_id": item["course_id"],
                "title": item["title"],
                "priority": "high",
                "status": "in_progress",
                "progress": item["completion_percentage"] or 0,
                "estimated_completion": estimate_completion(
                    item["duration"], item["completion_percentage"], today=today
                ).isoformat(),
            }
            for item in current
        ]
        for index, course in enumerate(recommended[:PATH_RECOMMENDATIONS]):
            path.append(
                {
                    "course_id": course.id,
                    "title": course.title,
                    "priority": "high" if index < 2 else "medium",
                    "status": "recommended",
                    "progress": 0,
                    "reason": course.recommendation_reason,
                }
            )

        return LearningPath(
            current_courses=current,
            recommended_courses=recommended,
            learning_path=path,
        )
