from __future__ import annotations

from pydantic import BaseModel


class RecommendationItem(BaseModel):
    id: str
    title: str
    description: str | None = None
    category: str | None = None
    duration: int | None = None
    status: str
    recommendation_score: int
    recommendation_reason: str
    recommendation_type: str


class CurrentCourse(BaseModel):
    enrollment_id: str
    course_id: str
    title: str
    duration: int | None = None
    status: str
    completion_percentage: float
    enrollment_date: str


class LearningPathStep(BaseModel):
    course_id: str
    title: str
    priority: str
    status: str
    progress: float = 0
    estimated_completion: str | None = None
    reason: str | None = None


class LearningPathResponse(BaseModel):
    current_courses: list[CurrentCourse]
    recommended_courses: list[RecommendationItem]
    learning_path: list[LearningPathStep]
