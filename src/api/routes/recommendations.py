from __future__ import annotations

from dataclasses import asdict

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import get_app_settings, get_current_user, get_db_session
from src.api.schemas.common import ApiResponse
from src.api.schemas.recommendations import (
    CurrentCourse,
    LearningPathResponse,
    LearningPathStep,
    RecommendationItem,
)
from src.core.config import Settings
from src.domain import User
from src.domain.errors import EmployeeNotFoundError
from src.domain.services.recommendations import LearningPathService, RecommendationService

router = APIRouter(prefix="/ai", tags=["AI"])
logger = structlog.get_logger()


@router.get("/recommendations/{employee_id}", response_model=ApiResponse[list[RecommendationItem]])
async def get_recommendations(
    employee_id: str,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[RecommendationItem]]:
    """Ranked course recommendations for an employee (at most 10)."""
    service = RecommendationService(session, settings)
    try:
        recommendations = await service.recommend(employee_id)
    except EmployeeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("recommendations_failed", employee_id=employee_id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch recommendations",
        ) from exc

    return ApiResponse(data=[RecommendationItem(**asdict(item)) for item in recommendations])


@router.get("/learning-path/{employee_id}", response_model=ApiResponse[LearningPathResponse])
async def get_learning_path(
    employee_id: str,
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> ApiResponse[LearningPathResponse]:
    """Current courses followed by the top recommendations."""
    service = LearningPathService(session, settings)
    try:
        path = await service.build(employee_id)
    except EmployeeNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        logger.error("learning_path_failed", employee_id=employee_id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build learning path",
        ) from exc

    return ApiResponse(
        data=LearningPathResponse(
            current_courses=[CurrentCourse(**course) for course in path.current_courses],
            recommended_courses=[
                RecommendationItem(**asdict(item)) for item in path.recommended_courses
            ],
            learning_path=[LearningPathStep(**step) for step in path.learning_path],
        )
    )
