from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import (
    get_app_settings,
    get_current_user,
    get_db_session,
    get_notifier,
    get_session_factory,
)
from src.api.schemas.assessments import AttemptItem, AttemptSubmitRequest
from src.api.schemas.common import ApiResponse
from src.core.config import Settings
from src.domain import User
from src.domain.errors import (
    InvalidInputError,
    NotFoundError,
    TransactionFailureError,
)
from src.domain.services.notifications import Notifier
from src.domain.services.submission import SubmissionService, list_attempts
from src.infrastructure.db.models import AssessmentAttempt

router = APIRouter(prefix="/assessments", tags=["Assessments"])


def _attempt_item(attempt: AssessmentAttempt, employee_name: str | None = None) -> AttemptItem:
    return AttemptItem(
        id=attempt.id,
        assessment_id=attempt.assessment_id,
        employee_id=attempt.employee_id,
        employee_name=employee_name,
        score=attempt.score,
        status=attempt.status.value,
        attempted_at=attempt.attempted_at,
        completed_at=attempt.completed_at,
    )


@router.post(
    "/{assessment_id}/attempts",
    response_model=ApiResponse[AttemptItem],
    status_code=status.HTTP_201_CREATED,
)
async def submit_attempt(
    assessment_id: str,
    payload: AttemptSubmitRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> ApiResponse[AttemptItem]:
    """
    Submit a scored attempt.

    - Unknown assessment or employee is a 404 and nothing is written
    - Records the attempt as Passed or Failed
    - A pass completes the employee's Active enrollment and issues a certificate
    - Result and certificate notifications are sent after commit
    """
    service = SubmissionService(session_factory, notifier, settings)
    try:
        result = await service.submit_attempt(
            assessment_id=assessment_id,
            employee_id=payload.employee_id,
            score=payload.score,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except TransactionFailureError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    return ApiResponse(data=_attempt_item(result.attempt), message=result.message)


@router.get("/{assessment_id}/attempts", response_model=ApiResponse[list[AttemptItem]])
async def get_attempts(
    assessment_id: str,
    session: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[AttemptItem]]:
    """Return attempts for an assessment, most recent first."""
    items = await list_attempts(session, assessment_id)
    return ApiResponse(data=[_attempt_item(item.attempt, item.employee_name) for item in items])
