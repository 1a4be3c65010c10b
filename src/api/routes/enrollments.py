from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import get_current_user, get_notifier, get_session_factory, require_roles
from src.api.schemas.common import ApiResponse
from src.api.schemas.enrollments import EnrollmentCreate, EnrollmentItem, EnrollmentUpdate
from src.domain import User
from src.domain.errors import ConflictError, InvalidInputError, NotFoundError
from src.domain.services.enrollments import EnrollmentRequest, EnrollmentService
from src.domain.services.notifications import Notifier
from src.infrastructure.db.models import Enrollment

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


def _enrollment_item(enrollment: Enrollment) -> EnrollmentItem:
    return EnrollmentItem(
        id=enrollment.id,
        employee_id=enrollment.employee_id,
        course_id=enrollment.course_id,
        status=enrollment.status.value,
        completion_percentage=enrollment.completion_percentage,
        enrollment_date=enrollment.enrollment_date,
        enrollment_type=enrollment.enrollment_type,
        enrolled_by=enrollment.enrolled_by,
        program_name=enrollment.program_name,
        comments=enrollment.comments,
    )


@router.post("", response_model=ApiResponse[EnrollmentItem], status_code=status.HTTP_201_CREATED)
async def create_enrollment(
    payload: EnrollmentCreate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: Notifier = Depends(get_notifier),
    user: User = Depends(get_current_user),
) -> ApiResponse[EnrollmentItem]:
    service = EnrollmentService(session_factory, notifier)
    try:
        enrollment = await service.create(
            EnrollmentRequest(
                employee_id=payload.employee_id,
                course_id=payload.course_id,
                enrollment_type=payload.enrollment_type,
                program_name=payload.program_name,
                comments=payload.comments,
            ),
            enrolled_by=user.user_id,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return ApiResponse(
        data=_enrollment_item(enrollment), message="Enrollment created successfully"
    )


@router.patch("/{enrollment_id}", response_model=ApiResponse[EnrollmentItem])
async def update_enrollment(
    enrollment_id: str,
    payload: EnrollmentUpdate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    notifier: Notifier = Depends(get_notifier),
    user: User = Depends(require_roles(["admin", "manager"])),
) -> ApiResponse[EnrollmentItem]:
    """Change an enrollment's status or completion percentage (admin/manager only)."""
    service = EnrollmentService(session_factory, notifier)
    try:
        enrollment = await service.update(
            enrollment_id,
            status=payload.status,
            completion_percentage=payload.completion_percentage,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return ApiResponse(data=_enrollment_item(enrollment), message="Enrollment updated")
