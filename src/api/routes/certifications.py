from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.api.deps import (
    get_app_settings,
    get_current_user,
    get_db_session,
    get_session_factory,
    require_roles,
)
from src.api.schemas.certifications import CertificationCreate, CertificationItem
from src.api.schemas.common import ApiResponse
from src.core.config import Settings
from src.domain import User
from src.domain.errors import InvalidInputError, NotFoundError, TransactionFailureError
from src.domain.services.certifications import CertificationService, CertificationView
from src.infrastructure.db.models import Certification

router = APIRouter(prefix="/certifications", tags=["Certifications"])


def _certification_item(
    certification: Certification,
    employee_name: str | None = None,
    course_title: str | None = None,
) -> CertificationItem:
    return CertificationItem(
        id=certification.id,
        employee_id=certification.employee_id,
        course_id=certification.course_id,
        certificate_number=certification.certificate_number,
        issue_date=certification.issue_date,
        expiry_date=certification.expiry_date,
        status=certification.effective_status().value,
        employee_name=employee_name,
        course_title=course_title,
        created_at=certification.created_at,
    )


def _from_view(view: CertificationView) -> CertificationItem:
    return _certification_item(view.certification, view.employee_name, view.course_title)


@router.get("", response_model=ApiResponse[list[CertificationItem]])
async def list_certifications(
    employee_id: str | None = Query(None),
    course_id: str | None = Query(None),
    session: AsyncSession = Depends(get_db_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> ApiResponse[list[CertificationItem]]:
    service = CertificationService(session_factory, settings)
    views = await service.list_certifications(
        session, employee_id=employee_id, course_id=course_id
    )
    return ApiResponse(data=[_from_view(view) for view in views])


@router.get("/{certification_id}", response_model=ApiResponse[CertificationItem])
async def get_certification(
    certification_id: str,
    session: AsyncSession = Depends(get_db_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(get_current_user),
) -> ApiResponse[CertificationItem]:
    service = CertificationService(session_factory, settings)
    try:
        view = await service.get(session, certification_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ApiResponse(data=_from_view(view))


@router.post(
    "",
    response_model=ApiResponse[CertificationItem],
    status_code=status.HTTP_201_CREATED,
)
async def generate_certification(
    payload: CertificationCreate,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    settings: Settings = Depends(get_app_settings),
    user: User = Depends(require_roles(["admin", "manager"])),
) -> ApiResponse[CertificationItem]:
    """Issue a certificate directly (admin/manager only)."""
    service = CertificationService(session_factory, settings)
    try:
        certification = await service.issue(
            employee_id=payload.employee_id,
            course_id=payload.course_id,
            expiry_years=payload.expiry_years,
        )
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except TransactionFailureError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc

    return ApiResponse(
        data=_certification_item(certification),
        message="Certification generated successfully",
    )
