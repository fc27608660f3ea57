import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.http.auth import get_current_active_user
from app.api.http.errors import to_http_exception
from app.core.db import get_db
from app.core.exceptions import AppError
from app.domains.identity.entities import User
from app.domains.resumes.schemas import ResumeAnalyticsResponse, UserAnalyticsResponse
from app.domains.resumes.services import ResumeService

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/resume/{resume_uuid}", response_model=ResumeAnalyticsResponse)
async def get_resume_analytics(
    resume_uuid: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Просмотры и скачивания резюме"""
    resume_service = ResumeService(db)

    try:
        stats = await resume_service.get_resume_analytics(current_user.uuid, resume_uuid)
    except AppError as e:
        raise to_http_exception(e)

    return ResumeAnalyticsResponse(uuid=resume_uuid, **stats.to_dict())


@router.get("/user", response_model=UserAnalyticsResponse, response_model_exclude_none=True)
async def get_user_analytics(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Сводная аналитика по всем резюме пользователя"""
    resume_service = ResumeService(db)

    analytics = await resume_service.get_user_analytics(current_user.uuid)
    return UserAnalyticsResponse(**analytics)
