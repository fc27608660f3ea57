import re
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.http.auth import get_current_active_user, get_optional_user
from app.api.http.errors import to_http_exception
from app.core.db import get_db
from app.core.exceptions import AppError, ValidationError
from app.domains.identity.entities import User
from app.domains.resumes.entities import Resume
from app.domains.resumes.schemas import (
    ResumeCreate, ResumeUpdate, ResumeResponse, ResumeSummaryResponse,
    ResumeListResponse, ResumeStatsResponse, PaginationResponse,
    PublicResumeResponse, TemplateSettings, TemplateSettingsResponse,
    VersionInfoResponse, VersionListResponse, VersionResponse,
    PopularTemplatesResponse
)
from app.domains.resumes.services import ResumeService

router = APIRouter(prefix="/resumes", tags=["resumes"])

_INDEX_PATTERN = re.compile(r"-?[0-9]+")


def parse_version_index(raw: str) -> int:
    """Индекс версии из пути; допускаются только целые числа"""
    if not _INDEX_PATTERN.fullmatch(raw):
        raise ValidationError("Invalid version index")
    return int(raw)


def _summary_fields(resume: Resume) -> dict:
    return {
        "uuid": resume.uuid,
        "name": resume.name,
        "last_modified": resume.last_modified,
        "template": resume.template,
        "is_public": resume.is_public,
        "slug": resume.slug,
        "created_at": resume.created_at,
        "stats": ResumeStatsResponse(**resume.stats.to_dict()),
        "tags": resume.tags,
        "template_settings": resume.template_settings,
    }


def _resume_response(resume: Resume) -> ResumeResponse:
    return ResumeResponse(
        **_summary_fields(resume),
        owner_id=resume.owner_id,
        data=resume.data,
        version_count=len(resume.versions),
        revision=resume.revision
    )


@router.get("/", response_model=ResumeListResponse)
async def get_resumes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Literal["last_modified", "created_at", "name", "template"] = "last_modified",
    sort_order: Literal["asc", "desc"] = "desc",
    template: Optional[str] = None,
    is_public: Optional[bool] = None,
    tags: Optional[str] = Query(None, description="Comma separated tags"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка резюме текущего пользователя"""
    resume_service = ResumeService(db)

    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else None
    resumes, pagination = await resume_service.list_resumes(
        current_user.uuid,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        template=template,
        is_public=is_public,
        tags=tag_list
    )

    return ResumeListResponse(
        resumes=[ResumeSummaryResponse(**_summary_fields(resume)) for resume in resumes],
        pagination=PaginationResponse(**pagination)
    )


@router.post("/", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def create_resume(
    resume_data: ResumeCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового резюме"""
    resume_service = ResumeService(db)

    try:
        resume = await resume_service.create_resume(current_user.uuid, resume_data)
    except AppError as e:
        raise to_http_exception(e)

    return _resume_response(resume)


@router.get("/templates/popular", response_model=PopularTemplatesResponse)
async def get_popular_templates(
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    """Популярные шаблоны"""
    resume_service = ResumeService(db)

    popular = await resume_service.get_popular_templates(limit)
    return {"popular_templates": popular}


@router.get("/public/{slug}", response_model=PublicResumeResponse)
async def get_public_resume(
    slug: str,
    db: AsyncSession = Depends(get_db)
):
    """Получение опубликованного резюме по slug"""
    resume_service = ResumeService(db)

    try:
        resume = await resume_service.get_public_resume(slug)
    except AppError as e:
        raise to_http_exception(e)

    return PublicResumeResponse(
        name=resume.name,
        data=resume.data,
        template=resume.template,
        template_settings=resume.template_settings,
        created_at=resume.created_at,
        last_modified=resume.last_modified
    )


@router.get("/{resume_uuid}", response_model=ResumeResponse)
async def get_resume(
    resume_uuid: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение резюме по UUID"""
    resume_service = ResumeService(db)

    try:
        resume = await resume_service.get_resume(current_user.uuid, resume_uuid)
    except AppError as e:
        raise to_http_exception(e)

    return _resume_response(resume)


@router.put("/{resume_uuid}", response_model=ResumeResponse)
async def update_resume(
    resume_uuid: uuid.UUID,
    update_data: ResumeUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Обновление резюме"""
    resume_service = ResumeService(db)

    try:
        resume = await resume_service.update_resume(current_user.uuid, resume_uuid, update_data)
    except AppError as e:
        raise to_http_exception(e)

    return _resume_response(resume)


@router.delete("/{resume_uuid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_resume(
    resume_uuid: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Удаление резюме"""
    resume_service = ResumeService(db)

    try:
        await resume_service.delete_resume(current_user.uuid, resume_uuid)
    except AppError as e:
        raise to_http_exception(e)


# Версии резюме
@router.get("/{resume_uuid}/versions", response_model=VersionListResponse)
async def get_resume_versions(
    resume_uuid: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка версий резюме"""
    resume_service = ResumeService(db)

    try:
        versions = await resume_service.list_versions(current_user.uuid, resume_uuid)
    except AppError as e:
        raise to_http_exception(e)

    return VersionListResponse(versions=[VersionInfoResponse(**version) for version in versions])


@router.get("/{resume_uuid}/versions/{version_index}", response_model=VersionResponse)
async def get_resume_version(
    resume_uuid: uuid.UUID,
    version_index: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение конкретной версии резюме"""
    resume_service = ResumeService(db)

    try:
        index = parse_version_index(version_index)
        version = await resume_service.get_version(current_user.uuid, resume_uuid, index)
    except AppError as e:
        raise to_http_exception(e)

    return VersionResponse(
        index=index,
        data=version.data,
        created_at=version.created_at,
        notes=version.notes
    )


@router.post("/{resume_uuid}/versions/{version_index}/restore", response_model=ResumeResponse)
async def restore_resume_version(
    resume_uuid: uuid.UUID,
    version_index: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Восстановление резюме из версии"""
    resume_service = ResumeService(db)

    try:
        index = parse_version_index(version_index)
        resume = await resume_service.restore_version(current_user.uuid, resume_uuid, index)
    except AppError as e:
        raise to_http_exception(e)

    return _resume_response(resume)


@router.put("/{resume_uuid}/template-settings", response_model=TemplateSettingsResponse)
async def update_template_settings(
    resume_uuid: uuid.UUID,
    template_settings: TemplateSettings,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Обновление настроек шаблона"""
    resume_service = ResumeService(db)

    try:
        merged = await resume_service.update_template_settings(
            current_user.uuid,
            resume_uuid,
            template_settings.model_dump(exclude_unset=True)
        )
    except AppError as e:
        raise to_http_exception(e)

    return TemplateSettingsResponse(template_settings=merged)


@router.post("/{resume_uuid}/download")
async def record_resume_download(
    resume_uuid: uuid.UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Учет скачивания резюме"""
    resume_service = ResumeService(db)

    try:
        await resume_service.record_download(
            resume_uuid,
            viewer_id=current_user.uuid if current_user else None
        )
    except (AppError, PermissionError) as e:
        raise to_http_exception(e)

    return {"success": True}
