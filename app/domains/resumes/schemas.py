from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List, Dict, Any, Literal, Union
import math
import uuid
from datetime import datetime


def _clean_tags(tags):
    if tags is None:
        return tags
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _check_finite(value, path="data"):
    """NaN и Infinity не являются JSON и ломают сравнение версий"""
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Non-finite number at {path}")
    if isinstance(value, dict):
        for key, item in value.items():
            _check_finite(item, f"{path}.{key}")
    elif isinstance(value, list):
        for position, item in enumerate(value):
            _check_finite(item, f"{path}[{position}]")
    return value


class ResumeCreate(BaseModel):
    """Схема для создания резюме"""
    name: Optional[str] = Field(None, max_length=255)
    data: Optional[Dict[str, Any]] = None
    template: Optional[str] = Field(None, min_length=1, max_length=50)
    tags: Optional[List[str]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return v.strip() if v else v

    @field_validator('data')
    @classmethod
    def validate_data(cls, v):
        return _check_finite(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class ResumeUpdate(BaseModel):
    """Схема для обновления резюме"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    data: Optional[Dict[str, Any]] = None
    template: Optional[str] = Field(None, min_length=1, max_length=50)
    is_public: Optional[bool] = None
    tags: Optional[List[str]] = None
    # True - ручное сохранение, строка - собственная подпись версии
    create_version: Optional[Union[bool, str]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip() if v else v

    @field_validator('data')
    @classmethod
    def validate_data(cls, v):
        return _check_finite(v)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class TemplateSettings(BaseModel):
    """Настройки оформления шаблона; допускаются дополнительные ключи"""
    font_family: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    font_size: Optional[str] = None
    spacing: Optional[str] = None
    show_photo: Optional[bool] = None
    layout: Optional[Literal["standard", "compact", "expanded"]] = None

    model_config = ConfigDict(extra="allow")


class TemplateSettingsResponse(BaseModel):
    template_settings: Dict[str, Any]


class ResumeStatsResponse(BaseModel):
    view_count: int
    download_count: int
    last_viewed: Optional[datetime] = None
    last_downloaded: Optional[datetime] = None


class ResumeSummaryResponse(BaseModel):
    """Краткие данные резюме для списка"""
    uuid: uuid.UUID
    name: str
    last_modified: datetime
    template: str
    is_public: bool
    slug: Optional[str] = None
    created_at: datetime
    stats: ResumeStatsResponse
    tags: List[str]
    template_settings: Dict[str, Any]


class ResumeResponse(ResumeSummaryResponse):
    """Полные данные резюме"""
    owner_id: uuid.UUID
    data: Dict[str, Any]
    version_count: int
    revision: int


class PaginationResponse(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ResumeListResponse(BaseModel):
    """Схема для списка резюме"""
    resumes: List[ResumeSummaryResponse]
    pagination: PaginationResponse


class PublicResumeResponse(BaseModel):
    """Публичное представление резюме"""
    name: str
    data: Dict[str, Any]
    template: str
    template_settings: Dict[str, Any]
    created_at: datetime
    last_modified: datetime


class VersionInfoResponse(BaseModel):
    """Метаданные версии; index действителен только в рамках запроса"""
    index: int
    created_at: datetime
    notes: str


class VersionListResponse(BaseModel):
    versions: List[VersionInfoResponse]


class VersionResponse(BaseModel):
    """Схема для ответа с данными версии"""
    index: int
    data: Dict[str, Any]
    created_at: datetime
    notes: str


class PopularTemplateResponse(BaseModel):
    template: str
    count: int
    downloads: int
    views: int


class PopularTemplatesResponse(BaseModel):
    popular_templates: List[PopularTemplateResponse]


class ResumeAnalyticsResponse(ResumeStatsResponse):
    """Аналитика одного резюме"""
    uuid: uuid.UUID


class MostViewedResume(BaseModel):
    uuid: uuid.UUID
    name: str
    views: int


class MostDownloadedResume(BaseModel):
    uuid: uuid.UUID
    name: str
    downloads: int


class UserAnalyticsResponse(BaseModel):
    """Сводная аналитика по резюме пользователя"""
    total_resumes: int
    total_views: int
    total_downloads: int
    most_viewed_resume: Optional[MostViewedResume] = None
    most_downloaded_resume: Optional[MostDownloadedResume] = None
