import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError
from app.db.repositories.resume_repository import ResumeRepository
from app.domains.resumes.entities import Resume, ResumeStats
from app.domains.resumes.schemas import ResumeCreate, ResumeUpdate
from app.domains.resumes.versioning import VersionSnapshot, utcnow

logger = logging.getLogger(__name__)


class ResumeService:
    """Сервис для работы с резюме"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.resume_repository = ResumeRepository(session)

    async def list_resumes(
        self,
        owner_id: uuid.UUID,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "last_modified",
        sort_order: str = "desc",
        template: Optional[str] = None,
        is_public: Optional[bool] = None,
        tags: Optional[List[str]] = None
    ) -> Tuple[List[Resume], Dict[str, int]]:
        """Получение резюме пользователя с пагинацией"""
        total = await self.resume_repository.count_by_owner(owner_id, template, is_public, tags)
        resumes = await self.resume_repository.get_by_owner(
            owner_id,
            limit=limit,
            offset=(page - 1) * limit,
            sort_by=sort_by,
            sort_order=sort_order,
            template=template,
            is_public=is_public,
            tags=tags
        )

        pagination = {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit) if limit else 0
        }
        return resumes, pagination

    async def get_resume(self, owner_id: uuid.UUID, resume_uuid: uuid.UUID) -> Resume:
        """Получение резюме владельца"""
        resume = await self.resume_repository.get_by_uuid(resume_uuid, owner_id=owner_id)

        if not resume:
            raise NotFoundError("Resume not found")

        return resume

    async def create_resume(self, owner_id: uuid.UUID, resume_data: ResumeCreate) -> Resume:
        """Создание нового резюме с начальной версией"""
        if resume_data.data is None:
            raise ValidationError("Resume data is required")

        resume = Resume.create_resume(
            owner_id=owner_id,
            data=resume_data.data,
            name=resume_data.name,
            template=resume_data.template,
            tags=resume_data.tags
        )

        created = await self.resume_repository.create(resume)
        logger.info("Created resume %s for user %s", created.uuid, owner_id)
        return created

    async def update_resume(
        self,
        owner_id: uuid.UUID,
        resume_uuid: uuid.UUID,
        update_data: ResumeUpdate
    ) -> Resume:
        """
        Обновление резюме.

        Новые данные проходят через историю версий: снимок пишется только при
        реальном изменении. Без данных обновляется лишь дата изменения.
        """
        resume = await self.get_resume(owner_id, resume_uuid)

        resume.update_details(
            name=update_data.name,
            template=update_data.template,
            tags=update_data.tags
        )

        if update_data.is_public is not None:
            resume.set_public(update_data.is_public)

        if update_data.data is not None:
            resume.save(update_data.data, note=update_data.create_version)
        else:
            resume.touch()

        return await self.resume_repository.commit(resume)

    async def delete_resume(self, owner_id: uuid.UUID, resume_uuid: uuid.UUID) -> None:
        """Удаление резюме вместе с историей версий"""
        deleted = await self.resume_repository.delete(resume_uuid, owner_id)

        if not deleted:
            raise NotFoundError("Resume not found")

        logger.info("Deleted resume %s", resume_uuid)

    async def list_versions(self, owner_id: uuid.UUID, resume_uuid: uuid.UUID) -> List[Dict[str, Any]]:
        """Метаданные версий резюме"""
        resume = await self.get_resume(owner_id, resume_uuid)
        return resume.list_versions()

    async def get_version(
        self,
        owner_id: uuid.UUID,
        resume_uuid: uuid.UUID,
        index: int
    ) -> VersionSnapshot:
        """Получение конкретной версии резюме"""
        resume = await self.get_resume(owner_id, resume_uuid)
        return resume.get_version(index)

    async def restore_version(
        self,
        owner_id: uuid.UUID,
        resume_uuid: uuid.UUID,
        index: int
    ) -> Resume:
        """Восстановление резюме из версии"""
        resume = await self.get_resume(owner_id, resume_uuid)
        resume.restore_version(index)

        committed = await self.resume_repository.commit(resume)
        logger.info("Restored resume %s to version %s", resume_uuid, index)
        return committed

    async def get_public_resume(self, slug: str) -> Resume:
        """Получение опубликованного резюме с учетом просмотра"""
        resume = await self.resume_repository.get_public_by_slug(slug)

        if not resume:
            raise NotFoundError("Resume not found")

        now = utcnow()
        await self.resume_repository.record_view(resume.uuid, now)
        resume.stats.view_count += 1
        resume.stats.last_viewed = now
        return resume

    async def record_download(self, resume_uuid: uuid.UUID, viewer_id: Optional[uuid.UUID] = None) -> None:
        """Учет скачивания: публичное резюме или резюме владельца"""
        resume = await self.resume_repository.get_by_uuid(resume_uuid)

        if not resume:
            raise NotFoundError("Resume not found")

        if not resume.is_public and not resume.is_owned_by(viewer_id):
            logger.warning("Download of private resume %s denied", resume_uuid)
            raise PermissionError("Access denied")

        await self.resume_repository.record_download(resume_uuid, utcnow())

    async def update_template_settings(
        self,
        owner_id: uuid.UUID,
        resume_uuid: uuid.UUID,
        settings: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Обновление настроек шаблона (без записи версии)"""
        resume = await self.get_resume(owner_id, resume_uuid)
        resume.update_template_settings(settings)

        committed = await self.resume_repository.commit(resume)
        return committed.template_settings

    async def get_popular_templates(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Самые используемые шаблоны"""
        return await self.resume_repository.get_popular_templates(limit)

    async def get_resume_analytics(self, owner_id: uuid.UUID, resume_uuid: uuid.UUID) -> ResumeStats:
        """Счетчики просмотров и скачиваний резюме владельца"""
        resume = await self.get_resume(owner_id, resume_uuid)
        return resume.stats

    async def get_user_analytics(self, owner_id: uuid.UUID) -> Dict[str, Any]:
        """
        Сводка по всем резюме пользователя.

        Самое просматриваемое и самое скачиваемое резюме присутствуют только
        при ненулевом счетчике.
        """
        analytics: Dict[str, Any] = await self.resume_repository.get_owner_totals(owner_id)

        most_viewed = await self.resume_repository.get_top_by_counter(owner_id, "views")
        if most_viewed:
            analytics["most_viewed_resume"] = most_viewed

        most_downloaded = await self.resume_repository.get_top_by_counter(owner_id, "downloads")
        if most_downloaded:
            analytics["most_downloaded_resume"] = most_downloaded

        return analytics
