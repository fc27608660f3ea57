import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ConflictError, NotFoundError
from app.db.models.resume import Resume as ResumeModel, ResumeTag as ResumeTagModel
from app.domains.resumes.entities import Resume, ResumeStats
from app.domains.resumes.versioning import VersionSnapshot

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "last_modified": ResumeModel.last_modified,
    "created_at": ResumeModel.created_at,
    "name": ResumeModel.name,
    "template": ResumeModel.template,
}

COUNTER_FIELDS = {
    "views": ResumeModel.view_count,
    "downloads": ResumeModel.download_count,
}


class ResumeRepository:
    """Репозиторий для работы с резюме и их историей версий"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, resume: Resume) -> Resume:
        """Создание нового резюме"""
        db_resume = ResumeModel(
            uuid=resume.uuid,
            owner_id=resume.owner_id,
            name=resume.name,
            data=resume.data,
            versions=self._versions_to_json(resume),
            last_modified=resume.last_modified,
            is_public=resume.is_public,
            slug=resume.slug,
            template=resume.template,
            template_settings=resume.template_settings,
            revision=resume.revision,
            created_at=resume.created_at,
            tags=[ResumeTagModel(tag=tag) for tag in resume.tags]
        )

        self.session.add(db_resume)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Resume could not be created")

        return await self.get_by_uuid(resume.uuid)

    async def get_by_uuid(self, resume_uuid: uuid.UUID, owner_id: Optional[uuid.UUID] = None) -> Optional[Resume]:
        """Получение резюме по UUID (с фильтром по владельцу)"""
        query = select(ResumeModel).options(selectinload(ResumeModel.tags)).where(ResumeModel.uuid == resume_uuid)

        if owner_id is not None:
            query = query.where(ResumeModel.owner_id == owner_id)

        result = await self.session.execute(query.execution_options(populate_existing=True))
        db_resume = result.scalar_one_or_none()
        return self._to_domain(db_resume) if db_resume else None

    async def get_public_by_slug(self, slug: str) -> Optional[Resume]:
        """Получение опубликованного резюме по slug"""
        result = await self.session.execute(
            select(ResumeModel)
            .options(selectinload(ResumeModel.tags))
            .where(and_(ResumeModel.slug == slug, ResumeModel.is_public.is_(True)))
            .execution_options(populate_existing=True)
        )
        db_resume = result.scalar_one_or_none()
        return self._to_domain(db_resume) if db_resume else None

    async def get_by_owner(
        self,
        owner_id: uuid.UUID,
        limit: int = 10,
        offset: int = 0,
        sort_by: str = "last_modified",
        sort_order: str = "desc",
        template: Optional[str] = None,
        is_public: Optional[bool] = None,
        tags: Optional[List[str]] = None
    ) -> List[Resume]:
        """Получение резюме владельца с фильтрами, сортировкой и пагинацией"""
        column = SORTABLE_FIELDS.get(sort_by, ResumeModel.last_modified)
        ordering = column.asc() if sort_order == "asc" else column.desc()

        query = (
            select(ResumeModel)
            .options(selectinload(ResumeModel.tags))
            .where(*self._owner_filters(owner_id, template, is_public, tags))
            .order_by(ordering, ResumeModel.uuid)
            .offset(offset)
            .limit(limit)
        )

        result = await self.session.execute(query)
        return [self._to_domain(db_resume) for db_resume in result.scalars().all()]

    async def count_by_owner(
        self,
        owner_id: uuid.UUID,
        template: Optional[str] = None,
        is_public: Optional[bool] = None,
        tags: Optional[List[str]] = None
    ) -> int:
        """Подсчет резюме владельца с теми же фильтрами"""
        result = await self.session.execute(
            select(func.count(ResumeModel.uuid))
            .where(*self._owner_filters(owner_id, template, is_public, tags))
        )
        return result.scalar()

    async def commit(self, resume: Resume) -> Resume:
        """
        Атомарная запись резюме вместе с историей версий.

        Запись проходит только если ревизия в БД совпадает с ревизией
        загруженной сущности, иначе ConflictError и состояние в БД не меняется.
        """
        expected_revision = resume.revision
        stmt = (
            update(ResumeModel)
            .where(
                and_(
                    ResumeModel.uuid == resume.uuid,
                    ResumeModel.revision == expected_revision
                )
            )
            .values(
                name=resume.name,
                data=resume.data,
                versions=self._versions_to_json(resume),
                last_modified=resume.last_modified,
                is_public=resume.is_public,
                slug=resume.slug,
                template=resume.template,
                template_settings=resume.template_settings,
                revision=expected_revision + 1
            )
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)

            if result.rowcount == 0:
                await self.session.rollback()
                if await self.exists(resume.uuid):
                    logger.warning("Revision conflict on resume %s (expected %s)", resume.uuid, expected_revision)
                    raise ConflictError("Resume was modified by another request")
                raise NotFoundError("Resume not found")

            await self.session.execute(
                delete(ResumeTagModel)
                .where(ResumeTagModel.resume_id == resume.uuid)
                .execution_options(synchronize_session=False)
            )
            if resume.tags:
                await self.session.execute(
                    insert(ResumeTagModel),
                    [{"resume_id": resume.uuid, "tag": tag} for tag in resume.tags]
                )

            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Resume slug is already in use")

        resume.revision = expected_revision + 1
        return resume

    async def delete(self, resume_uuid: uuid.UUID, owner_id: uuid.UUID) -> bool:
        """Удаление резюме вместе со всей историей"""
        owned = and_(ResumeModel.uuid == resume_uuid, ResumeModel.owner_id == owner_id)

        await self.session.execute(
            delete(ResumeTagModel)
            .where(ResumeTagModel.resume_id.in_(select(ResumeModel.uuid).where(owned)))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            delete(ResumeModel).where(owned).execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            await self.session.rollback()
            return False

        await self.session.commit()
        return True

    async def exists(self, resume_uuid: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(ResumeModel.uuid).where(ResumeModel.uuid == resume_uuid)
        )
        return result.scalar_one_or_none() is not None

    async def record_view(self, resume_uuid: uuid.UUID, viewed_at: datetime) -> None:
        """Атомарное увеличение счетчика просмотров"""
        await self.session.execute(
            update(ResumeModel)
            .where(ResumeModel.uuid == resume_uuid)
            .values(view_count=ResumeModel.view_count + 1, last_viewed=viewed_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

    async def record_download(self, resume_uuid: uuid.UUID, downloaded_at: datetime) -> None:
        """Атомарное увеличение счетчика скачиваний"""
        await self.session.execute(
            update(ResumeModel)
            .where(ResumeModel.uuid == resume_uuid)
            .values(download_count=ResumeModel.download_count + 1, last_downloaded=downloaded_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()

    async def get_popular_templates(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Популярность шаблонов: число резюме, скачиваний и просмотров"""
        count = func.count(ResumeModel.uuid).label("count")
        result = await self.session.execute(
            select(
                ResumeModel.template,
                count,
                func.coalesce(func.sum(ResumeModel.download_count), 0).label("downloads"),
                func.coalesce(func.sum(ResumeModel.view_count), 0).label("views")
            )
            .group_by(ResumeModel.template)
            .order_by(count.desc(), ResumeModel.template)
            .limit(limit)
        )

        return [
            {"template": row.template, "count": row.count, "downloads": row.downloads, "views": row.views}
            for row in result.all()
        ]

    async def get_owner_totals(self, owner_id: uuid.UUID) -> Dict[str, int]:
        """Суммарные показатели всех резюме владельца"""
        result = await self.session.execute(
            select(
                func.count(ResumeModel.uuid).label("total_resumes"),
                func.coalesce(func.sum(ResumeModel.view_count), 0).label("total_views"),
                func.coalesce(func.sum(ResumeModel.download_count), 0).label("total_downloads")
            )
            .where(ResumeModel.owner_id == owner_id)
        )
        row = result.one()

        return {
            "total_resumes": row.total_resumes,
            "total_views": row.total_views,
            "total_downloads": row.total_downloads
        }

    async def get_top_by_counter(self, owner_id: uuid.UUID, counter: str) -> Optional[Dict[str, Any]]:
        """Резюме владельца с наибольшим счетчиком; None если счетчики нулевые"""
        column = COUNTER_FIELDS[counter]
        result = await self.session.execute(
            select(ResumeModel.uuid, ResumeModel.name, column.label("count"))
            .where(ResumeModel.owner_id == owner_id, column > 0)
            .order_by(column.desc(), ResumeModel.last_modified.desc(), ResumeModel.uuid)
            .limit(1)
        )
        row = result.first()

        if row is None:
            return None
        return {"uuid": row.uuid, "name": row.name, counter: row.count}

    def _owner_filters(
        self,
        owner_id: uuid.UUID,
        template: Optional[str],
        is_public: Optional[bool],
        tags: Optional[List[str]]
    ) -> list:
        conditions = [ResumeModel.owner_id == owner_id]

        if template:
            conditions.append(ResumeModel.template == template)

        if is_public is not None:
            conditions.append(ResumeModel.is_public.is_(is_public))

        if tags:
            conditions.append(
                ResumeModel.uuid.in_(
                    select(ResumeTagModel.resume_id).where(ResumeTagModel.tag.in_(tags))
                )
            )

        return conditions

    def _versions_to_json(self, resume: Resume) -> List[Dict[str, Any]]:
        return [version.to_dict() for version in resume.versions]

    def _to_domain(self, db_resume: ResumeModel) -> Resume:
        """Преобразование модели БД в доменную сущность"""
        return Resume(
            uuid=db_resume.uuid,
            owner_id=db_resume.owner_id,
            data=db_resume.data,
            name=db_resume.name,
            versions=[VersionSnapshot.from_dict(raw) for raw in (db_resume.versions or [])],
            last_modified=db_resume.last_modified,
            is_public=db_resume.is_public,
            slug=db_resume.slug,
            template=db_resume.template,
            template_settings=dict(db_resume.template_settings or {}),
            stats=ResumeStats(
                view_count=db_resume.view_count,
                download_count=db_resume.download_count,
                last_viewed=db_resume.last_viewed,
                last_downloaded=db_resume.last_downloaded
            ),
            tags=sorted(tag.tag for tag in db_resume.tags),
            revision=db_resume.revision,
            created_at=db_resume.created_at
        )
