import random
import re
import string
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from app.core.exceptions import NotFoundError
from app.domains.resumes.versioning import (
    INITIAL_VERSION_NOTE, PRE_RESTORE_NOTE, VersionSnapshot,
    append_snapshot, clone_payload, is_valid_index, payloads_equal,
    resolve_note, utcnow
)

DEFAULT_RESUME_NAME = "My Resume"
DEFAULT_TEMPLATE = "modern"
DEFAULT_LAYOUT = "standard"

SLUG_SUFFIX_LENGTH = 6
_SLUG_ALPHABET = string.ascii_lowercase + string.digits


def generate_slug(name: str) -> str:
    """Генерация публичного идентификатора из названия резюме"""
    base = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    suffix = "".join(random.choices(_SLUG_ALPHABET, k=SLUG_SUFFIX_LENGTH))
    return f"{base}-{suffix}" if base else suffix


@dataclass
class ResumeStats:
    """Счетчики просмотров и скачиваний"""
    view_count: int = 0
    download_count: int = 0
    last_viewed: Optional[datetime] = None
    last_downloaded: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "view_count": self.view_count,
            "download_count": self.download_count,
            "last_viewed": self.last_viewed,
            "last_downloaded": self.last_downloaded,
        }


class Resume:
    """Сущность резюме с ограниченной историей версий"""

    def __init__(
        self,
        uuid: uuid.UUID,
        owner_id: uuid.UUID,
        data: Any,
        name: str = DEFAULT_RESUME_NAME,
        versions: Optional[List[VersionSnapshot]] = None,
        last_modified: Optional[datetime] = None,
        is_public: bool = False,
        slug: Optional[str] = None,
        template: str = DEFAULT_TEMPLATE,
        template_settings: Optional[Dict[str, Any]] = None,
        stats: Optional[ResumeStats] = None,
        tags: Optional[List[str]] = None,
        revision: int = 1,
        created_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.owner_id = owner_id
        self.data = data
        self.name = name
        self.versions = versions if versions is not None else []
        self.last_modified = last_modified or utcnow()
        self.is_public = is_public
        self.slug = slug
        self.template = template
        self.template_settings = template_settings if template_settings is not None else {"layout": DEFAULT_LAYOUT}
        self.stats = stats or ResumeStats()
        self.tags = tags if tags is not None else []
        self.revision = revision
        self.created_at = created_at or utcnow()

    @classmethod
    def create_resume(
        cls,
        owner_id: uuid.UUID,
        data: Any,
        name: Optional[str] = None,
        template: Optional[str] = None,
        tags: Optional[List[str]] = None,
        now: Optional[datetime] = None
    ) -> "Resume":
        """Создание нового резюме с начальной версией"""
        now = now or utcnow()
        return cls(
            uuid=uuid.uuid4(),
            owner_id=owner_id,
            data=data,
            name=name or DEFAULT_RESUME_NAME,
            versions=[VersionSnapshot.capture(data, INITIAL_VERSION_NOTE, now)],
            last_modified=now,
            template=template or DEFAULT_TEMPLATE,
            tags=tags,
            created_at=now
        )

    def save(
        self,
        new_data: Any,
        note: Union[bool, str, None] = None,
        now: Optional[datetime] = None
    ) -> "Resume":
        """
        Сохранение новых данных резюме.

        Снимок добавляется только если данные отличаются от последней версии.
        Дата изменения обновляется всегда.
        """
        now = now or utcnow()

        latest = self.versions[-1] if self.versions else None
        if latest is None or not payloads_equal(new_data, latest.data):
            append_snapshot(self.versions, VersionSnapshot.capture(new_data, resolve_note(note), now))

        self.data = new_data
        self.last_modified = now
        return self

    def touch(self, now: Optional[datetime] = None) -> None:
        """Обновление даты изменения без записи версии"""
        self.last_modified = now or utcnow()

    def list_versions(self) -> List[Dict[str, Any]]:
        """Метаданные версий без данных, от старой к новой"""
        return [
            {"index": index, "created_at": version.created_at, "notes": version.notes}
            for index, version in enumerate(self.versions)
        ]

    def get_version(self, index: Any) -> VersionSnapshot:
        """Получение версии по индексу"""
        if not is_valid_index(index, len(self.versions)):
            raise NotFoundError("Version not found")
        return self.versions[index]

    def restore_version(self, index: Any, now: Optional[datetime] = None) -> "Resume":
        """
        Восстановление данных из версии.

        Перед перезаписью текущие данные всегда сохраняются отдельным снимком,
        даже если они совпадают с восстанавливаемой версией.
        """
        target = self.get_version(index)
        now = now or utcnow()

        append_snapshot(self.versions, VersionSnapshot.capture(self.data, PRE_RESTORE_NOTE, now))

        self.data = clone_payload(target.data)
        self.last_modified = now
        return self

    def update_details(
        self,
        name: Optional[str] = None,
        template: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> None:
        """Обновление названия, шаблона и тегов"""
        if name is not None:
            self.name = name
        if template is not None:
            self.template = template
        if tags is not None:
            self.tags = list(tags)

    def set_public(self, is_public: bool) -> None:
        """Публикация резюме; при первой публикации создается slug"""
        self.is_public = is_public
        if is_public and not self.slug:
            self.slug = generate_slug(self.name)

    def update_template_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Слияние новых настроек шаблона с текущими"""
        self.template_settings = {**self.template_settings, **settings}
        return self.template_settings

    def is_owned_by(self, user_id: Optional[uuid.UUID]) -> bool:
        return user_id is not None and user_id == self.owner_id

    def __eq__(self, other) -> bool:
        if not isinstance(other, Resume):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Resume(uuid={self.uuid}, name={self.name}, versions={len(self.versions)})"
