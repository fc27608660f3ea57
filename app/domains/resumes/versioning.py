"""
История версий резюме.

Резюме хранит ограниченный список снимков (``MAX_VERSIONS``), упорядоченный
от старого к новому. При переполнении вытесняется самый старый снимок (FIFO).
Снимок всегда содержит независимую глубокую копию данных, поэтому последующие
изменения живого документа не затрагивают историю.

Индекс версии - это позиция в списке. После вытеснения все индексы сдвигаются
на единицу, поэтому индекс действителен только в пределах одного запроса.
"""

import copy
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_VERSIONS = 10

INITIAL_VERSION_NOTE = "Initial version"
AUTO_SAVE_NOTE = "Auto-saved version"
MANUAL_SAVE_NOTE = "Manual save"
PRE_RESTORE_NOTE = "Auto-saved before version restore"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clone_payload(payload: Any) -> Any:
    """Глубокая копия данных резюме"""
    return copy.deepcopy(payload)


def payloads_equal(left: Any, right: Any) -> bool:
    """
    Структурное сравнение данных резюме.

    Словари сравниваются по набору ключей и значениям (порядок вставки не
    важен), списки - поэлементно с учетом порядка. Булевы значения не
    считаются равными числам.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if isinstance(left, dict):
        if not isinstance(right, dict) or left.keys() != right.keys():
            return False
        return all(payloads_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)):
        if not isinstance(right, (list, tuple)) or len(left) != len(right):
            return False
        return all(payloads_equal(a, b) for a, b in zip(left, right))

    if isinstance(right, (dict, list, tuple)):
        return False

    return left == right


def resolve_note(note: Union[bool, str, None]) -> str:
    """Подпись снимка: True -> ручное сохранение, непустая строка как есть"""
    if note is True:
        return MANUAL_SAVE_NOTE
    if isinstance(note, str) and note:
        return note
    return AUTO_SAVE_NOTE


def is_valid_index(index: Any, size: int) -> bool:
    if isinstance(index, bool) or not isinstance(index, int):
        return False
    return 0 <= index < size


@dataclass(frozen=True)
class VersionSnapshot:
    """Снимок данных резюме на момент сохранения"""
    data: Any
    created_at: datetime
    notes: str

    @classmethod
    def capture(cls, payload: Any, notes: str, now: Optional[datetime] = None) -> "VersionSnapshot":
        """Создание снимка с глубокой копией данных"""
        return cls(data=clone_payload(payload), created_at=now or utcnow(), notes=notes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": clone_payload(self.data),
            "created_at": self.created_at.isoformat(),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "VersionSnapshot":
        created_at = raw.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        if not isinstance(created_at, datetime):
            raise ValidationError("Stored version has no valid created_at")
        return cls(
            data=raw.get("data"),
            created_at=created_at,
            notes=raw.get("notes") or "",
        )


def append_snapshot(versions: List[VersionSnapshot], snapshot: VersionSnapshot) -> Optional[VersionSnapshot]:
    """
    Добавление снимка в конец истории.

    Если после добавления история превысит ``MAX_VERSIONS``, сначала
    вытесняется самый старый снимок. Возвращает вытесненный снимок или None.
    """
    evicted = None
    if len(versions) >= MAX_VERSIONS:
        evicted = versions.pop(0)
        logger.debug("Evicted version created at %s", evicted.created_at.isoformat())

    versions.append(snapshot)
    return evicted
