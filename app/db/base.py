from uuid import uuid4

from sqlalchemy import Column, DateTime, UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Базовый класс для моделей
Base = declarative_base()


class BaseModel(Base):
    """Общие колонки: UUID первичный ключ и метки времени"""
    __abstract__ = True

    uuid = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
