import logging
import uuid
from typing import Optional

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.db.models.user import User as UserModel
from app.domains.identity.entities import User, normalize_email

logger = logging.getLogger(__name__)


class UserRepository:
    """Хранилище владельцев резюме"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        db_user = UserModel(
            uuid=user.uuid,
            email=user.email,
            name=user.name,
            password_hash=user.password_hash,
            is_active=user.is_active
        )
        self.session.add(db_user)

        try:
            await self.session.commit()
        except IntegrityError:
            # гонка двух регистраций с одним email
            await self.session.rollback()
            logger.warning("Duplicate registration for %s", user.email)
            raise ValidationError("Email already registered")

        await self.session.refresh(db_user)
        return self._to_domain(db_user)

    async def get_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        return await self._first(UserModel.uuid == user_uuid)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._first(UserModel.email == normalize_email(email))

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(exists().where(UserModel.email == normalize_email(email)))
        )
        return bool(result.scalar())

    async def _first(self, condition) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(condition))
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None

    def _to_domain(self, db_user: UserModel) -> User:
        return User(
            uuid=db_user.uuid,
            email=db_user.email,
            name=db_user.name,
            password_hash=db_user.password_hash,
            is_active=db_user.is_active,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at
        )
