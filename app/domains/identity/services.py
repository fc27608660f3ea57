import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.core.security import (
    create_access_token, create_refresh_token, verify_refresh_token, verify_token
)
from app.db.repositories.user_repository import UserRepository
from app.domains.identity.entities import User
from app.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Сервис для работы с идентификацией и аутентификацией пользователей"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)

    async def register_user(self, user_data: UserCreate) -> User:
        """Регистрация нового пользователя"""
        if await self.user_repository.email_exists(user_data.email):
            raise ValidationError("Email already registered")

        user = User.create_user(
            email=user_data.email,
            password=user_data.password,
            name=user_data.name
        )

        created = await self.user_repository.create(user)
        logger.info("Registered user %s", created.uuid)
        return created

    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        """Аутентификация пользователя"""
        user = await self.user_repository.get_by_email(login_data.email)

        if user is None or not user.authenticate(login_data.password):
            return None

        return user

    async def login_user(self, login_data: UserLogin) -> Optional[Tuple[str, str]]:
        """Вход пользователя: пара (access, refresh) токенов"""
        user = await self.authenticate_user(login_data)

        if not user:
            logger.info("Failed login attempt")
            return None

        token_data = user.token_claims()
        return create_access_token(data=token_data), create_refresh_token(data=token_data)

    async def refresh_access_token(self, refresh_token: str) -> Optional[str]:
        """Выпуск нового токена доступа по refresh токену"""
        payload = verify_refresh_token(refresh_token)
        if not payload:
            return None

        user = await self._get_active_user(payload.get("sub"))
        if not user:
            return None

        return create_access_token(data=user.token_claims())

    async def get_user_by_uuid(self, user_uuid: uuid.UUID) -> Optional[User]:
        """Получение пользователя по UUID"""
        return await self.user_repository.get_by_uuid(user_uuid)

    async def get_current_user_from_token(self, token: str) -> Optional[User]:
        """Получение текущего пользователя из JWT токена"""
        payload = verify_token(token)
        if not payload:
            return None

        return await self._get_active_user(payload.get("sub"), require_active=False)

    async def _get_active_user(self, subject: Optional[str], require_active: bool = True) -> Optional[User]:
        try:
            user_uuid = uuid.UUID(subject)
        except (TypeError, ValueError):
            return None

        user = await self.user_repository.get_by_uuid(user_uuid)
        if user is None or (require_active and not user.is_active):
            return None

        return user
