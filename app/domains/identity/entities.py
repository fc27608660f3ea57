import uuid
from datetime import datetime, timezone
from typing import Optional

from app.core.security import get_password_hash, verify_password


def normalize_email(email: str) -> str:
    """Email хранится и ищется в нижнем регистре без пробелов"""
    return email.strip().lower()


class User:
    """Владелец резюме"""

    def __init__(
        self,
        uuid: uuid.UUID,
        email: str,
        password_hash: str,
        name: Optional[str] = None,
        is_active: bool = True,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        now = datetime.now(timezone.utc)
        self.uuid = uuid
        self.email = normalize_email(email)
        self.name = name
        self.password_hash = password_hash
        self.is_active = is_active
        self.created_at = created_at or now
        self.updated_at = updated_at or now

    @classmethod
    def create_user(cls, email: str, password: str, name: Optional[str] = None) -> "User":
        """Регистрация: пароль сразу хешируется"""
        return cls(
            uuid=uuid.uuid4(),
            email=email,
            name=name.strip() if name else None,
            password_hash=get_password_hash(password)
        )

    def authenticate(self, password: str) -> bool:
        return self.is_active and verify_password(password, self.password_hash)

    def token_claims(self) -> dict:
        """Данные пользователя, которые кладутся в JWT"""
        return {"sub": str(self.uuid), "email": self.email}

    def __eq__(self, other) -> bool:
        return isinstance(other, User) and self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"User(uuid={self.uuid}, email={self.email}, active={self.is_active})"
