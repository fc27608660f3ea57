from app.db.base import Base
from app.db.models.user import User
from app.db.models.resume import Resume, ResumeTag

__all__ = [
    "Base",
    "User",
    "Resume",
    "ResumeTag"
]
