from app.domains.resumes.entities import Resume, ResumeStats, generate_slug
from app.domains.resumes.versioning import (
    MAX_VERSIONS, VersionSnapshot, payloads_equal, resolve_note
)

__all__ = [
    "Resume", "ResumeStats", "generate_slug",
    "MAX_VERSIONS", "VersionSnapshot", "payloads_equal", "resolve_note"
]
