from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, UUID, JSON, Index
from sqlalchemy.orm import relationship

from app.db.base import Base, BaseModel


class Resume(BaseModel):
    __tablename__ = "resumes"
    
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False, default="My Resume")
    data = Column(JSON, nullable=False)
    # История версий хранится вместе с документом: запись атомарна
    versions = Column(JSON, nullable=False, default=list)
    last_modified = Column(DateTime(timezone=True), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    slug = Column(String(255), unique=True, nullable=True)
    template = Column(String(50), nullable=False, default="modern", index=True)
    template_settings = Column(JSON, nullable=False, default=dict)
    view_count = Column(Integer, nullable=False, default=0)
    download_count = Column(Integer, nullable=False, default=0)
    last_viewed = Column(DateTime(timezone=True), nullable=True)
    last_downloaded = Column(DateTime(timezone=True), nullable=True)
    # Счетчик для оптимистичной блокировки
    revision = Column(Integer, nullable=False, default=1)
    
    # Relationships
    owner = relationship("User", back_populates="resumes")
    tags = relationship("ResumeTag", back_populates="resume", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_resumes_owner_last_modified", "owner_id", "last_modified"),
        Index("ix_resumes_slug_public", "slug", "is_public"),
    )


class ResumeTag(Base):
    __tablename__ = "resume_tags"
    
    resume_id = Column(UUID(as_uuid=True), ForeignKey("resumes.uuid", ondelete="CASCADE"), primary_key=True)
    tag = Column(String(100), primary_key=True, index=True)
    
    # Relationships
    resume = relationship("Resume", back_populates="tags")
