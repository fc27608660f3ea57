"""Initial schema: users, resumes, resume tags

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "resumes",
        sa.Column("uuid", sa.Uuid(), primary_key=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.uuid", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("versions", sa.JSON(), nullable=False),
        sa.Column("last_modified", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True, unique=True),
        sa.Column("template", sa.String(length=50), nullable=False),
        sa.Column("template_settings", sa.JSON(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("download_count", sa.Integer(), nullable=False),
        sa.Column("last_viewed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_downloaded", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revision", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_resumes_owner_id", "resumes", ["owner_id"])
    op.create_index("ix_resumes_template", "resumes", ["template"])
    op.create_index("ix_resumes_owner_last_modified", "resumes", ["owner_id", "last_modified"])
    op.create_index("ix_resumes_slug_public", "resumes", ["slug", "is_public"])

    op.create_table(
        "resume_tags",
        sa.Column("resume_id", sa.Uuid(), sa.ForeignKey("resumes.uuid", ondelete="CASCADE"), primary_key=True),
        sa.Column("tag", sa.String(length=100), primary_key=True),
    )
    op.create_index("ix_resume_tags_tag", "resume_tags", ["tag"])


def downgrade() -> None:
    op.drop_index("ix_resume_tags_tag", table_name="resume_tags")
    op.drop_table("resume_tags")
    op.drop_index("ix_resumes_slug_public", table_name="resumes")
    op.drop_index("ix_resumes_owner_last_modified", table_name="resumes")
    op.drop_index("ix_resumes_template", table_name="resumes")
    op.drop_index("ix_resumes_owner_id", table_name="resumes")
    op.drop_table("resumes")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
