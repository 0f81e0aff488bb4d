"""initial schema

Revision ID: 5c1f0a2d9e47
Revises:
Create Date: 2026-10-18 09:12:40.512331

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f0a2d9e47"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, lessons, likes, favorites, reports and comments."""
    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("external_subject_id", sa.String(length=128), nullable=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("photo", sa.Text(), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("is_premium", sa.Boolean(), nullable=False),
        sa.Column("premium_since", sa.DateTime(timezone=True), nullable=True),
        sa.Column("favorite_lesson_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_account_email", "user_account", ["email"], unique=True)

    op.create_table(
        "lesson",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("emotional_tag", sa.String(length=64), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.Column("visibility", sa.String(length=16), nullable=False),
        sa.Column("access_level", sa.String(length=16), nullable=False),
        sa.Column("creator_email", sa.String(length=320), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("reviewed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lesson_category", "lesson", ["category"])
    op.create_index("ix_lesson_emotional_tag", "lesson", ["emotional_tag"])
    op.create_index("ix_lesson_creator_email", "lesson", ["creator_email"])
    op.create_index(
        "ix_lesson_visibility_created_at",
        "lesson",
        ["visibility", "created_at"],
    )

    op.create_table(
        "lesson_like",
        sa.Column("lesson_id", sa.String(length=32), nullable=False),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["lesson_id"], ["lesson.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("lesson_id", "user_email"),
    )

    op.create_table(
        "favorite",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("user_email", sa.String(length=320), nullable=False),
        sa.Column("lesson_id", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_email", "lesson_id", name="uq_favorite_user_lesson"),
    )
    op.create_index("ix_favorite_user_email", "favorite", ["user_email"])
    op.create_index("ix_favorite_lesson_id", "favorite", ["lesson_id"])

    op.create_table(
        "report",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("reporter_email", sa.String(length=320), nullable=False),
        sa.Column("lesson_id", sa.String(length=32), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_report_lesson_id", "report", ["lesson_id"])

    op.create_table(
        "comment",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("lesson_id", sa.String(length=32), nullable=False),
        sa.Column("author_email", sa.String(length=320), nullable=False),
        sa.Column("author_name", sa.Text(), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comment_lesson_id", "comment", ["lesson_id"])


def downgrade() -> None:
    """Drop every table created by ``upgrade``."""
    op.drop_index("ix_comment_lesson_id", table_name="comment")
    op.drop_table("comment")
    op.drop_index("ix_report_lesson_id", table_name="report")
    op.drop_table("report")
    op.drop_index("ix_favorite_lesson_id", table_name="favorite")
    op.drop_index("ix_favorite_user_email", table_name="favorite")
    op.drop_table("favorite")
    op.drop_table("lesson_like")
    op.drop_index("ix_lesson_visibility_created_at", table_name="lesson")
    op.drop_index("ix_lesson_creator_email", table_name="lesson")
    op.drop_index("ix_lesson_emotional_tag", table_name="lesson")
    op.drop_index("ix_lesson_category", table_name="lesson")
    op.drop_table("lesson")
    op.drop_index("ix_user_account_email", table_name="user_account")
    op.drop_table("user_account")
