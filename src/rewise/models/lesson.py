# src/rewise/models/lesson.py
"""SQLAlchemy models for lessons and their like sets."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rewise.db.session import Base
from rewise.db.time import utcnow
from rewise.utils.ids import new_id

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"

ACCESS_FREE = "free"
ACCESS_PREMIUM = "premium"


class Lesson(Base):
    """A lesson: the platform's core authored content unit."""

    __tablename__ = "lesson"
    __table_args__ = (
        Index("ix_lesson_visibility_created_at", "visibility", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    emotional_tag: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default=VISIBILITY_PUBLIC)
    access_level: Mapped[str] = mapped_column(String(16), nullable=False, default=ACCESS_FREE)

    # Owner reference by email; lessons are not removed with their creator.
    creator_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)

    # Always equal to len(likes); maintained in the same transaction as the rows.
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reviewed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=utcnow,
    )

    likes: Mapped[list[LessonLike]] = relationship(
        "LessonLike",
        back_populates="lesson",
        cascade="all, delete-orphan",
    )


class LessonLike(Base):
    """Membership of one user email in a lesson's like set."""

    __tablename__ = "lesson_like"

    lesson_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("lesson.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Composite primary key prevents duplicate likes from the same user.
    user_email: Mapped[str] = mapped_column(String(320), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    lesson: Mapped[Lesson] = relationship("Lesson", back_populates="likes")
