# src/rewise/models/favorite.py
"""Favorite relation between a user and a lesson."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from rewise.db.session import Base
from rewise.db.time import utcnow
from rewise.utils.ids import new_id


class Favorite(Base):
    """Source-of-truth row for a saved lesson.

    ``lesson_id`` is deliberately not a foreign key: favorites of deleted
    lessons stay in the table and are filtered out by the listing join.
    """

    __tablename__ = "favorite"
    __table_args__ = (
        UniqueConstraint("user_email", "lesson_id", name="uq_favorite_user_lesson"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    lesson_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
