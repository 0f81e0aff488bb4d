# src/rewise/models/comment.py
"""Append-only comments on lessons."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewise.db.session import Base
from rewise.db.time import utcnow
from rewise.utils.ids import new_id


class Comment(Base):
    """Comment with a snapshot of the author's display name."""

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    lesson_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    author_email: Mapped[str] = mapped_column(String(320), nullable=False)
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
