# src/rewise/models/report.py
"""Reports filed against lessons."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewise.db.session import Base
from rewise.db.time import utcnow
from rewise.utils.ids import new_id


class Report(Base):
    """A single report; many may reference the same lesson.

    The lesson reference survives lesson deletion (no cascade).
    """

    __tablename__ = "report"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    reporter_email: Mapped[str] = mapped_column(String(320), nullable=False)
    lesson_id: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
