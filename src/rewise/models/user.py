# src/rewise/models/user.py
"""SQLAlchemy model for platform users (caller identities)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rewise.db.session import Base
from rewise.db.time import utcnow
from rewise.utils.ids import new_id

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(Base):
    """Local profile of an identity verified by the external provider.

    ``email`` is the stable key shared with the identity provider and the
    payment provider; at most one row exists per email.
    """

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    external_subject_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    name: Mapped[str] = mapped_column(Text, nullable=False, default="Anonymous")
    photo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    premium_since: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Denormalized mirror of the favorite relation rows (lesson ids as strings).
    favorite_lesson_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @property
    def is_admin(self) -> bool:
        """Return True when the user holds the admin role."""
        return self.role == ROLE_ADMIN
