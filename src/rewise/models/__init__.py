# src/rewise/models/__init__.py
"""SQLAlchemy models for the Rewise application."""

from .comment import Comment
from .favorite import Favorite
from .lesson import Lesson, LessonLike
from .report import Report
from .user import User

__all__ = [
    "Comment",
    "Favorite",
    "Lesson", "LessonLike",
    "Report",
    "User",
]
