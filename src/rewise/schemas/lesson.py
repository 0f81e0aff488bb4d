"""Lesson-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel, Pagination

Visibility = Literal["public", "private"]
AccessLevel = Literal["free", "premium"]


class LessonCreate(CamelModel):
    """Schema for creating a new lesson."""

    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=20000)
    category: str = Field(..., min_length=1, max_length=64)
    emotional_tag: str = Field(..., min_length=1, max_length=64)
    image: str = Field("", max_length=2048)
    visibility: Visibility = "public"
    access_level: AccessLevel = "free"


class LessonUpdate(CamelModel):
    """Partial lesson update; absent fields are left untouched."""

    title: str | None = Field(None, min_length=1, max_length=200)
    body: str | None = Field(None, min_length=1, max_length=20000)
    category: str | None = Field(None, min_length=1, max_length=64)
    emotional_tag: str | None = Field(None, min_length=1, max_length=64)
    image: str | None = Field(None, max_length=2048)
    visibility: Visibility | None = None
    access_level: AccessLevel | None = None


class LessonResponse(CamelModel):
    """Full lesson returned to callers allowed to read it."""

    id: str
    title: str
    body: str
    category: str
    emotional_tag: str
    image: str
    visibility: Visibility
    access_level: AccessLevel
    creator_email: str
    like_count: int
    featured: bool
    reviewed: bool
    created_at: datetime
    updated_at: datetime | None = None


class CreatorSummary(CamelModel):
    """Lightweight author card attached to listed lessons."""

    email: str
    name: str
    photo: str
    lesson_count: int


class LessonListItem(CamelModel):
    """Lesson as shown in listings; locked premium lessons omit the body."""

    id: str
    title: str
    body: str | None
    category: str
    emotional_tag: str
    image: str
    visibility: Visibility
    access_level: AccessLevel
    creator_email: str
    like_count: int
    featured: bool
    reviewed: bool
    created_at: datetime
    locked: bool = False
    creator: CreatorSummary | None = None


class LessonListResponse(CamelModel):
    """Page of lessons with pagination metadata."""

    lessons: list[LessonListItem]
    pagination: Pagination


class LessonCreatedResponse(CamelModel):
    """Acknowledgement returned after creating a lesson."""

    message: str
    lesson_id: str


class LikeToggleResponse(CamelModel):
    """Result of flipping the caller's like on a lesson."""

    liked: bool
    like_count: int


class FavoriteToggleResponse(CamelModel):
    """Result of flipping the caller's favorite on a lesson."""

    favorited: bool


class ModerationFlagsUpdate(CamelModel):
    """Admin moderation flags; absent fields are left untouched."""

    featured: bool | None = None
    reviewed: bool | None = None
