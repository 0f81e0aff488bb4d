"""User-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .common import CamelModel, Pagination


class UserResponse(CamelModel):
    """Full profile of a user as stored locally."""

    id: str
    email: str
    name: str
    photo: str
    role: Literal["user", "admin"]
    is_premium: bool
    premium_since: datetime | None = None
    favorite_lesson_ids: list[str] = Field(default_factory=list)
    created_at: datetime


class IdentityResponse(CamelModel):
    """Resolved caller identity echoed by the auth check endpoint."""

    email: str
    uid: str | None
    role: Literal["user", "admin"]
    is_premium: bool


class AuthCheckResponse(CamelModel):
    """Response of the authentication test endpoint."""

    message: str
    user: IdentityResponse


class ProfileUpdateRequest(CamelModel):
    """Schema for updating the caller's own profile fields."""

    name: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description="Display name (1-100 characters)",
    )
    photo: str | None = Field(None, max_length=2048, description="Profile photo URL")


class UserStatsResponse(CamelModel):
    """Per-user dashboard counters."""

    lessons_created: int
    public_lessons: int
    private_lessons: int
    favorites_saved: int
    likes_received: int


class RoleUpdateRequest(CamelModel):
    """Admin request to change a user's role."""

    role: Literal["user", "admin"]


class UserListResponse(CamelModel):
    """Page of users for the admin dashboard."""

    users: list[UserResponse]
    pagination: Pagination
